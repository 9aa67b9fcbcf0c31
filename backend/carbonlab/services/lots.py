"""Biochar lot services."""

from __future__ import annotations

from typing import Iterable
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from ..errors import Conflict, ExperimentsAlreadyAssigned, InvalidRequest, RecordNotFound, StorageError
from ..logging_config import get_logger

# purpose: group finished biochar experiments under a lot inside one transaction
# status: active
# depends_on: carbonlab.models.BiocharLot, carbonlab.models.Biochar

logger = get_logger(__name__)


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _unique_ids(experiment_ids: Iterable[UUID]) -> list[UUID]:
    seen: dict[UUID, None] = {}
    for experiment_id in experiment_ids:
        seen.setdefault(experiment_id, None)
    return list(seen)


def combine_into_lot(
    db: Session,
    lot_number: str | None,
    lot_name: str | None,
    description: str | None,
    experiment_ids: Iterable[UUID] | None,
) -> models.BiocharLot:
    """Create a lot and assign the given biochar experiments to it.

    Runs inside the caller's transaction and flushes but does not commit.
    Any failure rolls the session back before raising, so nothing from this
    call survives. Raises ``InvalidRequest`` for bad input, ``Conflict`` when
    the lot number is taken or an experiment already has a lot, and
    ``StorageError`` for anything the database rejects unexpectedly.
    """

    ids = _unique_ids(experiment_ids or [])
    if not ids:
        raise InvalidRequest("at least one experiment required")
    lot_number = (lot_number or "").strip()
    if not lot_number:
        raise InvalidRequest("lot number required")

    try:
        existing = (
            db.query(models.BiocharLot.id)
            .filter(models.BiocharLot.lot_number == lot_number)
            .first()
        )
        if existing is not None:
            raise Conflict("lot number already exists", lot_number=lot_number)

        experiments = (
            db.query(models.Biochar)
            .filter(models.Biochar.id.in_(ids))
            .with_for_update()
            .all()
        )
        missing = sorted(str(i) for i in set(ids) - {exp.id for exp in experiments})
        if missing:
            raise InvalidRequest("unknown experiment ids", experiment_ids=missing)

        assigned = sorted(
            (exp for exp in experiments if exp.lot_number is not None),
            key=lambda exp: exp.experiment_number,
        )
        if assigned:
            raise ExperimentsAlreadyAssigned(
                [exp.experiment_number for exp in assigned],
                [str(exp.id) for exp in assigned],
            )

        lot = models.BiocharLot(
            lot_number=lot_number,
            lot_name=_optional_text(lot_name),
            description=_optional_text(description),
        )
        db.add(lot)
        db.flush()

        # the lot_number IS NULL guard catches assignments that raced the read above
        updated = db.execute(
            sa.update(models.Biochar)
            .where(models.Biochar.id.in_(ids), models.Biochar.lot_number.is_(None))
            .values(lot_number=lot_number)
            .execution_options(synchronize_session=False)
        ).rowcount
        if updated != len(ids):
            raise Conflict("some experiments already assigned", lot_number=lot_number)
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("lot_combination_rejected", lot_number=lot_number, reason="integrity")
        raise Conflict("lot number already exists", lot_number=lot_number) from exc
    except (InvalidRequest, Conflict) as exc:
        db.rollback()
        logger.info("lot_combination_rejected", lot_number=lot_number, reason=exc.message)
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("lot_combination_failed", lot_number=lot_number, error=str(exc))
        raise StorageError("could not create lot") from exc

    for experiment in experiments:
        db.expire(experiment)
    logger.info("lot_created", lot_number=lot_number, experiments=len(ids))
    return lot


def list_lots(db: Session) -> list[models.BiocharLot]:
    return (
        db.query(models.BiocharLot)
        .options(selectinload(models.BiocharLot.experiments))
        .order_by(models.BiocharLot.created_at.desc())
        .all()
    )


def get_lot(db: Session, lot_number: str) -> models.BiocharLot:
    lot = (
        db.query(models.BiocharLot)
        .filter(models.BiocharLot.lot_number == lot_number)
        .first()
    )
    if lot is None:
        raise RecordNotFound("lot not found", lot_number=lot_number)
    return lot


def update_lot_metadata(
    db: Session,
    lot_number: str,
    payload: schemas.LotUpdate,
) -> models.BiocharLot:
    """Change the display name or description; the lot number never changes."""

    lot = get_lot(db, lot_number)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(lot, key, _optional_text(value))
    db.flush()
    return lot
