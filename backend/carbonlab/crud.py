"""Lookup and commit helpers shared by the record routes."""

from __future__ import annotations

from typing import Any, TypeVar
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .errors import Conflict, InvalidRequest, RecordNotFound, StorageError

ModelT = TypeVar("ModelT")


def get_or_404(db: Session, model: type[ModelT], record_id: UUID, label: str) -> ModelT:
    record = db.get(model, record_id)
    if record is None:
        raise RecordNotFound(f"{label} not found", id=str(record_id))
    return record


def ensure_unique_number(
    db: Session,
    model: Any,
    experiment_number: str,
    *,
    exclude_id: UUID | None = None,
) -> None:
    query = db.query(model.id).filter(model.experiment_number == experiment_number)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    if query.first() is not None:
        raise Conflict("experiment number already exists", experiment_number=experiment_number)


def ensure_graphene_sample(db: Session, graphene_sample: str | None) -> None:
    """Characterization tests may only point at an existing graphene experiment."""

    if not graphene_sample:
        return
    exists = (
        db.query(models.Graphene.id)
        .filter(models.Graphene.experiment_number == graphene_sample)
        .first()
    )
    if exists is None:
        raise InvalidRequest("unknown graphene sample", graphene_sample=graphene_sample)


def commit_or_conflict(db: Session, message: str, **extra: Any) -> None:
    """Commit with no partial effect on failure.

    A constraint violation becomes a ``Conflict``. Any other database error
    becomes a ``StorageError``.
    """

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict(message, **extra) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("could not save changes") from exc
