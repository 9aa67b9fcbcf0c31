"""Form parsing and graphene linking shared by the report document routes."""

from __future__ import annotations

import json
import os
from datetime import date
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from . import models
from .errors import InvalidRequest

# purpose: normalize multipart form fields and resolve graphene links for SEM and update reports
# status: active
# depends_on: carbonlab.models.Graphene


def parse_form_date(value: Optional[str], field: str) -> Optional[date]:
    if value is None or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise InvalidRequest(f"{field} must be an ISO date", **{field: value}) from exc


def parse_graphene_ids(raw: Optional[str]) -> list[UUID]:
    """Decode the JSON array of graphene ids posted alongside uploaded files."""

    if raw is None or not raw.strip():
        return []
    try:
        values = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidRequest("graphene_ids must be a JSON array") from exc
    if not isinstance(values, list):
        raise InvalidRequest("graphene_ids must be a JSON array")
    ids: list[UUID] = []
    for value in values:
        try:
            graphene_id = UUID(str(value))
        except ValueError as exc:
            raise InvalidRequest("invalid graphene id", graphene_id=str(value)) from exc
        if graphene_id not in ids:
            ids.append(graphene_id)
    return ids


def load_graphene(db: Session, graphene_ids: Iterable[UUID]) -> list[models.Graphene]:
    ids = list(dict.fromkeys(graphene_ids))
    if not ids:
        return []
    records = db.query(models.Graphene).filter(models.Graphene.id.in_(ids)).all()
    missing = sorted(str(i) for i in set(ids) - {record.id for record in records})
    if missing:
        raise InvalidRequest("unknown graphene ids", graphene_ids=missing)
    return records


def stored_filename(storage_path: str) -> str:
    return os.path.basename(storage_path.rstrip("/"))
