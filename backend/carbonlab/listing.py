"""Search and ordering helpers shared by the record list endpoints."""

from __future__ import annotations

from typing import Sequence

import sqlalchemy as sa
from sqlalchemy.orm import Query

from .errors import InvalidRequest

CHRONOLOGICAL = "chronological"


def apply_search(query: Query, search: str | None, columns: Sequence[sa.Column]) -> Query:
    """Case-insensitive substring match across the given text columns."""

    if not search:
        return query
    pattern = f"%{search}%"
    return query.filter(sa.or_(*(column.ilike(pattern) for column in columns)))


def apply_ordering(
    query: Query,
    model,
    sort_by: str,
    order: str,
    chronological: Sequence[sa.Column],
) -> Query:
    """Order by the chronological key set or by a single named column."""

    if order not in ("asc", "desc"):
        raise InvalidRequest("order must be 'asc' or 'desc'", order=order)
    if sort_by == CHRONOLOGICAL:
        columns = list(chronological)
    else:
        column = model.__table__.columns.get(sort_by)
        if column is None:
            raise InvalidRequest("unknown sort field", sort_by=sort_by)
        columns = [getattr(model, column.key)]
    direction = sa.asc if order == "asc" else sa.desc
    return query.order_by(*(direction(column).nulls_last() for column in columns))
