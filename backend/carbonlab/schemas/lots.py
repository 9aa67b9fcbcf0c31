"""Schemas for biochar lots and the lot combination request."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LotCombineRequest(BaseModel):
    # the lab UI posts camelCase keys; snake_case is accepted too
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    lot_number: Optional[str] = None
    lot_name: Optional[str] = None
    description: Optional[str] = None
    experiment_ids: Optional[list[UUID]] = None


class LotExperimentOut(BaseModel):
    id: UUID
    experiment_number: str
    model_config = ConfigDict(from_attributes=True)


class LotOut(BaseModel):
    id: UUID
    lot_number: str
    lot_name: Optional[str] = None
    description: Optional[str] = None
    experiment_count: int = 0
    experiments: list[LotExperimentOut] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class LotCombineResponse(BaseModel):
    success: bool = True
    lot: LotOut


class LotUpdate(BaseModel):
    lot_name: Optional[str] = None
    description: Optional[str] = None
