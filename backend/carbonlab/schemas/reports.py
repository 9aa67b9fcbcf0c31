"""Schemas for SEM and weekly update report documents."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class GrapheneBrief(BaseModel):
    id: UUID
    experiment_number: str
    species: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class ReportFileOut(BaseModel):
    id: UUID
    filename: str
    original_name: str
    file_path: str
    file_size: Optional[int] = None
    graphene_records: list[GrapheneBrief] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class SemReportOut(ReportFileOut):
    report_date: Optional[date] = None


class SemReportUpdate(BaseModel):
    report_date: Optional[date] = None
    graphene_ids: Optional[list[UUID]] = None


class UpdateReportOut(ReportFileOut):
    description: Optional[str] = None
    week_of: Optional[date] = None


class UpdateReportUpdate(BaseModel):
    description: Optional[str] = None
    week_of: Optional[date] = None
    graphene_ids: Optional[list[UUID]] = None


class ReportLinkOut(BaseModel):
    report_id: UUID
    graphene: GrapheneBrief
