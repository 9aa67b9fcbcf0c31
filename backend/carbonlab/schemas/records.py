"""Pydantic schemas for biochar, graphene, and characterization records."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_DATE_FIELDS = ("experiment_date", "test_date")


class RecordPayload(BaseModel):
    """Base for record payloads posted by the lab forms."""

    @model_validator(mode="before")
    @classmethod
    def _normalise_form_values(cls, data: Any) -> Any:
        # forms submit "" for untouched inputs and a date_unknown checkbox
        if not isinstance(data, dict):
            return data
        cleaned = {key: (None if value == "" else value) for key, value in data.items()}
        if cleaned.pop("date_unknown", False):
            for field in _DATE_FIELDS:
                if field in cls.model_fields:
                    cleaned[field] = None
        return cleaned


class GrapheneRef(BaseModel):
    experiment_number: str
    species: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class LotRef(BaseModel):
    lot_number: str
    lot_name: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class BiocharFields(RecordPayload):
    test_order: Optional[int] = None
    experiment_date: Optional[date] = None
    reactor: Optional[str] = None
    raw_material: Optional[str] = None
    starting_amount: Optional[float] = None
    acid_amount: Optional[float] = None
    acid_concentration: Optional[float] = None
    acid_molarity: Optional[float] = None
    acid_type: Optional[str] = None
    temperature: Optional[float] = None
    time: Optional[float] = None
    pressure_initial: Optional[float] = None
    pressure_final: Optional[float] = None
    wash_amount: Optional[float] = None
    wash_medium: Optional[str] = None
    output: Optional[float] = None
    drying_temp: Optional[float] = None
    kft_percentage: Optional[float] = None
    comments: Optional[str] = None


class BiocharCreate(BiocharFields):
    experiment_number: str = Field(min_length=1)

    @field_validator("experiment_number")
    @classmethod
    def _strip_number(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("experiment number required")
        return value


class BiocharUpdate(BiocharFields):
    experiment_number: Optional[str] = None

    @field_validator("experiment_number")
    @classmethod
    def _strip_number(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("experiment number cannot be blank")
        return value


class BiocharOut(BiocharFields):
    id: UUID
    experiment_number: str
    lot_number: Optional[str] = None
    graphene_count: int = 0
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class GrapheneFields(RecordPayload):
    test_order: Optional[int] = None
    experiment_date: Optional[date] = None
    oven: Optional[str] = None
    quantity: Optional[float] = None
    biochar_experiment: Optional[str] = None
    biochar_lot_number: Optional[str] = None
    base_amount: Optional[float] = None
    base_type: Optional[str] = None
    base_concentration: Optional[float] = None
    grinding_method: Optional[str] = None
    grinding_time: Optional[float] = None
    homogeneous: Optional[bool] = None
    gas: Optional[str] = None
    temp_rate: Optional[str] = None
    temp_max: Optional[float] = None
    time: Optional[float] = None
    wash_amount: Optional[float] = None
    wash_solution: Optional[str] = None
    wash_concentration: Optional[float] = None
    wash_water: Optional[str] = None
    drying_temp: Optional[float] = None
    drying_atmosphere: Optional[str] = None
    drying_pressure: Optional[str] = None
    volume_ml: Optional[float] = None
    density: Optional[float] = None
    species: Optional[str] = None
    appearance_tags: list[str] = Field(default_factory=list)
    output: Optional[float] = None
    comments: Optional[str] = None

    @model_validator(mode="after")
    def _single_biochar_source(self) -> "GrapheneFields":
        if self.biochar_experiment and self.biochar_lot_number:
            raise ValueError("graphene source is either a biochar experiment or a lot, not both")
        return self


class GrapheneCreate(GrapheneFields):
    experiment_number: str = Field(min_length=1)

    @field_validator("experiment_number")
    @classmethod
    def _strip_number(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("experiment number required")
        return value


class GrapheneUpdate(GrapheneFields):
    experiment_number: Optional[str] = None
    appearance_tags: Optional[list[str]] = None


class GrapheneOut(GrapheneFields):
    id: UUID
    experiment_number: str
    appearance_tags: Optional[list[str]] = None
    biochar_lot: Optional[LotRef] = None
    objective: Optional[str] = ""
    experiment_details: Optional[str] = ""
    result: Optional[str] = ""
    conclusion: Optional[str] = ""
    recommended_action: Optional[str] = ""
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class BetFields(RecordPayload):
    test_date: Optional[date] = None
    graphene_sample: Optional[str] = None
    multipoint_bet_area: Optional[float] = None
    langmuir_surface_area: Optional[float] = None
    species: Optional[str] = None
    comments: Optional[str] = None


class BetCreate(BetFields):
    pass


class BetUpdate(BetFields):
    pass


class BetOut(BetFields):
    id: UUID
    graphene_ref: Optional[GrapheneRef] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class ConductivityFields(RecordPayload):
    test_date: Optional[date] = None
    graphene_sample: Optional[str] = None
    description: Optional[str] = None
    conductivity_1kn: Optional[float] = None
    conductivity_8kn: Optional[float] = None
    conductivity_12kn: Optional[float] = None
    conductivity_20kn: Optional[float] = None
    comments: Optional[str] = None


class ConductivityCreate(ConductivityFields):
    pass


class ConductivityUpdate(ConductivityFields):
    pass


class ConductivityOut(ConductivityFields):
    id: UUID
    graphene_ref: Optional[GrapheneRef] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class RamanFields(RecordPayload):
    test_date: Optional[date] = None
    graphene_sample: Optional[str] = None
    research_team: Optional[str] = None
    testing_lab: Optional[str] = None
    integration_range_2d_low: Optional[float] = None
    integration_range_2d_high: Optional[float] = None
    integration_range_g_low: Optional[float] = None
    integration_range_g_high: Optional[float] = None
    integration_range_d_low: Optional[float] = None
    integration_range_d_high: Optional[float] = None
    integration_range_dg_low: Optional[float] = None
    integration_range_dg_high: Optional[float] = None
    integral_typ_a_2d_1: Optional[float] = None
    integral_typ_a_2d_2: Optional[float] = None
    integral_typ_a_g_1: Optional[float] = None
    integral_typ_a_g_2: Optional[float] = None
    integral_typ_a_d_1: Optional[float] = None
    integral_typ_a_d_2: Optional[float] = None
    integral_typ_a_dg_1: Optional[float] = None
    integral_typ_a_dg_2: Optional[float] = None
    peak_high_typ_j_2d_1: Optional[float] = None
    peak_high_typ_j_2d_2: Optional[float] = None
    peak_high_typ_j_g_1: Optional[float] = None
    peak_high_typ_j_g_2: Optional[float] = None
    peak_high_typ_j_d_1: Optional[float] = None
    peak_high_typ_j_d_2: Optional[float] = None
    peak_high_typ_j_dg_1: Optional[float] = None
    peak_high_typ_j_dg_2: Optional[float] = None
    comments: Optional[str] = None


class RamanCreate(RamanFields):
    pass


class RamanUpdate(RamanFields):
    pass


class RamanOut(RamanFields):
    id: UUID
    graphene_ref: Optional[GrapheneRef] = None
    raman_report_name: Optional[str] = None
    has_report: bool = False
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)
