"""Pydantic schemas consolidating backend API contracts."""

# purpose: aggregate request and response schemas for FastAPI surfaces and services
# status: active

from pydantic import BaseModel

from .lots import (
    LotCombineRequest,
    LotCombineResponse,
    LotExperimentOut,
    LotOut,
    LotUpdate,
)
from .objectives import (
    ObjectiveParseRequest,
    ObjectiveParseResponse,
    ParsedObjectiveOut,
)
from .records import (
    BetCreate,
    BetOut,
    BetUpdate,
    BiocharCreate,
    BiocharOut,
    BiocharUpdate,
    ConductivityCreate,
    ConductivityOut,
    ConductivityUpdate,
    GrapheneCreate,
    GrapheneOut,
    GrapheneRef,
    GrapheneUpdate,
    LotRef,
    RamanCreate,
    RamanOut,
    RamanUpdate,
)
from .reports import (
    GrapheneBrief,
    ReportLinkOut,
    SemReportOut,
    SemReportUpdate,
    UpdateReportOut,
    UpdateReportUpdate,
)


class HealthOut(BaseModel):
    status: str
