"""Schemas for the pasted objective text parser."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class ObjectiveParseRequest(BaseModel):
    text: str = ""


class ParsedObjectiveOut(BaseModel):
    objective: str = ""
    experiment_details: str = ""
    result: str = ""
    conclusion: str = ""
    recommended_action: str = ""


class ObjectiveParseResponse(BaseModel):
    recognized: bool
    objective: Optional[ParsedObjectiveOut] = None
    normalized_text: Optional[str] = None
