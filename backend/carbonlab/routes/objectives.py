from fastapi import APIRouter

from .. import schemas
from ..objective_parser import format_objective_text, parse_objective_text

router = APIRouter(prefix="/api/objectives", tags=["objectives"])


@router.post("/parse", response_model=schemas.ObjectiveParseResponse)
def parse_objective(payload: schemas.ObjectiveParseRequest):
    parsed = parse_objective_text(payload.text)
    if parsed is None:
        return schemas.ObjectiveParseResponse(recognized=False)
    return schemas.ObjectiveParseResponse(
        recognized=True,
        objective=schemas.ParsedObjectiveOut(**parsed.as_dict()),
        normalized_text=format_objective_text(parsed),
    )
