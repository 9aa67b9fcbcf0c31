from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session, selectinload
from uuid import UUID

from ..database import get_db
from .. import crud, exports, listing, models, schemas
from ..errors import InvalidRequest
from ..logging_config import get_logger
from ..objective_parser import FIELD_LABELS, parse_objective_text

router = APIRouter(prefix="/api/graphene", tags=["graphene"])
logger = get_logger(__name__)

_SEARCH_COLUMNS = (
    models.Graphene.experiment_number,
    models.Graphene.biochar_experiment,
    models.Graphene.oven,
    models.Graphene.species,
    models.Graphene.comments,
)
_CHRONOLOGICAL = (
    models.Graphene.test_order,
    models.Graphene.experiment_date,
    models.Graphene.created_at,
)
_CSV_HEADERS = [
    "Experiment #", "Oven", "Quantity", "Biochar Source", "Base Amount (g)",
    "Base Type", "Base Concentration (%)", "Grinding Method", "Grinding Time (min)",
    "Homogeneous", "Gas", "Temp Rate", "Temp Max (°C)", "Time (hr)",
    "Wash Amount (g)", "Wash Solution", "Wash Concentration (%)", "Wash Water",
    "Drying Temp (°C)", "Drying Atmosphere", "Drying Pressure", "Volume (mL)",
    "Density (g/mL)", "Species", "Appearance Tags", "Output (g)", "Comments",
    "Created At",
]


def _check_biochar_source(db: Session, experiment: str | None, lot_number: str | None) -> None:
    if experiment:
        found = (
            db.query(models.Biochar.id)
            .filter(models.Biochar.experiment_number == experiment)
            .first()
        )
        if found is None:
            raise InvalidRequest("unknown biochar experiment", biochar_experiment=experiment)
    if lot_number:
        found = (
            db.query(models.BiocharLot.id)
            .filter(models.BiocharLot.lot_number == lot_number)
            .first()
        )
        if found is None:
            raise InvalidRequest("unknown biochar lot", biochar_lot_number=lot_number)


def _base_query(db: Session):
    return db.query(models.Graphene).options(selectinload(models.Graphene.biochar_lot))


@router.get("/", response_model=list[schemas.GrapheneOut])
def list_graphene(
    search: str | None = None,
    biochar_experiment: str | None = None,
    sort_by: str = listing.CHRONOLOGICAL,
    order: str = "asc",
    db: Session = Depends(get_db),
):
    query = _base_query(db)
    if biochar_experiment:
        query = query.filter(models.Graphene.biochar_experiment == biochar_experiment)
    query = listing.apply_search(query, search, _SEARCH_COLUMNS)
    query = listing.apply_ordering(query, models.Graphene, sort_by, order, _CHRONOLOGICAL)
    return query.all()


@router.get("/by-biochar/{experiment_number}", response_model=list[schemas.GrapheneOut])
def list_graphene_for_biochar(experiment_number: str, db: Session = Depends(get_db)):
    return (
        _base_query(db)
        .filter(models.Graphene.biochar_experiment == experiment_number)
        .order_by(models.Graphene.created_at.desc())
        .all()
    )


@router.get("/export/csv")
def export_graphene(db: Session = Depends(get_db)):
    records = db.query(models.Graphene).order_by(models.Graphene.created_at.desc()).all()
    rows = (
        [
            g.experiment_number, g.oven, g.quantity,
            g.biochar_lot_number or g.biochar_experiment,
            g.base_amount, g.base_type, g.base_concentration, g.grinding_method,
            g.grinding_time, g.homogeneous, g.gas, g.temp_rate, g.temp_max, g.time,
            g.wash_amount, g.wash_solution, g.wash_concentration, g.wash_water,
            g.drying_temp, g.drying_atmosphere, g.drying_pressure, g.volume_ml,
            g.density, g.species, g.appearance_tags or [], g.output, g.comments,
            g.created_at,
        ]
        for g in records
    )
    return exports.csv_response(_CSV_HEADERS, rows, "graphene_export.csv")


@router.get("/{graphene_id}", response_model=schemas.GrapheneOut)
def get_graphene(graphene_id: UUID, db: Session = Depends(get_db)):
    return crud.get_or_404(db, models.Graphene, graphene_id, "Graphene record")


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=schemas.GrapheneOut)
def create_graphene(
    payload: schemas.GrapheneCreate,
    db: Session = Depends(get_db),
):
    crud.ensure_unique_number(db, models.Graphene, payload.experiment_number)
    _check_biochar_source(db, payload.biochar_experiment, payload.biochar_lot_number)
    record = models.Graphene(**payload.model_dump())
    db.add(record)
    crud.commit_or_conflict(
        db, "experiment number already exists", experiment_number=payload.experiment_number
    )
    db.refresh(record)
    return record


@router.put("/{graphene_id}", response_model=schemas.GrapheneOut)
def update_graphene(
    graphene_id: UUID,
    payload: schemas.GrapheneUpdate,
    db: Session = Depends(get_db),
):
    record = crud.get_or_404(db, models.Graphene, graphene_id, "Graphene record")
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("experiment_number") is None:
        changes.pop("experiment_number", None)
    else:
        changes["experiment_number"] = changes["experiment_number"].strip()
        if not changes["experiment_number"]:
            raise InvalidRequest("experiment number cannot be blank")
        crud.ensure_unique_number(
            db, models.Graphene, changes["experiment_number"], exclude_id=record.id
        )
    if "appearance_tags" in changes and changes["appearance_tags"] is None:
        changes["appearance_tags"] = []

    # choosing one kind of source clears the other
    if changes.get("biochar_experiment"):
        changes.setdefault("biochar_lot_number", None)
    if changes.get("biochar_lot_number"):
        changes.setdefault("biochar_experiment", None)
    _check_biochar_source(
        db, changes.get("biochar_experiment"), changes.get("biochar_lot_number")
    )

    for key, value in changes.items():
        setattr(record, key, value)
    crud.commit_or_conflict(db, "experiment number already exists")
    db.refresh(record)
    return record


@router.post("/{graphene_id}/objective", response_model=schemas.GrapheneOut)
def apply_objective_text(
    graphene_id: UUID,
    payload: schemas.ObjectiveParseRequest,
    db: Session = Depends(get_db),
):
    """Replace the objective sections of a record with those parsed from pasted text."""

    record = crud.get_or_404(db, models.Graphene, graphene_id, "Graphene record")
    parsed = parse_objective_text(payload.text)
    if parsed is None:
        raise InvalidRequest("no objective sections recognized")
    for name, _, _ in FIELD_LABELS:
        setattr(record, name, getattr(parsed, name))
    db.commit()
    db.refresh(record)
    logger.info("graphene_objective_updated", experiment_number=record.experiment_number)
    return record


@router.delete("/{graphene_id}", status_code=204)
def delete_graphene(graphene_id: UUID, db: Session = Depends(get_db)):
    record = crud.get_or_404(db, models.Graphene, graphene_id, "Graphene record")
    experiment_number = record.experiment_number
    db.delete(record)
    db.commit()
    logger.info("graphene_deleted", experiment_number=experiment_number)
    return Response(status_code=204)
