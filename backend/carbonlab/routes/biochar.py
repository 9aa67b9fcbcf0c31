from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session, selectinload
from uuid import UUID

from ..database import get_db
from .. import crud, exports, listing, models, schemas
from ..errors import LabDataError, to_http
from ..logging_config import get_logger
from ..services import lots

router = APIRouter(prefix="/api/biochar", tags=["biochar"])
logger = get_logger(__name__)

_SEARCH_COLUMNS = (
    models.Biochar.experiment_number,
    models.Biochar.reactor,
    models.Biochar.raw_material,
    models.Biochar.comments,
)
_CHRONOLOGICAL = (
    models.Biochar.test_order,
    models.Biochar.experiment_date,
    models.Biochar.created_at,
)
_CSV_HEADERS = [
    "Experiment #", "Lot Number", "Reactor", "Raw Material", "Starting Amount (g)",
    "Acid Amount (g)", "Acid Concentration (%)", "Acid Molarity (M)", "Acid Type",
    "Temperature (°C)", "Time (hr)", "Pressure Initial (bar)", "Pressure Final (bar)",
    "Wash Amount (g)", "Wash Medium", "Output (g)", "Drying Temp (°C)", "KFT (%)",
    "Comments", "Created At",
]


@router.get("/", response_model=list[schemas.BiocharOut])
def list_biochar(
    search: str | None = None,
    sort_by: str = listing.CHRONOLOGICAL,
    order: str = "asc",
    db: Session = Depends(get_db),
):
    query = db.query(models.Biochar).options(selectinload(models.Biochar.graphene_productions))
    query = listing.apply_search(query, search, _SEARCH_COLUMNS)
    query = listing.apply_ordering(query, models.Biochar, sort_by, order, _CHRONOLOGICAL)
    return query.all()


@router.get("/lots", response_model=list[schemas.LotOut])
def list_lots(db: Session = Depends(get_db)):
    return lots.list_lots(db)


@router.post(
    "/combine-lot",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.LotCombineResponse,
)
def combine_lot(
    payload: schemas.LotCombineRequest,
    db: Session = Depends(get_db),
):
    try:
        lot = lots.combine_into_lot(
            db,
            payload.lot_number,
            payload.lot_name,
            payload.description,
            payload.experiment_ids,
        )
        crud.commit_or_conflict(db, "lot number already exists", lot_number=(payload.lot_number or "").strip())
    except LabDataError as exc:
        raise to_http(exc) from exc
    db.refresh(lot)
    return schemas.LotCombineResponse(lot=schemas.LotOut.model_validate(lot))


@router.get("/lots/{lot_number}", response_model=schemas.LotOut)
def get_lot(lot_number: str, db: Session = Depends(get_db)):
    return lots.get_lot(db, lot_number)


@router.patch("/lots/{lot_number}", response_model=schemas.LotOut)
def update_lot(
    lot_number: str,
    payload: schemas.LotUpdate,
    db: Session = Depends(get_db),
):
    lot = lots.update_lot_metadata(db, lot_number, payload)
    db.commit()
    db.refresh(lot)
    return lot


@router.get("/export/csv")
def export_biochar(db: Session = Depends(get_db)):
    records = db.query(models.Biochar).order_by(models.Biochar.created_at.desc()).all()
    rows = (
        [
            b.experiment_number, b.lot_number, b.reactor, b.raw_material, b.starting_amount,
            b.acid_amount, b.acid_concentration, b.acid_molarity, b.acid_type,
            b.temperature, b.time, b.pressure_initial, b.pressure_final,
            b.wash_amount, b.wash_medium, b.output, b.drying_temp, b.kft_percentage,
            b.comments, b.created_at,
        ]
        for b in records
    )
    return exports.csv_response(_CSV_HEADERS, rows, "biochar_export.csv")


@router.get("/{biochar_id}", response_model=schemas.BiocharOut)
def get_biochar(biochar_id: UUID, db: Session = Depends(get_db)):
    return crud.get_or_404(db, models.Biochar, biochar_id, "Biochar record")


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=schemas.BiocharOut)
def create_biochar(
    payload: schemas.BiocharCreate,
    db: Session = Depends(get_db),
):
    crud.ensure_unique_number(db, models.Biochar, payload.experiment_number)
    record = models.Biochar(**payload.model_dump())
    db.add(record)
    crud.commit_or_conflict(
        db, "experiment number already exists", experiment_number=payload.experiment_number
    )
    db.refresh(record)
    return record


@router.put("/{biochar_id}", response_model=schemas.BiocharOut)
def update_biochar(
    biochar_id: UUID,
    payload: schemas.BiocharUpdate,
    db: Session = Depends(get_db),
):
    record = crud.get_or_404(db, models.Biochar, biochar_id, "Biochar record")
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("experiment_number") is None:
        changes.pop("experiment_number", None)
    else:
        crud.ensure_unique_number(
            db, models.Biochar, changes["experiment_number"], exclude_id=record.id
        )
    for key, value in changes.items():
        setattr(record, key, value)
    crud.commit_or_conflict(db, "experiment number already exists")
    db.refresh(record)
    return record


@router.delete("/{biochar_id}", status_code=204)
def delete_biochar(biochar_id: UUID, db: Session = Depends(get_db)):
    record = crud.get_or_404(db, models.Biochar, biochar_id, "Biochar record")
    experiment_number = record.experiment_number
    db.delete(record)
    db.commit()
    logger.info("biochar_deleted", experiment_number=experiment_number)
    return Response(status_code=204)
