from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session, selectinload
from uuid import UUID

from ..database import get_db
from .. import crud, exports, listing, models, schemas

router = APIRouter(prefix="/api/bet", tags=["bet"])

_SEARCH_COLUMNS = (
    models.BetTest.graphene_sample,
    models.BetTest.species,
    models.BetTest.comments,
)
_CHRONOLOGICAL = (models.BetTest.test_date, models.BetTest.created_at)
_CSV_HEADERS = [
    "Test Date", "Graphene Sample", "Multipoint BET Area (m²/g)",
    "Langmuir Surface Area (m²/g)", "Species", "Comments", "Created At",
]


@router.get("/", response_model=list[schemas.BetOut])
def list_bet_tests(
    search: str | None = None,
    sort_by: str = listing.CHRONOLOGICAL,
    order: str = "asc",
    db: Session = Depends(get_db),
):
    query = db.query(models.BetTest).options(selectinload(models.BetTest.graphene_ref))
    query = listing.apply_search(query, search, _SEARCH_COLUMNS)
    query = listing.apply_ordering(query, models.BetTest, sort_by, order, _CHRONOLOGICAL)
    return query.all()


@router.get("/export/csv")
def export_bet_tests(db: Session = Depends(get_db)):
    records = db.query(models.BetTest).order_by(models.BetTest.created_at.desc()).all()
    rows = (
        [
            t.test_date, t.graphene_sample, t.multipoint_bet_area,
            t.langmuir_surface_area, t.species, t.comments, t.created_at,
        ]
        for t in records
    )
    return exports.csv_response(_CSV_HEADERS, rows, "bet_export.csv")


@router.get("/{test_id}", response_model=schemas.BetOut)
def get_bet_test(test_id: UUID, db: Session = Depends(get_db)):
    return crud.get_or_404(db, models.BetTest, test_id, "BET test")


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=schemas.BetOut)
def create_bet_test(payload: schemas.BetCreate, db: Session = Depends(get_db)):
    crud.ensure_graphene_sample(db, payload.graphene_sample)
    record = models.BetTest(**payload.model_dump())
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@router.put("/{test_id}", response_model=schemas.BetOut)
def update_bet_test(
    test_id: UUID,
    payload: schemas.BetUpdate,
    db: Session = Depends(get_db),
):
    record = crud.get_or_404(db, models.BetTest, test_id, "BET test")
    changes = payload.model_dump(exclude_unset=True)
    crud.ensure_graphene_sample(db, changes.get("graphene_sample"))
    for key, value in changes.items():
        setattr(record, key, value)
    db.commit()
    db.refresh(record)
    return record


@router.delete("/{test_id}", status_code=204)
def delete_bet_test(test_id: UUID, db: Session = Depends(get_db)):
    record = crud.get_or_404(db, models.BetTest, test_id, "BET test")
    db.delete(record)
    db.commit()
    return Response(status_code=204)
