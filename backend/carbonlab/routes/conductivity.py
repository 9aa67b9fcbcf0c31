from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session, selectinload
from uuid import UUID

from ..database import get_db
from .. import crud, exports, listing, models, schemas

router = APIRouter(prefix="/api/conductivity", tags=["conductivity"])

_SEARCH_COLUMNS = (
    models.ConductivityTest.graphene_sample,
    models.ConductivityTest.description,
    models.ConductivityTest.comments,
)
_CHRONOLOGICAL = (models.ConductivityTest.test_date, models.ConductivityTest.created_at)
# readings are taken at four pressing loads
_CSV_HEADERS = [
    "Test Date", "Graphene Sample", "Description", "Conductivity 1kN (S/m)",
    "Conductivity 8kN (S/m)", "Conductivity 12kN (S/m)", "Conductivity 20kN (S/m)",
    "Comments", "Created At",
]


@router.get("/", response_model=list[schemas.ConductivityOut])
def list_conductivity_tests(
    search: str | None = None,
    sort_by: str = listing.CHRONOLOGICAL,
    order: str = "desc",
    db: Session = Depends(get_db),
):
    query = db.query(models.ConductivityTest).options(
        selectinload(models.ConductivityTest.graphene_ref)
    )
    query = listing.apply_search(query, search, _SEARCH_COLUMNS)
    query = listing.apply_ordering(
        query, models.ConductivityTest, sort_by, order, _CHRONOLOGICAL
    )
    return query.all()


@router.get("/export/csv")
def export_conductivity_tests(db: Session = Depends(get_db)):
    records = (
        db.query(models.ConductivityTest)
        .order_by(models.ConductivityTest.created_at.desc())
        .all()
    )
    rows = (
        [
            t.test_date, t.graphene_sample, t.description, t.conductivity_1kn,
            t.conductivity_8kn, t.conductivity_12kn, t.conductivity_20kn,
            t.comments, t.created_at,
        ]
        for t in records
    )
    return exports.csv_response(_CSV_HEADERS, rows, "conductivity_export.csv")


@router.get("/{test_id}", response_model=schemas.ConductivityOut)
def get_conductivity_test(test_id: UUID, db: Session = Depends(get_db)):
    return crud.get_or_404(db, models.ConductivityTest, test_id, "Conductivity test")


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=schemas.ConductivityOut)
def create_conductivity_test(
    payload: schemas.ConductivityCreate,
    db: Session = Depends(get_db),
):
    crud.ensure_graphene_sample(db, payload.graphene_sample)
    record = models.ConductivityTest(**payload.model_dump())
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@router.put("/{test_id}", response_model=schemas.ConductivityOut)
def update_conductivity_test(
    test_id: UUID,
    payload: schemas.ConductivityUpdate,
    db: Session = Depends(get_db),
):
    record = crud.get_or_404(db, models.ConductivityTest, test_id, "Conductivity test")
    changes = payload.model_dump(exclude_unset=True)
    crud.ensure_graphene_sample(db, changes.get("graphene_sample"))
    for key, value in changes.items():
        setattr(record, key, value)
    db.commit()
    db.refresh(record)
    return record


@router.delete("/{test_id}", status_code=204)
def delete_conductivity_test(test_id: UUID, db: Session = Depends(get_db)):
    record = crud.get_or_404(db, models.ConductivityTest, test_id, "Conductivity test")
    db.delete(record)
    db.commit()
    return Response(status_code=204)
