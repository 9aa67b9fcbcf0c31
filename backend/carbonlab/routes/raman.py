from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session, selectinload
from uuid import UUID
import io

from ..database import get_db
from .. import crud, exports, listing, models, schemas, storage
from ..errors import RecordNotFound
from ..logging_config import get_logger

router = APIRouter(prefix="/api/raman", tags=["raman"])
logger = get_logger(__name__)

REPORT_NAMESPACE = "raman-reports"
_BANDS = ("2d", "g", "d", "dg")

_SEARCH_COLUMNS = (
    models.RamanTest.graphene_sample,
    models.RamanTest.research_team,
    models.RamanTest.testing_lab,
    models.RamanTest.comments,
)
_CHRONOLOGICAL = (models.RamanTest.test_date, models.RamanTest.created_at)
_CSV_HEADERS = [
    "Test Date", "Graphene Sample", "Research Team", "Testing Lab",
    "Integration Range 2D", "Integration Range G", "Integration Range D",
    "Integration Range D/G", "Integral Typ A 2D", "Integral Typ A G",
    "Integral Typ A D", "Integral Typ A D/G", "Peak High Typ J 2D",
    "Peak High Typ J G", "Peak High Typ J D", "Peak High Typ J D/G",
    "Report", "Comments", "Created At",
]


def _csv_row(test: models.RamanTest) -> list:
    row = [test.test_date, test.graphene_sample, test.research_team, test.testing_lab]
    row += [
        exports.value_pair(
            getattr(test, f"integration_range_{band}_low"),
            getattr(test, f"integration_range_{band}_high"),
            separator="-",
        )
        for band in _BANDS
    ]
    for prefix in ("integral_typ_a", "peak_high_typ_j"):
        row += [
            exports.value_pair(
                getattr(test, f"{prefix}_{band}_1"),
                getattr(test, f"{prefix}_{band}_2"),
            )
            for band in _BANDS
        ]
    row += [test.raman_report_name, test.comments, test.created_at]
    return row


@router.get("/", response_model=list[schemas.RamanOut])
def list_raman_tests(
    search: str | None = None,
    sort_by: str = listing.CHRONOLOGICAL,
    order: str = "desc",
    db: Session = Depends(get_db),
):
    query = db.query(models.RamanTest).options(selectinload(models.RamanTest.graphene_ref))
    query = listing.apply_search(query, search, _SEARCH_COLUMNS)
    query = listing.apply_ordering(query, models.RamanTest, sort_by, order, _CHRONOLOGICAL)
    return query.all()


@router.get("/export/csv")
def export_raman_tests(db: Session = Depends(get_db)):
    records = db.query(models.RamanTest).order_by(models.RamanTest.created_at.desc()).all()
    return exports.csv_response(
        _CSV_HEADERS, (_csv_row(t) for t in records), "raman_export.csv"
    )


@router.get("/{test_id}", response_model=schemas.RamanOut)
def get_raman_test(test_id: UUID, db: Session = Depends(get_db)):
    return crud.get_or_404(db, models.RamanTest, test_id, "Raman test")


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=schemas.RamanOut)
def create_raman_test(payload: schemas.RamanCreate, db: Session = Depends(get_db)):
    crud.ensure_graphene_sample(db, payload.graphene_sample)
    record = models.RamanTest(**payload.model_dump())
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@router.put("/{test_id}", response_model=schemas.RamanOut)
def update_raman_test(
    test_id: UUID,
    payload: schemas.RamanUpdate,
    db: Session = Depends(get_db),
):
    record = crud.get_or_404(db, models.RamanTest, test_id, "Raman test")
    changes = payload.model_dump(exclude_unset=True)
    crud.ensure_graphene_sample(db, changes.get("graphene_sample"))
    for key, value in changes.items():
        setattr(record, key, value)
    db.commit()
    db.refresh(record)
    return record


@router.delete("/{test_id}", status_code=204)
def delete_raman_test(test_id: UUID, db: Session = Depends(get_db)):
    record = crud.get_or_404(db, models.RamanTest, test_id, "Raman test")
    report_path = record.raman_report_path
    db.delete(record)
    db.commit()
    storage.delete_binary_payload(report_path)
    return Response(status_code=204)


@router.post("/{test_id}/report", response_model=schemas.RamanOut)
async def upload_raman_report(
    test_id: UUID,
    report: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    record = crud.get_or_404(db, models.RamanTest, test_id, "Raman test")
    data = await report.read()
    storage.ensure_pdf(report.content_type, data)
    storage_path, _ = storage.save_binary_payload(
        data,
        report.filename,
        content_type=storage.PDF_CONTENT_TYPE,
        namespace=REPORT_NAMESPACE,
    )
    previous = record.raman_report_path
    record.raman_report_path = storage_path
    record.raman_report_name = report.filename
    try:
        db.commit()
    except Exception:
        db.rollback()
        storage.delete_binary_payload(storage_path)
        raise
    db.refresh(record)
    if previous and previous != storage_path:
        storage.delete_binary_payload(previous)
    return record


@router.delete("/{test_id}/report", response_model=schemas.RamanOut)
def delete_raman_report(test_id: UUID, db: Session = Depends(get_db)):
    record = crud.get_or_404(db, models.RamanTest, test_id, "Raman test")
    if not record.raman_report_path:
        raise RecordNotFound("Raman report not found", id=str(test_id))
    previous = record.raman_report_path
    record.raman_report_path = None
    record.raman_report_name = None
    db.commit()
    db.refresh(record)
    storage.delete_binary_payload(previous)
    return record


@router.get("/{test_id}/report")
def download_raman_report(test_id: UUID, db: Session = Depends(get_db)):
    record = crud.get_or_404(db, models.RamanTest, test_id, "Raman test")
    if not record.raman_report_path:
        raise RecordNotFound("Raman report not found", id=str(test_id))
    try:
        data = storage.load_binary_payload(record.raman_report_path)
    except FileNotFoundError as exc:
        logger.warning("report_file_missing", storage_path=record.raman_report_path)
        raise RecordNotFound("Raman report file missing", id=str(test_id)) from exc
    filename = record.raman_report_name or "raman_report.pdf"
    return StreamingResponse(
        io.BytesIO(data),
        media_type=storage.PDF_CONTENT_TYPE,
        headers={"Content-Disposition": exports.attachment_header(filename)},
    )
