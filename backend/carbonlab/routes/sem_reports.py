from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session, selectinload
from typing import Optional
from uuid import UUID
import io

from ..database import get_db
from .. import crud, exports, models, report_files, schemas, storage
from ..errors import Conflict, InvalidRequest, RecordNotFound
from ..logging_config import get_logger

router = APIRouter(prefix="/api/sem-reports", tags=["sem-reports"])
logger = get_logger(__name__)

REPORT_NAMESPACE = "sem-reports"
MAX_FILES = 10


def _report_query(db: Session):
    return db.query(models.SemReport).options(
        selectinload(models.SemReport.graphene_links).selectinload(
            models.GrapheneSemReport.graphene
        )
    )


def _replace_links(report: models.SemReport, graphene: list[models.Graphene]) -> None:
    wanted = {record.id for record in graphene}
    for link in list(report.graphene_links):
        if link.graphene_id not in wanted:
            report.graphene_links.remove(link)
    present = {link.graphene_id for link in report.graphene_links}
    for record in graphene:
        if record.id not in present:
            report.graphene_links.append(models.GrapheneSemReport(graphene=record))


@router.get("/", response_model=list[schemas.SemReportOut])
def list_sem_reports(db: Session = Depends(get_db)):
    return _report_query(db).order_by(models.SemReport.created_at.desc()).all()


@router.get("/graphene/{experiment_number}", response_model=list[schemas.SemReportOut])
def list_sem_reports_for_graphene(experiment_number: str, db: Session = Depends(get_db)):
    return (
        _report_query(db)
        .join(models.SemReport.graphene_links)
        .join(models.GrapheneSemReport.graphene)
        .filter(models.Graphene.experiment_number == experiment_number)
        .order_by(models.SemReport.created_at.desc())
        .all()
    )


@router.get("/{report_id}", response_model=schemas.SemReportOut)
def get_sem_report(report_id: UUID, db: Session = Depends(get_db)):
    return crud.get_or_404(db, models.SemReport, report_id, "SEM report")


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=list[schemas.SemReportOut])
async def upload_sem_reports(
    sem_files: list[UploadFile] = File(...),
    report_date: Optional[str] = Form(None),
    graphene_ids: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    """Store each uploaded PDF as its own report, linked to every listed graphene record."""

    if not sem_files:
        raise InvalidRequest("at least one file required")
    if len(sem_files) > MAX_FILES:
        raise InvalidRequest(f"at most {MAX_FILES} files per upload", count=len(sem_files))
    parsed_date = report_files.parse_form_date(report_date, "report_date")
    graphene = report_files.load_graphene(db, report_files.parse_graphene_ids(graphene_ids))

    payloads = []
    for upload in sem_files:
        data = await upload.read()
        storage.ensure_pdf(upload.content_type, data)
        payloads.append((upload.filename or "report.pdf", data))

    reports = []
    saved_paths = []
    try:
        for original_name, data in payloads:
            storage_path, size = storage.save_binary_payload(
                data,
                original_name,
                content_type=storage.PDF_CONTENT_TYPE,
                namespace=REPORT_NAMESPACE,
            )
            saved_paths.append(storage_path)
            report = models.SemReport(
                filename=report_files.stored_filename(storage_path),
                original_name=original_name,
                file_path=storage_path,
                file_size=size,
                report_date=parsed_date,
            )
            _replace_links(report, graphene)
            db.add(report)
            reports.append(report)
        db.commit()
    except Exception:
        db.rollback()
        for path in saved_paths:
            storage.delete_binary_payload(path)
        raise
    for report in reports:
        db.refresh(report)
    logger.info("sem_reports_uploaded", count=len(reports), graphene=len(graphene))
    return reports


@router.put("/{report_id}", response_model=schemas.SemReportOut)
def update_sem_report(
    report_id: UUID,
    payload: schemas.SemReportUpdate,
    db: Session = Depends(get_db),
):
    report = crud.get_or_404(db, models.SemReport, report_id, "SEM report")
    changes = payload.model_dump(exclude_unset=True)
    if "report_date" in changes:
        report.report_date = changes["report_date"]
    if changes.get("graphene_ids") is not None:
        _replace_links(report, report_files.load_graphene(db, changes["graphene_ids"]))
    db.commit()
    db.refresh(report)
    return report


@router.delete("/{report_id}", status_code=204)
def delete_sem_report(report_id: UUID, db: Session = Depends(get_db)):
    report = crud.get_or_404(db, models.SemReport, report_id, "SEM report")
    file_path = report.file_path
    db.delete(report)
    db.commit()
    storage.delete_binary_payload(file_path)
    return Response(status_code=204)


@router.post(
    "/{report_id}/graphene/{graphene_id}",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.ReportLinkOut,
)
def link_graphene(report_id: UUID, graphene_id: UUID, db: Session = Depends(get_db)):
    report = crud.get_or_404(db, models.SemReport, report_id, "SEM report")
    graphene = crud.get_or_404(db, models.Graphene, graphene_id, "Graphene record")
    if db.get(models.GrapheneSemReport, (graphene.id, report.id)) is not None:
        raise Conflict("association already exists", graphene_id=str(graphene_id))
    db.add(models.GrapheneSemReport(graphene_id=graphene.id, sem_report_id=report.id))
    crud.commit_or_conflict(db, "association already exists", graphene_id=str(graphene_id))
    return schemas.ReportLinkOut(
        report_id=report.id, graphene=schemas.GrapheneBrief.model_validate(graphene)
    )


@router.delete("/{report_id}/graphene/{graphene_id}", status_code=204)
def unlink_graphene(report_id: UUID, graphene_id: UUID, db: Session = Depends(get_db)):
    crud.get_or_404(db, models.SemReport, report_id, "SEM report")
    link = db.get(models.GrapheneSemReport, (graphene_id, report_id))
    if link is not None:
        db.delete(link)
        db.commit()
    return Response(status_code=204)


@router.get("/{report_id}/file")
def download_sem_report(report_id: UUID, db: Session = Depends(get_db)):
    report = crud.get_or_404(db, models.SemReport, report_id, "SEM report")
    try:
        data = storage.load_binary_payload(report.file_path)
    except FileNotFoundError as exc:
        logger.warning("report_file_missing", storage_path=report.file_path)
        raise RecordNotFound("SEM report file missing", id=str(report_id)) from exc
    return StreamingResponse(
        io.BytesIO(data),
        media_type=storage.PDF_CONTENT_TYPE,
        headers={"Content-Disposition": exports.attachment_header(report.original_name)},
    )
