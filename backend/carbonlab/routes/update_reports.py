from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session, selectinload
from typing import Optional
from uuid import UUID
import io

from ..database import get_db
from .. import crud, exports, models, report_files, schemas, storage
from ..errors import Conflict, RecordNotFound
from ..logging_config import get_logger

router = APIRouter(prefix="/api/update-reports", tags=["update-reports"])
logger = get_logger(__name__)

REPORT_NAMESPACE = "update-reports"


def _report_query(db: Session):
    return db.query(models.UpdateReport).options(
        selectinload(models.UpdateReport.graphene_links).selectinload(
            models.GrapheneUpdateReport.graphene
        )
    )


def _replace_links(report: models.UpdateReport, graphene: list[models.Graphene]) -> None:
    wanted = {record.id for record in graphene}
    for link in list(report.graphene_links):
        if link.graphene_id not in wanted:
            report.graphene_links.remove(link)
    present = {link.graphene_id for link in report.graphene_links}
    for record in graphene:
        if record.id not in present:
            report.graphene_links.append(models.GrapheneUpdateReport(graphene=record))


@router.get("/", response_model=list[schemas.UpdateReportOut])
def list_update_reports(db: Session = Depends(get_db)):
    return _report_query(db).order_by(models.UpdateReport.created_at.desc()).all()


@router.get("/graphene/{experiment_number}", response_model=list[schemas.UpdateReportOut])
def list_update_reports_for_graphene(experiment_number: str, db: Session = Depends(get_db)):
    graphene = (
        db.query(models.Graphene)
        .filter(models.Graphene.experiment_number == experiment_number)
        .first()
    )
    if graphene is None:
        raise RecordNotFound("Graphene record not found", experiment_number=experiment_number)
    return (
        _report_query(db)
        .join(models.UpdateReport.graphene_links)
        .filter(models.GrapheneUpdateReport.graphene_id == graphene.id)
        .order_by(models.UpdateReport.created_at.desc())
        .all()
    )


@router.get("/{report_id}", response_model=schemas.UpdateReportOut)
def get_update_report(report_id: UUID, db: Session = Depends(get_db)):
    return crud.get_or_404(db, models.UpdateReport, report_id, "Update report")


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=schemas.UpdateReportOut)
async def upload_update_report(
    update_file: UploadFile = File(...),
    description: Optional[str] = Form(None),
    week_of: Optional[str] = Form(None),
    graphene_ids: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    parsed_week = report_files.parse_form_date(week_of, "week_of")
    graphene = report_files.load_graphene(db, report_files.parse_graphene_ids(graphene_ids))
    data = await update_file.read()
    storage.ensure_pdf(update_file.content_type, data, max_bytes=storage.MAX_UPDATE_REPORT_BYTES)

    original_name = update_file.filename or "update.pdf"
    storage_path, size = storage.save_binary_payload(
        data,
        original_name,
        content_type=storage.PDF_CONTENT_TYPE,
        namespace=REPORT_NAMESPACE,
    )
    report = models.UpdateReport(
        filename=report_files.stored_filename(storage_path),
        original_name=original_name,
        file_path=storage_path,
        file_size=size,
        description=(description or "").strip() or None,
        week_of=parsed_week,
    )
    _replace_links(report, graphene)
    db.add(report)
    try:
        db.commit()
    except Exception:
        db.rollback()
        storage.delete_binary_payload(storage_path)
        raise
    db.refresh(report)
    logger.info("update_report_uploaded", report_id=str(report.id), graphene=len(graphene))
    return report


@router.put("/{report_id}", response_model=schemas.UpdateReportOut)
def update_update_report(
    report_id: UUID,
    payload: schemas.UpdateReportUpdate,
    db: Session = Depends(get_db),
):
    report = crud.get_or_404(db, models.UpdateReport, report_id, "Update report")
    changes = payload.model_dump(exclude_unset=True)
    if "description" in changes:
        report.description = (changes["description"] or "").strip() or None
    if "week_of" in changes:
        report.week_of = changes["week_of"]
    if changes.get("graphene_ids") is not None:
        _replace_links(report, report_files.load_graphene(db, changes["graphene_ids"]))
    db.commit()
    db.refresh(report)
    return report


@router.delete("/{report_id}", status_code=204)
def delete_update_report(report_id: UUID, db: Session = Depends(get_db)):
    report = crud.get_or_404(db, models.UpdateReport, report_id, "Update report")
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
    report = crud.get_or_404(db, models.UpdateReport, report_id, "Update report")
    graphene = crud.get_or_404(db, models.Graphene, graphene_id, "Graphene record")
    if db.get(models.GrapheneUpdateReport, (graphene.id, report.id)) is not None:
        raise Conflict("association already exists", graphene_id=str(graphene_id))
    db.add(models.GrapheneUpdateReport(graphene_id=graphene.id, update_report_id=report.id))
    crud.commit_or_conflict(db, "association already exists", graphene_id=str(graphene_id))
    return schemas.ReportLinkOut(
        report_id=report.id, graphene=schemas.GrapheneBrief.model_validate(graphene)
    )


@router.delete("/{report_id}/graphene/{graphene_id}", status_code=204)
def unlink_graphene(report_id: UUID, graphene_id: UUID, db: Session = Depends(get_db)):
    crud.get_or_404(db, models.UpdateReport, report_id, "Update report")
    link = db.get(models.GrapheneUpdateReport, (graphene_id, report_id))
    if link is not None:
        db.delete(link)
        db.commit()
    return Response(status_code=204)


@router.get("/{report_id}/file")
def download_update_report(report_id: UUID, db: Session = Depends(get_db)):
    report = crud.get_or_404(db, models.UpdateReport, report_id, "Update report")
    try:
        data = storage.load_binary_payload(report.file_path)
    except FileNotFoundError as exc:
        logger.warning("report_file_missing", storage_path=report.file_path)
        raise RecordNotFound("Update report file missing", id=str(report_id)) from exc
    return StreamingResponse(
        io.BytesIO(data),
        media_type=storage.PDF_CONTENT_TYPE,
        headers={"Content-Disposition": exports.attachment_header(report.original_name)},
    )
