from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..database import get_db
from .. import schemas

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=schemas.HealthOut)
def health(db: Session = Depends(get_db)):
    db.execute(text("SELECT 1"))
    return {"status": "ok"}
