import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import ReadyOut

router = APIRouter()
logger = logging.getLogger("kitchen_stories.ready")


@router.get("/ready", response_model=ReadyOut)
def ready(db: Session = Depends(get_db)):
    db_ok = False
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError as e:
        logger.warning(f"Readiness check failed: {e}")
    return ReadyOut(ok=True, db_ok=db_ok)
