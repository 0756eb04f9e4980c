from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from core.config import get_settings
from core.database import get_db

router = APIRouter(tags=["system"])


@router.get("/health")
async def health(db: Session = Depends(get_db)):
    db.execute(text("SELECT 1"))
    settings = get_settings()
    return {"status": "ok", "app": settings.APP_NAME, "version": settings.APP_VERSION}
