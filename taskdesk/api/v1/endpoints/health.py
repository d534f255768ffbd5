from typing import Any

from fastapi import APIRouter, Depends
from sqlmodel import Session, text

from taskdesk.api import deps

router = APIRouter()


@router.get("", response_model=dict[str, Any])
def health_check() -> Any:
    """
    Health check endpoint.
    """
    return {"status": "ok"}


@router.get("/db", response_model=dict[str, Any])
def database_check(db: Session = Depends(deps.get_db)) -> Any:
    """
    Round trip to the database. Answers 503 when the store is unreachable.
    """
    db.exec(text("SELECT 1"))
    return {"status": "ok"}
