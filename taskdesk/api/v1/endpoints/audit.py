from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from taskdesk.api import deps
from taskdesk.models.audit import AuditRead
from taskdesk.models.user import User
from taskdesk.services import audit as audit_service

router = APIRouter()


@router.get("", response_model=List[AuditRead])
def list_audit(
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Read the audit trail, oldest first. Admin only.
    """
    return audit_service.list_audit(
        db, current_user, entity_type=entity_type, entity_id=entity_id, skip=skip, limit=limit
    )
