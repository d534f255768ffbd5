"""
Audit Trail Service

Mutating services call `record` before committing, so the audit row joins the
mutation's transaction: both are written or neither is.
"""
import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from taskdesk.models.audit import Audit, AuditAction
from taskdesk.models.user import User
from taskdesk.services.policy import Operation, authorize


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return str(value)


def diff(before: Dict[str, Any], after: Dict[str, Any]) -> Dict[str, List[Any]]:
    """Fields whose value changed, as {field: [old, new]}."""
    return {
        key: [before.get(key), value]
        for key, value in after.items()
        if before.get(key) != value
    }


def record(
    db: Session,
    actor: User,
    entity_type: str,
    entity_id: Any,
    action: AuditAction,
    details: Any = None,
) -> Audit:
    """Stage one audit row in the caller's session. The caller commits."""
    if details is not None and not isinstance(details, str):
        details = json.dumps(details, default=_json_default, sort_keys=True)
    entry = Audit(
        entity_type=entity_type,
        entity_id=str(entity_id),
        action=action,
        actor_user_id=actor.id,
        details=details,
    )
    db.add(entry)
    return entry


def list_audit(
    db: Session,
    actor: User,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Audit]:
    authorize(actor, Operation.AUDIT_READ)
    statement = select(Audit)
    if entity_type:
        statement = statement.where(Audit.entity_type == entity_type)
    if entity_id is not None:
        statement = statement.where(Audit.entity_id == str(entity_id))
    statement = statement.order_by(Audit.id).offset(skip).limit(limit)
    return list(db.exec(statement).all())
