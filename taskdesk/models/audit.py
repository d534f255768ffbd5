"""
Audit Model Module

Append-only trail of every mutation made through the service layer. Rows are
inserted in the same transaction as the change they describe and are never
updated or deleted afterwards.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import event
from sqlmodel import SQLModel, Field, AutoString

from taskdesk.core.timeutil import utcnow


class AuditAction(str, Enum):
    create = "create"
    update = "update"
    delete = "delete"


class AuditBase(SQLModel):
    entity_type: str = Field(index=True, max_length=32)  # "user", "project", "task", "comment"
    entity_id: str = Field(index=True, max_length=64)  # stringified id of any entity
    action: AuditAction = Field(sa_type=AutoString)
    actor_user_id: str = Field(foreign_key="users.id", index=True)
    details: Optional[str] = None  # JSON diff or description
    timestamp: datetime = Field(default_factory=utcnow, index=True)


class Audit(AuditBase, table=True):
    __tablename__ = "audit"

    id: Optional[int] = Field(default=None, primary_key=True)


class AuditRead(AuditBase):
    id: int


def _refuse_change(mapper, connection, target):
    raise RuntimeError(f"Audit record {target.id} is immutable")


event.listen(Audit, "before_update", _refuse_change)
event.listen(Audit, "before_delete", _refuse_change)
