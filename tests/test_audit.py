from __future__ import annotations

import json

import pytest
from sqlmodel import func, select

from taskdesk.core.errors import AuthorizationError
from taskdesk.models.audit import Audit, AuditAction
from taskdesk.models.task import Task, TaskCreate, TaskStatus, TaskUpdate
from taskdesk.services import audit as audit_service
from taskdesk.services import tasks as task_service


def _audit_count(session) -> int:
    return session.exec(select(func.count()).select_from(Audit)).one()


def test_each_mutation_appends_one_record(session, manager, project):
    start = _audit_count(session)

    task = task_service.create_task(session, manager, project.id, TaskCreate(title="Track me"))
    assert _audit_count(session) == start + 1

    task_service.update_task(session, manager, task.id, TaskUpdate(status=TaskStatus.done))
    assert _audit_count(session) == start + 2

    task_service.delete_task(session, manager, task.id)
    assert _audit_count(session) == start + 3


def test_update_details_hold_the_diff(session, manager, project):
    task = task_service.create_task(session, manager, project.id, TaskCreate(title="Old"))
    task_service.update_task(session, manager, task.id, TaskUpdate(title="New"))

    entry = session.exec(
        select(Audit).where(Audit.entity_type == "task", Audit.action == AuditAction.update)
    ).one()
    details = json.loads(entry.details)
    assert details["title"] == ["Old", "New"]
    assert "description" not in details


def test_denied_calls_are_not_audited(session, member, project):
    start = _audit_count(session)
    with pytest.raises(AuthorizationError):
        task_service.create_task(session, member, project.id, TaskCreate(title="x"))
    assert _audit_count(session) == start


def test_audit_failure_rolls_back_the_mutation(session, manager, project, monkeypatch):
    def broken_record(*args, **kwargs):
        raise RuntimeError("audit store full")

    monkeypatch.setattr(audit_service, "record", broken_record)
    with pytest.raises(RuntimeError):
        task_service.create_task(session, manager, project.id, TaskCreate(title="Unaudited"))
    session.rollback()

    assert session.exec(select(Task)).all() == []


def test_records_are_immutable(session, manager, project):
    entry = session.exec(select(Audit)).first()

    entry.details = "rewritten"
    session.add(entry)
    with pytest.raises(RuntimeError, match="immutable"):
        session.commit()
    session.rollback()

    session.delete(entry)
    with pytest.raises(RuntimeError, match="immutable"):
        session.commit()
    session.rollback()


def test_list_audit_is_admin_only(session, admin, manager, project):
    with pytest.raises(AuthorizationError):
        audit_service.list_audit(session, manager)

    entries = audit_service.list_audit(session, admin, entity_type="project", entity_id=str(project.id))
    assert [e.action for e in entries] == ["create"]
