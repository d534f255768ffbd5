"""
Task Service Module

Task lifecycle within a project: creation, partial updates, soft deletion and
filtered listing. Every mutation re-derives the parent project's status and
appends one audit record in the same transaction.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, or_, select

from taskdesk.core.errors import NotFoundError, ValidationError
from taskdesk.core.timeutil import as_utc, utcnow
from taskdesk.models.audit import AuditAction
from taskdesk.models.task import Task, TaskCreate, TaskFilter, TaskPriority, TaskStatus, TaskUpdate
from taskdesk.models.user import User
from taskdesk.services import audit
from taskdesk.services.policy import Operation, authorize
from taskdesk.services.projects import get_project, refresh_status

logger = logging.getLogger(__name__)


def _snapshot(task: Task) -> dict:
    return {
        "title": task.title,
        "description": task.description,
        "status": TaskStatus(task.status).value,
        "priority": TaskPriority(task.priority).value,
        "due_date": task.due_date.isoformat() if task.due_date else None,
        "assigned_to_user_id": task.assigned_to_user_id,
    }


def _check_assignee(db: Session, user_id: Optional[str]) -> None:
    if user_id is None:
        return
    assignee = db.get(User, user_id)
    if not assignee or not assignee.is_active:
        raise NotFoundError("Assignee not found")


def get_task(db: Session, task_id: int) -> Task:
    """Direct lookup by id. Soft-deleted tasks are returned too."""
    task = db.get(Task, task_id)
    if not task:
        raise NotFoundError("Task not found")
    return task


def get_live_task(db: Session, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if not task or task.deleted_at is not None:
        raise NotFoundError("Task not found")
    return task


def create_task(db: Session, actor: User, project_id: int, task_in: TaskCreate) -> Task:
    """
    Create a task in a live project.

    Raises:
        ValidationError: If the title is empty; nothing is written
        NotFoundError: If the project or the assignee does not exist
        AuthorizationError: Unless the actor is an admin or a manager owning the project
    """
    title = (task_in.title or "").strip()
    if not title:
        raise ValidationError("title required")

    project = get_project(db, project_id)
    authorize(actor, Operation.TASK_CREATE, owner_id=project.owner_user_id)
    _check_assignee(db, task_in.assigned_to_user_id)

    task = Task(**task_in.model_dump(exclude={"title"}), title=title, project_id=project.id)
    db.add(task)
    db.flush()

    details = _snapshot(task)
    status_change = refresh_status(db, project)
    if status_change:
        details["project_status"] = status_change
    audit.record(db, actor, "task", task.id, AuditAction.create, details)
    db.commit()
    db.refresh(task)
    logger.info("User %s created task %s in project %s", actor.id, task.id, project.id)
    return task


def update_task(db: Session, actor: User, task_id: int, task_in: TaskUpdate) -> Task:
    """Apply the fields that were sent and bump updated_at."""
    task = get_live_task(db, task_id)
    project = get_project(db, task.project_id)
    authorize(actor, Operation.TASK_UPDATE, owner_id=project.owner_user_id)

    update_data = task_in.model_dump(exclude_unset=True)
    if "title" in update_data:
        update_data["title"] = (update_data["title"] or "").strip()
        if not update_data["title"]:
            raise ValidationError("title required")
    for field in ("status", "priority"):
        if field in update_data and update_data[field] is None:
            raise ValidationError(f"{field} required")
    if "assigned_to_user_id" in update_data:
        _check_assignee(db, update_data["assigned_to_user_id"])

    before = _snapshot(task)
    for key, value in update_data.items():
        setattr(task, key, value)
    task.updated_at = utcnow()
    db.add(task)

    changes = audit.diff(before, _snapshot(task))
    status_change = refresh_status(db, project)
    if status_change:
        changes["project_status"] = status_change
    audit.record(db, actor, "task", task.id, AuditAction.update, changes)
    db.commit()
    db.refresh(task)
    logger.info("User %s updated task %s: %s", actor.id, task.id, sorted(changes))
    return task


def delete_task(db: Session, actor: User, task_id: int) -> Task:
    """
    Soft-delete a task: deleted_at is stamped and the row is kept.

    Only admins and the managers owning the task's project may delete.
    """
    task = get_live_task(db, task_id)
    project = get_project(db, task.project_id)
    authorize(actor, Operation.TASK_DELETE, owner_id=project.owner_user_id)

    now = utcnow()
    task.deleted_at = now
    task.updated_at = now
    db.add(task)

    details = {"title": task.title}
    status_change = refresh_status(db, project, now)
    if status_change:
        details["project_status"] = status_change
    audit.record(db, actor, "task", task.id, AuditAction.delete, details)
    db.commit()
    db.refresh(task)
    logger.info("User %s deleted task %s", actor.id, task.id)
    return task


def list_tasks_by_project(
    db: Session,
    project_id: int,
    task_filter: Optional[TaskFilter] = None,
    skip: int = 0,
    limit: int = 100,
    now: Optional[datetime] = None,
) -> List[Task]:
    """
    Live tasks of a project matching the filter.

    overdue=True keeps tasks whose due date has passed, overdue=False those
    without a due date or due later.
    """
    get_project(db, project_id)
    task_filter = task_filter or TaskFilter()
    now = as_utc(now) or utcnow()

    statement = select(Task).where(Task.project_id == project_id, Task.deleted_at.is_(None))
    if task_filter.status is not None:
        statement = statement.where(Task.status == task_filter.status)
    if task_filter.priority is not None:
        statement = statement.where(Task.priority == task_filter.priority)
    if task_filter.assigned_to_user_id is not None:
        statement = statement.where(Task.assigned_to_user_id == task_filter.assigned_to_user_id)
    if task_filter.overdue is True:
        statement = statement.where(Task.due_date.is_not(None), Task.due_date < now)
    elif task_filter.overdue is False:
        statement = statement.where(or_(Task.due_date.is_(None), Task.due_date >= now))

    statement = statement.order_by(Task.id).offset(skip).limit(limit)
    return list(db.exec(statement).all())
