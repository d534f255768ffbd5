"""
Project Service Module

Project CRUD, progress computation and the task-derived project status.
Projects are soft-deleted; deleting one also retires its live tasks.
"""
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlmodel import Session, func, select

from taskdesk.core.errors import AuthorizationError, NotFoundError, ValidationError
from taskdesk.core.timeutil import utcnow
from taskdesk.models.audit import AuditAction
from taskdesk.models.project import (
    Project,
    ProjectCreate,
    ProjectProgress,
    ProjectStatus,
    ProjectUpdate,
)
from taskdesk.models.task import Task, TaskStatus
from taskdesk.models.user import User
from taskdesk.services import audit
from taskdesk.services.policy import Operation, authorize

logger = logging.getLogger(__name__)


def _snapshot(project: Project) -> dict:
    return {
        "name": project.name,
        "description": project.description,
        "status": ProjectStatus(project.status).value,
        "owner_user_id": project.owner_user_id,
    }


def _live_owner(db: Session, user_id: str) -> User:
    owner = db.get(User, user_id)
    if not owner or not owner.is_active:
        raise NotFoundError("Owner not found")
    return owner


def get_project(db: Session, project_id: int) -> Project:
    """Fetch a live project. Soft-deleted projects count as missing."""
    project = db.get(Project, project_id)
    if not project or project.deleted_at is not None:
        raise NotFoundError("Project not found")
    return project


def list_projects(
    db: Session,
    owner_user_id: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Project]:
    statement = select(Project).where(Project.deleted_at.is_(None))
    if owner_user_id:
        statement = statement.where(Project.owner_user_id == owner_user_id)
    statement = statement.order_by(Project.id).offset(skip).limit(limit)
    return list(db.exec(statement).all())


def create_project(db: Session, actor: User, project_in: ProjectCreate) -> Project:
    """
    Create a project owned by the caller unless an owner is given.

    Only admins may create projects on behalf of someone else.
    """
    authorize(actor, Operation.PROJECT_CREATE)
    if not (project_in.name or "").strip():
        raise ValidationError("name required")

    owner_id = project_in.owner_user_id or actor.id
    if owner_id != actor.id and not actor.is_privileged:
        raise AuthorizationError("Only admins can create projects for other users")
    _live_owner(db, owner_id)

    # A new project has no tasks yet; only a manual hold is kept
    status = ProjectStatus.on_hold if project_in.status == ProjectStatus.on_hold else ProjectStatus.planning
    project = Project(
        name=project_in.name.strip(),
        description=project_in.description,
        status=status,
        owner_user_id=owner_id,
    )
    db.add(project)
    db.flush()
    audit.record(db, actor, "project", project.id, AuditAction.create, _snapshot(project))
    db.commit()
    db.refresh(project)
    logger.info("User %s created project %s", actor.id, project.id)
    return project


def update_project(db: Session, actor: User, project_id: int, project_in: ProjectUpdate) -> Project:
    project = get_project(db, project_id)
    authorize(actor, Operation.PROJECT_UPDATE, owner_id=project.owner_user_id)

    update_data = project_in.model_dump(exclude_unset=True)
    if "name" in update_data:
        update_data["name"] = (update_data["name"] or "").strip()
        if not update_data["name"]:
            raise ValidationError("name required")
    if "owner_user_id" in update_data and update_data["owner_user_id"] != project.owner_user_id:
        if not actor.is_privileged:
            raise AuthorizationError("Only admins can transfer project ownership")
        _live_owner(db, update_data["owner_user_id"] or "")
    if "status" in update_data and update_data["status"] is None:
        update_data.pop("status")

    before = _snapshot(project)
    for key, value in update_data.items():
        setattr(project, key, value)
    # Anything but a hold goes back to the derived status
    if "status" in update_data and update_data["status"] != ProjectStatus.on_hold:
        project.status = derive_status(db, project.id)
    project.updated_at = utcnow()

    changes = audit.diff(before, _snapshot(project))
    db.add(project)
    audit.record(db, actor, "project", project.id, AuditAction.update, changes)
    db.commit()
    db.refresh(project)
    logger.info("User %s updated project %s: %s", actor.id, project.id, sorted(changes))
    return project


def delete_project(db: Session, actor: User, project_id: int) -> Project:
    """
    Soft-delete a project and its live tasks. Admin only, regardless of
    ownership.
    """
    authorize(actor, Operation.PROJECT_DELETE)
    project = get_project(db, project_id)

    now = utcnow()
    tasks = db.exec(
        select(Task).where(Task.project_id == project.id, Task.deleted_at.is_(None))
    ).all()
    for task in tasks:
        task.deleted_at = now
        task.updated_at = now
        db.add(task)

    project.deleted_at = now
    project.updated_at = now
    db.add(project)
    audit.record(
        db, actor, "project", project.id, AuditAction.delete,
        {"name": project.name, "tasks_deleted": len(tasks)},
    )
    db.commit()
    db.refresh(project)
    logger.info("User %s deleted project %s with %d tasks", actor.id, project.id, len(tasks))
    return project


def count_tasks(db: Session, project_id: int) -> Tuple[int, int]:
    """(live tasks, live tasks with status done) for a project."""
    live = select(func.count()).select_from(Task).where(
        Task.project_id == project_id, Task.deleted_at.is_(None)
    )
    total = db.exec(live).one()
    done = db.exec(live.where(Task.status == TaskStatus.done)).one()
    return total, done


def compute_project_progress(db: Session, project_id: int) -> float:
    """
    Fraction of live tasks that are done.

    Returns 0.0 for a project without live tasks.
    """
    get_project(db, project_id)
    total, done = count_tasks(db, project_id)
    if total == 0:
        return 0.0
    return done / total


def project_progress(db: Session, project_id: int) -> ProjectProgress:
    get_project(db, project_id)
    total, done = count_tasks(db, project_id)
    return ProjectProgress(
        project_id=project_id,
        total=total,
        done=done,
        progress=done / total if total else 0.0,
    )


def derive_status(db: Session, project_id: int) -> ProjectStatus:
    total, done = count_tasks(db, project_id)
    if total == 0:
        return ProjectStatus.planning
    if done == total:
        return ProjectStatus.completed
    return ProjectStatus.active


def refresh_status(db: Session, project: Project, now: Optional[datetime] = None) -> Optional[List[str]]:
    """
    Re-derive the status of a project after its tasks changed.

    Projects on hold keep their status. Returns [old, new] when the status
    changed, None otherwise. The caller commits.
    """
    if project.status == ProjectStatus.on_hold:
        return None
    db.flush()
    new_status = derive_status(db, project.id)
    old_status = ProjectStatus(project.status)
    if new_status == old_status:
        return None
    project.status = new_status
    project.updated_at = now or utcnow()
    db.add(project)
    return [old_status.value, new_status.value]
