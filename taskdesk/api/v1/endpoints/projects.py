"""
Project Endpoints Module

This module provides CRUD endpoints for projects, their progress and the
tasks they contain. Every authenticated user can read; mutations are checked
against the access policy by the service layer.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from taskdesk.api import deps
from taskdesk.models.project import ProjectCreate, ProjectProgress, ProjectRead, ProjectUpdate
from taskdesk.models.task import TaskCreate, TaskFilter, TaskPriority, TaskRead, TaskStatus
from taskdesk.models.user import User
from taskdesk.services import projects as project_service
from taskdesk.services import tasks as task_service

router = APIRouter()


@router.get("", response_model=List[ProjectRead])
def list_projects(
    skip: int = 0,
    limit: int = 100,
    owner_user_id: Optional[str] = None,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Retrieve a paginated list of live projects, optionally for one owner.
    """
    return project_service.list_projects(db, owner_user_id=owner_user_id, skip=skip, limit=limit)


@router.post("", response_model=ProjectRead)
def create_project(
    project_in: ProjectCreate,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Create a new project. If owner_user_id is not specified, it defaults to
    the current user.
    """
    return project_service.create_project(db, current_user, project_in)


@router.get("/{project_id}", response_model=ProjectRead)
def read_project(
    project_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    return project_service.get_project(db, project_id)


@router.patch("/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: int,
    project_in: ProjectUpdate,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Update an existing project. Admins, or managers owning the project.
    """
    return project_service.update_project(db, current_user, project_id, project_in)


@router.delete("/{project_id}")
def delete_project(
    project_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Soft-delete a project and its tasks. Admin only.
    """
    project_service.delete_project(db, current_user, project_id)
    return {"status": "success", "detail": "Project deleted"}


@router.get("/{project_id}/progress", response_model=ProjectProgress)
def read_project_progress(
    project_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Share of live tasks that are done; 0 for a project without tasks.
    """
    return project_service.project_progress(db, project_id)


@router.get("/{project_id}/tasks", response_model=List[TaskRead])
def list_project_tasks(
    project_id: int,
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    overdue: Optional[bool] = None,
    assigned_to_user_id: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Live tasks of a project, filtered by status, priority, assignee and
    whether the due date has passed.
    """
    task_filter = TaskFilter(
        status=status,
        priority=priority,
        overdue=overdue,
        assigned_to_user_id=assigned_to_user_id,
    )
    return task_service.list_tasks_by_project(db, project_id, task_filter, skip=skip, limit=limit)


@router.post("/{project_id}/tasks", response_model=TaskRead)
def create_project_task(
    project_id: int,
    task_in: TaskCreate,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Create a task in the project. Admins, or managers owning the project.
    """
    return task_service.create_task(db, current_user, project_id, task_in)
