"""
Task Endpoints Module

Endpoints for single tasks and their comments. Tasks are created through
/projects/{id}/tasks; deletion is soft and a deleted task stays readable here.
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from taskdesk.api import deps
from taskdesk.models.comment import CommentCreate, CommentRead
from taskdesk.models.task import TaskRead, TaskUpdate
from taskdesk.models.user import User
from taskdesk.services import comments as comment_service
from taskdesk.services import tasks as task_service

router = APIRouter()


@router.get("/{task_id}", response_model=TaskRead)
def read_task(
    task_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Get a specific task by ID, including soft-deleted ones.
    """
    return task_service.get_task(db, task_id)


@router.patch("/{task_id}", response_model=TaskRead)
def update_task(
    task_id: int,
    task_in: TaskUpdate,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Partially update a task. Admins, or managers owning the task's project.
    """
    return task_service.update_task(db, current_user, task_id, task_in)


@router.delete("/{task_id}", response_model=TaskRead)
def delete_task(
    task_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Soft-delete a task. Admins, or managers owning the task's project.
    """
    return task_service.delete_task(db, current_user, task_id)


@router.get("/{task_id}/comments", response_model=List[CommentRead])
def list_comments(
    task_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    return comment_service.list_comments(db, task_id)


@router.post("/{task_id}/comments", response_model=CommentRead)
def add_comment(
    task_id: int,
    comment_in: CommentCreate,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Comment on a task. Open to every role.
    """
    return comment_service.add_comment(db, current_user, task_id, comment_in.body)
