"""
CSV Export Module

Streams live tasks and project summaries as CSV, one line at a time. Rows are
read eagerly so the stream never touches the session after the request has
released it.
"""
import io
from typing import Iterator, List, Optional

import pandas as pd
from sqlmodel import Session, select

from taskdesk.models.project import Project, ProjectStatus
from taskdesk.models.task import Task, TaskPriority, TaskStatus
from taskdesk.models.user import User
from taskdesk.services.policy import Operation, authorize
from taskdesk.services.projects import count_tasks, get_project

TASK_COLUMNS = [
    "id", "project_id", "project_name", "title", "status", "priority",
    "assigned_to_user_id", "due_date", "created_at", "updated_at",
]
PROJECT_COLUMNS = ["id", "name", "owner_user_id", "status", "task_count", "done_count", "progress"]


def _csv_lines(columns: List[str], rows: List[list]) -> Iterator[str]:
    """Render the rows through a DataFrame and hand the CSV out line by line."""
    frame = pd.DataFrame(rows, columns=columns)
    buffer = io.StringIO()
    frame.to_csv(buffer, index=False, lineterminator="\n")
    buffer.seek(0)
    yield from buffer


def _iso(value) -> str:
    return value.isoformat() if value else ""


def export_tasks_csv(db: Session, actor: User, project_id: Optional[int] = None) -> Iterator[str]:
    """
    CSV of live tasks, optionally limited to one project.

    Authorization and the project lookup happen before the first line is
    produced, so errors surface before any output.
    """
    authorize(actor, Operation.EXPORT_READ)
    statement = (
        select(Task, Project)
        .join(Project, Task.project_id == Project.id)
        .where(Task.deleted_at.is_(None), Project.deleted_at.is_(None))
    )
    if project_id is not None:
        get_project(db, project_id)
        statement = statement.where(Task.project_id == project_id)
    statement = statement.order_by(Task.project_id, Task.id)
    results = db.exec(statement).all()

    rows = [
        [
            task.id,
            task.project_id,
            project.name,
            task.title,
            TaskStatus(task.status).value,
            TaskPriority(task.priority).value,
            task.assigned_to_user_id or "",
            _iso(task.due_date),
            _iso(task.created_at),
            _iso(task.updated_at),
        ]
        for task, project in results
    ]
    return _csv_lines(TASK_COLUMNS, rows)


def export_projects_csv(db: Session, actor: User) -> Iterator[str]:
    """CSV report of live projects with their task counts and progress."""
    authorize(actor, Operation.EXPORT_READ)
    projects = db.exec(
        select(Project).where(Project.deleted_at.is_(None)).order_by(Project.id)
    ).all()

    rows = []
    for project in projects:
        total, done = count_tasks(db, project.id)
        rows.append([
            project.id,
            project.name,
            project.owner_user_id,
            ProjectStatus(project.status).value,
            total,
            done,
            f"{done / total if total else 0.0:.4f}",
        ])
    return _csv_lines(PROJECT_COLUMNS, rows)
