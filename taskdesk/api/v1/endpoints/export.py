"""
Export Endpoints Module

CSV downloads of tasks and of the per-project progress report.
"""
import time
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlmodel import Session

from taskdesk.api import deps
from taskdesk.models.user import User
from taskdesk.services import export as export_service

router = APIRouter()


def _csv_response(lines, name: str) -> StreamingResponse:
    return StreamingResponse(
        lines,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={name}_{int(time.time())}.csv"},
    )


@router.get("/tasks.csv")
def export_tasks(
    project_id: Optional[int] = None,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Live tasks as CSV, optionally for one project. Admins and managers.
    """
    lines = export_service.export_tasks_csv(db, current_user, project_id=project_id)
    return _csv_response(lines, "tasks")


@router.get("/projects.csv")
def export_projects(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Project progress report as CSV. Admins and managers.
    """
    lines = export_service.export_projects_csv(db, current_user)
    return _csv_response(lines, "projects")
