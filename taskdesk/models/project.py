"""
Project Model Module

This module defines the Project model. A project is owned by one user and
groups tasks; its status is partly derived from those tasks.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field, AutoString

from taskdesk.core.timeutil import utcnow


class ProjectStatus(str, Enum):
    planning = "planning"
    active = "active"
    on_hold = "on_hold"
    completed = "completed"


class ProjectBase(SQLModel):
    """
    Base Project model containing common fields.
    """
    name: str = Field(nullable=False, max_length=200)
    description: Optional[str] = None

    # Status - "on_hold" is only ever set by hand, the rest follow the tasks
    status: ProjectStatus = Field(default=ProjectStatus.planning, sa_type=AutoString)


class Project(ProjectBase, table=True):
    """
    Project table model.

    Projects are soft-deleted: deleted_at is set and the row stays.
    """
    __tablename__ = "projects"

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_user_id: str = Field(foreign_key="users.id", index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: Optional[datetime] = Field(default=None, index=True)


class ProjectCreate(ProjectBase):
    """Schema for creating a project. Owner defaults to the caller."""
    owner_user_id: Optional[str] = None


class ProjectUpdate(SQLModel):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    owner_user_id: Optional[str] = None


class ProjectRead(ProjectBase):
    id: int
    owner_user_id: str
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class ProjectProgress(SQLModel):
    project_id: int
    total: int
    done: int
    progress: float
