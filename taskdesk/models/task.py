"""
Task Model Module

This module defines the Task model and its API schemas. Each task belongs to
one project and is assigned to at most one user. Deleting a task only stamps
deleted_at, the row is kept and stays reachable by id.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import field_validator
from sqlmodel import SQLModel, Field, AutoString

from taskdesk.core.timeutil import as_utc, utcnow


class TaskStatus(str, Enum):
    todo = "todo"
    in_progress = "in_progress"
    done = "done"


class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class TaskBase(SQLModel):
    """
    Base Task model containing common fields.
    """
    # Basic task information
    title: str = Field(nullable=False, max_length=200)
    description: Optional[str] = None

    due_date: Optional[datetime] = Field(default=None, index=True)

    priority: TaskPriority = Field(default=TaskPriority.medium, sa_type=AutoString)
    status: TaskStatus = Field(default=TaskStatus.todo, sa_type=AutoString)

    assigned_to_user_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True)


class Task(TaskBase, table=True):
    """
    Task table model.
    """
    __tablename__ = "tasks"

    # Primary key
    id: Optional[int] = Field(default=None, primary_key=True)

    project_id: int = Field(foreign_key="projects.id", index=True)

    # Audit timestamps
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: Optional[datetime] = Field(default=None, index=True)


class TaskCreate(TaskBase):
    """Schema for creating a task; the project comes from the URL."""
    title: str = ""

    @field_validator("due_date")
    @classmethod
    def due_date_in_utc(cls, v):
        return as_utc(v)


class TaskUpdate(SQLModel):
    """Partial update: only the fields that were sent are applied."""
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    assigned_to_user_id: Optional[str] = None

    @field_validator("due_date")
    @classmethod
    def due_date_in_utc(cls, v):
        return as_utc(v)


class TaskRead(TaskBase):
    """Schema for reading task data."""
    id: int
    project_id: int
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class TaskFilter(SQLModel):
    """Predicates for listing a project's live tasks."""
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    overdue: Optional[bool] = None
    assigned_to_user_id: Optional[str] = None
