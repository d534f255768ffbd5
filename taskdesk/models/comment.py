from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from taskdesk.core.timeutil import utcnow


class CommentBase(SQLModel):
    body: str = Field(nullable=False)


class Comment(CommentBase, table=True):
    """A note left on a task. Any role may comment."""
    __tablename__ = "comments"

    id: Optional[int] = Field(default=None, primary_key=True)
    task_id: int = Field(foreign_key="tasks.id", index=True)
    author_user_id: str = Field(foreign_key="users.id")
    created_at: datetime = Field(default_factory=utcnow)


class CommentCreate(CommentBase):
    body: str = ""


class CommentRead(CommentBase):
    id: int
    task_id: int
    author_user_id: str
    created_at: datetime
