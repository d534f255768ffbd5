from .user import User, UserRole
from .project import Project, ProjectStatus
from .task import Task, TaskStatus, TaskPriority
from .comment import Comment
from .audit import Audit, AuditAction

__all__ = [
    "User", "UserRole",
    "Project", "ProjectStatus",
    "Task", "TaskStatus", "TaskPriority",
    "Comment",
    "Audit", "AuditAction",
]
