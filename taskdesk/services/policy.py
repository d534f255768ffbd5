"""
Access Policy Module

Role-based access control for the service layer. Roles form a closed enum and
permissions live in one table keyed by operation, so a check is a lookup
instead of ad-hoc role comparisons spread over the code.

Scopes:
- ANY: the role alone grants the operation
- OWNED: the role grants it only when the actor owns the resource (the project
  owner for project and task operations, the author for comments)
"""
import logging
from enum import Enum
from typing import Dict, Optional

from taskdesk.core.errors import AuthorizationError
from taskdesk.models.user import User, UserRole

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    USER_MANAGE = "user.manage"
    PROJECT_CREATE = "project.create"
    PROJECT_UPDATE = "project.update"
    PROJECT_DELETE = "project.delete"
    TASK_CREATE = "task.create"
    TASK_UPDATE = "task.update"
    TASK_DELETE = "task.delete"
    COMMENT_CREATE = "comment.create"
    COMMENT_DELETE = "comment.delete"
    AUDIT_READ = "audit.read"
    EXPORT_READ = "export.read"


class Scope(str, Enum):
    ANY = "any"
    OWNED = "owned"


ADMIN_ONLY: Dict[UserRole, Scope] = {UserRole.ADMIN: Scope.ANY}
MANAGER_OWNED: Dict[UserRole, Scope] = {UserRole.ADMIN: Scope.ANY, UserRole.MANAGER: Scope.OWNED}

POLICY: Dict[Operation, Dict[UserRole, Scope]] = {
    Operation.USER_MANAGE: ADMIN_ONLY,
    Operation.AUDIT_READ: ADMIN_ONLY,
    Operation.PROJECT_DELETE: ADMIN_ONLY,
    Operation.PROJECT_CREATE: {UserRole.ADMIN: Scope.ANY, UserRole.MANAGER: Scope.ANY},
    Operation.PROJECT_UPDATE: MANAGER_OWNED,
    Operation.TASK_CREATE: MANAGER_OWNED,
    Operation.TASK_UPDATE: MANAGER_OWNED,
    Operation.TASK_DELETE: MANAGER_OWNED,
    Operation.COMMENT_CREATE: {
        UserRole.ADMIN: Scope.ANY,
        UserRole.MANAGER: Scope.ANY,
        UserRole.USER: Scope.ANY,
    },
    Operation.COMMENT_DELETE: {
        UserRole.ADMIN: Scope.ANY,
        UserRole.MANAGER: Scope.OWNED,
        UserRole.USER: Scope.OWNED,
    },
    Operation.EXPORT_READ: {UserRole.ADMIN: Scope.ANY, UserRole.MANAGER: Scope.ANY},
}


def is_allowed(actor: User, operation: Operation, owner_id: Optional[str] = None) -> bool:
    if not actor.is_active:
        return False
    rules = POLICY[operation]
    for role in actor.roles or []:
        scope = rules.get(UserRole(role))
        if scope is Scope.ANY:
            return True
        if scope is Scope.OWNED and owner_id is not None and owner_id == actor.id:
            return True
    return False


def authorize(actor: User, operation: Operation, owner_id: Optional[str] = None) -> None:
    """
    Raise AuthorizationError unless the actor's roles grant the operation.

    Args:
        actor: The user performing the call
        operation: The operation being attempted
        owner_id: Id of the user owning the target resource, for OWNED scopes
    """
    if is_allowed(actor, operation, owner_id):
        return
    logger.warning("Denied %s to user %s (roles=%s)", operation.value, actor.id, actor.roles)
    raise AuthorizationError(f"Not authorized to perform {operation.value}")
