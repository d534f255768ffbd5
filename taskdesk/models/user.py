"""
User Model Module

This module defines the User model and UserRole enumeration for authentication
and authorization throughout the application.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional
import uuid

from sqlmodel import SQLModel, Field, JSON, Column

from taskdesk.core.timeutil import utcnow


class UserRole(str, Enum):
    """
    Closed set of roles. A user may hold several at once.

    - USER: read-only access plus commenting
    - MANAGER: creates projects and manages tasks within the projects they own
    - ADMIN: full access
    """
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


class User(SQLModel, table=True):
    """
    User model representing authenticated users in the system.

    Users are identified by UUID and authenticated via username or email plus
    password. The roles field drives every permission check in the service layer.

    Attributes:
        id: Unique identifier (UUID) automatically generated for each user
        username: Login handle (required, unique)
        email: User's email address (required, unique)
        display_name: Name shown in the UI
        password: Hashed password (bcrypt)
        roles: List of UserRole values assigned to this user (default: [USER])
        is_active: False once the account has been deactivated
        created_at: UTC timestamp when the account was created
        updated_at: UTC timestamp of the last profile change
    """
    __tablename__ = "users"

    # Primary key - auto-generated UUID for global uniqueness
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36)

    # Identity fields
    username: str = Field(unique=True, index=True, nullable=False, max_length=64)
    email: str = Field(unique=True, index=True, nullable=False, max_length=255)
    display_name: Optional[str] = Field(default=None, max_length=255)

    password: Optional[str] = None  # Hashed password (bcrypt)

    # Authorization - stored as JSON array in database
    roles: List[UserRole] = Field(default_factory=lambda: [UserRole.USER], sa_column=Column(JSON))

    # Users are deactivated, never removed
    is_active: bool = True

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def has_role(self, role: UserRole) -> bool:
        return role in (self.roles or [])

    @property
    def is_privileged(self) -> bool:
        """Helper to check if user has admin-level roles."""
        return self.has_role(UserRole.ADMIN)
