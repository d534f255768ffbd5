"""
User Management Endpoints Module

CRUD endpoints for user accounts. Listing, creating and deactivating users is
reserved to administrators; every user may read and edit their own profile.
"""
from typing import Any, List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from taskdesk.api import deps
from taskdesk.models.user import User
from taskdesk.schemas.user import UserCreate, UserRead, UserUpdate
from taskdesk.services import users as user_service
from taskdesk.services.policy import Operation, authorize

router = APIRouter()


@router.get("", response_model=List[UserRead])
def read_users(
    db: Session = Depends(deps.get_db),
    skip: int = 0,
    limit: int = 100,
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Retrieve a paginated list of all users. Admin only.
    """
    return user_service.list_users(db, current_user, skip=skip, limit=limit)


@router.post("", response_model=UserRead)
def create_user(
    *,
    db: Session = Depends(deps.get_db),
    user_in: UserCreate,
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Create a new user with explicit roles. Admin only.
    """
    return user_service.create_user(db, current_user, user_in)


@router.get("/me", response_model=UserRead)
def read_user_me(current_user: User = Depends(deps.get_current_user)) -> Any:
    """
    Get the current authenticated user's profile.
    """
    return current_user


@router.patch("/me", response_model=UserRead)
def update_user_me(
    *,
    db: Session = Depends(deps.get_db),
    user_in: UserUpdate,
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Update the current user's own profile (display name, email, password).
    """
    return user_service.update_user(db, current_user, current_user.id, user_in)


@router.get("/{user_id}", response_model=UserRead)
def read_user_by_id(
    user_id: str,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Get a specific user by ID. Users can read their own profile, admins any.
    """
    if user_id != current_user.id:
        authorize(current_user, Operation.USER_MANAGE)
    return user_service.get_user(db, user_id)


@router.patch("/{user_id}", response_model=UserRead)
def update_user(
    *,
    db: Session = Depends(deps.get_db),
    user_id: str,
    user_in: UserUpdate,
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Update any user's profile, including roles. Admin only.
    """
    return user_service.update_user(db, current_user, user_id, user_in)


@router.delete("/{user_id}", response_model=UserRead)
def deactivate_user(
    *,
    db: Session = Depends(deps.get_db),
    user_id: str,
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Deactivate a user. Accounts are kept for the audit trail. Admin only.
    """
    return user_service.deactivate_user(db, current_user, user_id)
