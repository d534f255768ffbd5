"""
Authentication Endpoints Module

This module provides authentication endpoints for user registration, login, and logout.
The system supports both JWT bearer token authentication and HTTP-only cookie-based
authentication for browser clients.
"""
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session

from taskdesk.api import deps
from taskdesk.core.config import Settings
from taskdesk.core.security import create_access_token
from taskdesk.schemas.auth import Token, UserRegister
from taskdesk.schemas.user import UserRead
from taskdesk.services import users as user_service

router = APIRouter()


@router.post("/register", response_model=UserRead)
def register_user(user_in: UserRegister, db: Session = Depends(deps.get_db)) -> Any:
    """
    Register a new user account.

    New users are assigned the USER role (read-only plus commenting).

    Raises:
        400: If the username or email is already taken
    """
    return user_service.register_user(db, user_in)


@router.post("/login", response_model=Token)
def login(
    response: Response,
    db: Session = Depends(deps.get_db),
    settings: Settings = Depends(deps.get_settings),
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> Any:
    """
    Authenticate a user and issue an access token.

    The 'username' form field accepts either the username or the email. The
    token is also set as an HTTP-only cookie for browser clients.

    Raises:
        HTTPException 401: If credentials are invalid
    """
    user = user_service.authenticate(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(
        user.id,
        settings.SECRET_KEY,
        settings.ALGORITHM,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

    # httponly=True prevents JavaScript access to the cookie (XSS protection)
    # samesite="lax" provides CSRF protection while allowing normal navigation
    response.set_cookie(
        key="access_token",
        value=f"Bearer {access_token}",
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,  # Convert minutes to seconds
        samesite="lax",
    )
    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/logout")
def logout(response: Response) -> Any:
    """
    Clear the authentication cookie. API clients can simply discard their token.
    """
    response.delete_cookie("access_token")
    return {"status": "success", "detail": "Logged out"}
