"""
API Dependencies Module

This module provides FastAPI dependency functions for database sessions and
authentication. It implements a dual authentication strategy supporting both
bearer tokens (for API clients) and HTTP-only cookies (for browser clients).

Authorization is not decided here: the service layer checks every operation
against the access policy.
"""
from typing import Iterator, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from pydantic import ValidationError
from sqlmodel import Session

from taskdesk.core.config import Settings
from taskdesk.core.security import decode_access_token
from taskdesk.db.session import get_session
from taskdesk.models.user import User
from taskdesk.schemas.auth import TokenData

# auto_error=False allows us to check cookies as a fallback
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login",
    auto_error=False  # Don't raise error immediately if Authorization header is missing
)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Iterator[Session]:
    """One session per request, closed on every exit path."""
    yield from get_session(request.app.state.engine)


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    token: Optional[str] = Depends(reusable_oauth2),
) -> User:
    """
    Dependency that retrieves and validates the current authenticated user.

    The function first checks for a bearer token in the Authorization header.
    If not found, it falls back to checking the access_token cookie.

    Raises:
        HTTPException 401: If no valid authentication token is provided
        HTTPException 403: If the token is invalid or expired, or the account is deactivated
        HTTPException 404: If the user referenced in the token doesn't exist
    """
    # Try Authorization header first, then fall back to cookie
    if not token:
        token = request.cookies.get("access_token")
        # Cookie format is "Bearer <token>", so we need to extract the token
        if token and token.startswith("Bearer "):
            token = token[len("Bearer "):]

    # Require authentication
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Decode and validate the JWT token
    try:
        payload = decode_access_token(token, settings.SECRET_KEY, settings.ALGORITHM)
        token_data = TokenData(sub=payload.get("sub"))
    except (JWTError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )

    user = db.get(User, token_data.sub) if token_data.sub else None
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is deactivated")
    return user
