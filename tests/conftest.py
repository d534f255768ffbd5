"""Pytest fixtures for TaskDesk."""
from __future__ import annotations

from datetime import timedelta
from typing import Callable, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from taskdesk.core.config import Settings
from taskdesk.core.security import create_access_token
from taskdesk.db.session import create_db_engine, init_db
from taskdesk.main import create_app
from taskdesk.models.project import Project, ProjectCreate
from taskdesk.models.user import User, UserRole
from taskdesk.services import projects as project_service


def _insert_user(session: Session, username: str, roles: List[UserRole], password: Optional[str] = None) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        display_name=username.title(),
        password=password,
        roles=roles,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture()
def settings() -> Settings:
    return Settings(_env_file=None, DATABASE_URL="sqlite://", SECRET_KEY="test-secret")


@pytest.fixture()
def engine(settings: Settings):
    engine = create_db_engine(settings)
    init_db(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def make_user(session: Session) -> Callable[..., User]:
    def _make(username: str, *roles: UserRole) -> User:
        return _insert_user(session, username, list(roles) or [UserRole.USER])
    return _make


@pytest.fixture()
def admin(make_user) -> User:
    return make_user("alice", UserRole.ADMIN)


@pytest.fixture()
def manager(make_user) -> User:
    return make_user("mike", UserRole.MANAGER)


@pytest.fixture()
def other_manager(make_user) -> User:
    return make_user("olga", UserRole.MANAGER)


@pytest.fixture()
def member(make_user) -> User:
    return make_user("ursula", UserRole.USER)


@pytest.fixture()
def project(session: Session, manager: User) -> Project:
    return project_service.create_project(session, manager, ProjectCreate(name="Apollo"))


# --- API fixtures -------------------------------------------------------------

@pytest.fixture()
def app(settings: Settings):
    app = create_app(settings)
    init_db(app.state.engine)
    yield app
    app.state.engine.dispose()


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def api_users(app) -> Dict[str, User]:
    # The users outlive the session; keep their loaded attributes
    with Session(app.state.engine, expire_on_commit=False) as session:
        return {
            "admin": _insert_user(session, "alice", [UserRole.ADMIN]),
            "manager": _insert_user(session, "mike", [UserRole.MANAGER]),
            "member": _insert_user(session, "ursula", [UserRole.USER]),
        }


@pytest.fixture()
def auth_headers(settings: Settings, api_users: Dict[str, User]) -> Callable[[str], Dict[str, str]]:
    def _headers(name: str) -> Dict[str, str]:
        token = create_access_token(
            api_users[name].id, settings.SECRET_KEY, settings.ALGORITHM, timedelta(minutes=5)
        )
        return {"Authorization": f"Bearer {token}"}
    return _headers
