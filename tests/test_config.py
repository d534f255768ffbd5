from __future__ import annotations

import pytest
from pydantic import ValidationError as SettingsError
from sqlmodel import Session, select

from taskdesk.core.config import Settings
from taskdesk.core.errors import ConnectivityError
from taskdesk.db.session import create_db_engine, session_scope
from taskdesk.models.user import User


def _settings(**values) -> Settings:
    return Settings(_env_file=None, **values)


def test_database_url_wins():
    settings = _settings(DATABASE_URL="sqlite:///./other.db", DB_SERVER="sql01", DB_NAME="TaskDesk")
    assert settings.database_url == "sqlite:///./other.db"


def test_falls_back_to_local_sqlite():
    assert _settings().database_url == "sqlite:///./taskdesk.db"


def test_integrated_auth_url():
    url = _settings(DB_SERVER="sql01", DB_NAME="TaskDesk", DB_AUTH_MODE="integrated").database_url
    assert url.drivername == "mssql+pyodbc"
    assert url.host == "sql01"
    assert url.database == "TaskDesk"
    assert url.username is None
    assert url.query["Trusted_Connection"] == "yes"


def test_credentialed_auth_url():
    url = _settings(
        DB_SERVER="sql01", DB_NAME="TaskDesk", DB_AUTH_MODE="credentialed",
        DB_USER="svc_taskdesk", DB_PASSWORD="p@ss;word",
    ).database_url
    assert url.username == "svc_taskdesk"
    assert url.password == "p@ss;word"
    assert "Trusted_Connection" not in url.query


def test_credentialed_auth_requires_credentials():
    with pytest.raises(SettingsError):
        _settings(DB_SERVER="sql01", DB_NAME="TaskDesk", DB_AUTH_MODE="credentialed")


def test_settings_come_from_environment(monkeypatch):
    monkeypatch.setenv("DB_SERVER", "envhost")
    monkeypatch.setenv("DB_NAME", "EnvCatalog")
    monkeypatch.setenv("DB_AUTH_MODE", "integrated")
    url = _settings().database_url
    assert (url.host, url.database) == ("envhost", "EnvCatalog")


def test_unreachable_store_raises_connectivity_error(tmp_path):
    engine = create_db_engine(_settings(DATABASE_URL=f"sqlite:///{tmp_path}/missing/dir/x.db"))
    with Session(engine) as session:
        with pytest.raises(ConnectivityError):
            session.exec(select(User)).all()
    engine.dispose()


def test_session_scope_rolls_back_on_error(engine):
    with pytest.raises(RuntimeError):
        with session_scope(engine) as session:
            session.add(User(username="temp", email="temp@example.com"))
            session.flush()
            raise RuntimeError("boom")

    with session_scope(engine) as session:
        assert session.exec(select(User)).all() == []
