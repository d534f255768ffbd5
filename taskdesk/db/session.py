import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from taskdesk.core.config import Settings
from taskdesk.core.errors import ConnectivityError

logger = logging.getLogger(__name__)


def create_db_engine(settings: Settings) -> Engine:
    """
    Build the engine from an explicit settings object.

    SQL Server goes through pyodbc; SQLite is used for local runs and tests.
    Connection failures surface as ConnectivityError.
    """
    db_url = settings.database_url
    url_str = db_url if isinstance(db_url, str) else db_url.render_as_string(hide_password=True)

    if url_str.startswith("sqlite"):
        # SQLite fix for multithreading
        connect_args = {"check_same_thread": False}
        if url_str in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, or every checkout sees an empty database
            engine = create_engine(db_url, connect_args=connect_args, poolclass=StaticPool)
        else:
            engine = create_engine(db_url, connect_args=connect_args)
    else:
        logger.info("Connecting to %s", url_str)
        engine = create_engine(db_url, pool_pre_ping=True)

    event.listen(engine, "handle_error", _raise_connectivity_error)
    return engine


def _raise_connectivity_error(context) -> None:
    # connection is None when the very first connect failed
    if context.connection is None or context.is_disconnect:
        logger.error("Database unreachable: %s", context.original_exception)
        raise ConnectivityError("Database is unreachable") from context.original_exception


def init_db(engine: Engine) -> None:
    """Create every table registered on SQLModel.metadata."""
    # Import the models so their tables are registered
    import taskdesk.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session(engine: Engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """
    Scoped unit of work for scripts and background jobs.

    Commits when the block succeeds, rolls back on any error and always
    closes the session so no connection is leaked.
    """
    session = Session(engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
