"""
Create the TaskDesk schema. Run before seed_db.py.
"""
import sys

from sqlmodel import select

from taskdesk.core.config import get_settings
from taskdesk.core.errors import ConnectivityError
from taskdesk.core.logging import setup_logging
from taskdesk.db.session import create_db_engine, init_db, session_scope
from taskdesk.models import User


def create_schema() -> int:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    print("--- Schema Creation ---")
    engine = create_db_engine(settings)
    try:
        init_db(engine)
        # Check that the store answers queries
        with session_scope(engine) as session:
            session.exec(select(User).limit(1)).first()
    except ConnectivityError as e:
        print(f"Database connection test: FAILED ({e.detail})")
        print("\nTIP: Check DATABASE_URL or DB_SERVER/DB_NAME/DB_AUTH_MODE in your environment or .env file.")
        return 1
    finally:
        engine.dispose()
    print("Table creation/verification successful.")
    return 0


if __name__ == "__main__":
    sys.exit(create_schema())
