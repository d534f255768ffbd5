import getpass
import os
import sys

from sqlmodel import or_, select

from taskdesk.core.config import get_settings
from taskdesk.core.security import get_password_hash
from taskdesk.db.session import create_db_engine, session_scope
from taskdesk.models.user import User, UserRole


def create_initial_user() -> int:
    print("--- Initial Admin Creation ---")

    username = os.environ.get("FIRST_ADMIN_USERNAME", "admin")
    email = os.environ.get("FIRST_ADMIN_EMAIL", "admin@taskdesk.example.com")
    password = os.environ.get("FIRST_ADMIN_PASSWORD") or getpass.getpass("Password: ")

    engine = create_db_engine(get_settings())
    with session_scope(engine) as session:
        # Check if user already exists
        statement = select(User).where(or_(User.username == username, User.email == email))
        if session.exec(statement).first():
            print(f"User {username} <{email}> already exists.")
            return 0

        print(f"Creating user {username}...")
        session.add(User(
            username=username,
            email=email,
            display_name="Administrator",
            password=get_password_hash(password),
            roles=[UserRole.ADMIN],
        ))
    engine.dispose()
    print("Initial admin created successfully!")
    print(f"Username: {username}")
    print(f"Email: {email}")
    return 0


if __name__ == "__main__":
    sys.exit(create_initial_user())
