"""
Seed an empty TaskDesk database with one user per role and a demo project.

Credentials come from the environment (SEED_ADMIN_PASSWORD, SEED_PASSWORD);
run init_db.py first.
"""
import os
import sys
from datetime import timedelta

from sqlmodel import select

from taskdesk.core.config import get_settings
from taskdesk.core.logging import setup_logging
from taskdesk.core.security import get_password_hash
from taskdesk.core.timeutil import utcnow
from taskdesk.db.session import create_db_engine, session_scope
from taskdesk.models import User, UserRole
from taskdesk.models.project import ProjectCreate
from taskdesk.models.task import TaskCreate, TaskStatus
from taskdesk.services import projects as project_service
from taskdesk.services import tasks as task_service


def seed() -> int:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    admin_password = os.environ.get("SEED_ADMIN_PASSWORD")
    password = os.environ.get("SEED_PASSWORD")
    if not admin_password or not password:
        print("Set SEED_ADMIN_PASSWORD and SEED_PASSWORD before seeding.")
        return 1

    engine = create_db_engine(settings)
    with session_scope(engine) as session:
        if session.exec(select(User).limit(1)).first():
            print("Database already contains users, nothing to seed.")
            return 0

        admin = User(
            username="admin", email="admin@taskdesk.example.com", display_name="Administrator",
            password=get_password_hash(admin_password), roles=[UserRole.ADMIN],
        )
        manager = User(
            username="manager", email="manager@taskdesk.example.com", display_name="Project Manager",
            password=get_password_hash(password), roles=[UserRole.MANAGER],
        )
        member = User(
            username="member", email="member@taskdesk.example.com", display_name="Team Member",
            password=get_password_hash(password), roles=[UserRole.USER],
        )
        session.add_all([admin, manager, member])
        session.commit()

        project = project_service.create_project(
            session, manager, ProjectCreate(name="Onboarding", description="Demo project")
        )
        now = utcnow()
        task_service.create_task(session, manager, project.id, TaskCreate(
            title="Provision accounts", status=TaskStatus.done, assigned_to_user_id=member.id,
        ))
        task_service.create_task(session, manager, project.id, TaskCreate(
            title="Write welcome guide", due_date=now + timedelta(days=7), assigned_to_user_id=member.id,
        ))
        print(f"Seeded users: {[u.username for u in (admin, manager, member)]}")
        print(f"Seeded project #{project.id} with 2 tasks")
    engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(seed())
