"""
Overdue Reminder Job

Finds live, unfinished tasks whose due date has passed and notifies each
assignee once per run. `run_reminder_loop` drives it periodically from the
application lifespan.
"""
import asyncio
import logging
from collections import defaultdict
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from taskdesk.core.errors import TaskDeskError
from taskdesk.core.timeutil import as_utc, utcnow
from taskdesk.db.session import session_scope
from taskdesk.models.project import Project
from taskdesk.models.task import Task, TaskStatus
from taskdesk.models.user import User

logger = logging.getLogger(__name__)

Notifier = Callable[[User, List[Task]], None]


def find_overdue_tasks(db: Session, now: Optional[datetime] = None) -> List[Task]:
    now = as_utc(now) or utcnow()
    statement = (
        select(Task)
        .join(Project, Task.project_id == Project.id)
        .where(
            Task.deleted_at.is_(None),
            Project.deleted_at.is_(None),
            Task.status != TaskStatus.done,
            Task.assigned_to_user_id.is_not(None),
            Task.due_date.is_not(None),
            Task.due_date < now,
        )
        .order_by(Task.due_date)
    )
    return list(db.exec(statement).all())


def log_notifier(user: User, tasks: List[Task]) -> None:
    logger.info(
        "Reminder for %s: %d overdue task(s): %s",
        user.email, len(tasks), ", ".join(f"#{t.id} {t.title}" for t in tasks),
    )


def send_overdue_reminders(
    db: Session, notify: Notifier = log_notifier, now: Optional[datetime] = None
) -> int:
    """Notify every active assignee of their overdue tasks. Returns the number notified."""
    by_user: Dict[str, List[Task]] = defaultdict(list)
    for task in find_overdue_tasks(db, now):
        by_user[task.assigned_to_user_id].append(task)

    notified = 0
    for user_id, tasks in by_user.items():
        user = db.get(User, user_id)
        if not user or not user.is_active:
            continue
        notify(user, tasks)
        notified += 1
    return notified


def run_reminders_once(engine: Engine, notify: Notifier = log_notifier) -> int:
    with session_scope(engine) as db:
        return send_overdue_reminders(db, notify)


async def run_reminder_loop(engine: Engine, interval_seconds: int, notify: Notifier = log_notifier) -> None:
    """Run the reminder job every `interval_seconds` until cancelled."""
    logger.info("Overdue reminder loop started (every %ss)", interval_seconds)
    while True:
        try:
            count = await asyncio.to_thread(run_reminders_once, engine, notify)
            logger.info("Overdue reminders sent to %d user(s)", count)
        except TaskDeskError as exc:
            # Store unreachable: try again next round
            logger.error("Overdue reminder run failed: %s", exc.detail)
        except Exception:
            logger.exception("Overdue reminder run failed")
        await asyncio.sleep(interval_seconds)
