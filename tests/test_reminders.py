from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from taskdesk.core.timeutil import utcnow
from taskdesk.models.task import TaskCreate, TaskStatus
from taskdesk.services import reminders
from taskdesk.services import tasks as task_service


def test_overdue_tasks_are_grouped_per_assignee(session, manager, member, project):
    past = utcnow() - timedelta(days=1)
    future = utcnow() + timedelta(days=1)
    late = task_service.create_task(
        session, manager, project.id, TaskCreate(title="late", due_date=past, assigned_to_user_id=member.id)
    )
    task_service.create_task(
        session, manager, project.id, TaskCreate(title="finished", due_date=past, status=TaskStatus.done,
                                                 assigned_to_user_id=member.id)
    )
    task_service.create_task(
        session, manager, project.id, TaskCreate(title="later", due_date=future, assigned_to_user_id=member.id)
    )
    task_service.create_task(session, manager, project.id, TaskCreate(title="nobody's", due_date=past))
    deleted = task_service.create_task(
        session, manager, project.id, TaskCreate(title="deleted", due_date=past, assigned_to_user_id=manager.id)
    )
    task_service.delete_task(session, manager, deleted.id)

    sent = []
    count = reminders.send_overdue_reminders(session, lambda user, tasks: sent.append((user.id, tasks)))

    assert count == 1
    assert [(user_id, [t.id for t in tasks]) for user_id, tasks in sent] == [(member.id, [late.id])]


def test_run_once_uses_its_own_session(engine, session, manager, member, project):
    task_service.create_task(
        session, manager, project.id,
        TaskCreate(title="late", due_date=utcnow() - timedelta(hours=1), assigned_to_user_id=member.id),
    )
    notified = []
    assert reminders.run_reminders_once(engine, lambda user, tasks: notified.append(user.username)) == 1
    assert notified == ["ursula"]


def test_loop_keeps_running_after_a_failed_run(engine, session, manager, member, project):
    task_service.create_task(
        session, manager, project.id,
        TaskCreate(title="late", due_date=utcnow() - timedelta(hours=1), assigned_to_user_id=member.id),
    )
    calls = []

    def flaky(user, tasks):
        calls.append(user.id)
        if len(calls) == 1:
            raise RuntimeError("mail server down")

    async def drive():
        loop_task = asyncio.create_task(reminders.run_reminder_loop(engine, 0, flaky))
        while len(calls) < 2:
            await asyncio.sleep(0.01)
        loop_task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await loop_task

    asyncio.run(asyncio.wait_for(drive(), timeout=10))

    assert calls[:2] == [member.id, member.id]
