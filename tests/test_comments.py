from __future__ import annotations

import pytest

from taskdesk.core.errors import AuthorizationError, NotFoundError, ValidationError
from taskdesk.models.task import TaskCreate
from taskdesk.services import comments as comment_service
from taskdesk.services import tasks as task_service


@pytest.fixture()
def task(session, manager, project):
    return task_service.create_task(session, manager, project.id, TaskCreate(title="Discuss"))


def test_plain_user_can_comment(session, member, task):
    comment = comment_service.add_comment(session, member, task.id, "  Looks good  ")
    assert comment.body == "Looks good"
    assert comment.author_user_id == member.id
    assert [c.id for c in comment_service.list_comments(session, task.id)] == [comment.id]


def test_empty_comment_is_rejected(session, member, task):
    with pytest.raises(ValidationError):
        comment_service.add_comment(session, member, task.id, " ")


def test_no_comments_on_deleted_tasks(session, manager, member, task):
    task_service.delete_task(session, manager, task.id)
    with pytest.raises(NotFoundError):
        comment_service.add_comment(session, member, task.id, "Too late")


def test_author_or_admin_deletes_comment(session, admin, manager, member, task):
    first = comment_service.add_comment(session, member, task.id, "first")
    second = comment_service.add_comment(session, member, task.id, "second")

    with pytest.raises(AuthorizationError):
        comment_service.delete_comment(session, manager, first.id)

    comment_service.delete_comment(session, member, first.id)
    comment_service.delete_comment(session, admin, second.id)
    assert comment_service.list_comments(session, task.id) == []


def test_delete_missing_comment(session, admin):
    with pytest.raises(NotFoundError):
        comment_service.delete_comment(session, admin, 77)
