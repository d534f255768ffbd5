import logging
from typing import List

from sqlmodel import Session, select

from taskdesk.core.errors import NotFoundError, ValidationError
from taskdesk.models.audit import AuditAction
from taskdesk.models.comment import Comment
from taskdesk.models.user import User
from taskdesk.services import audit
from taskdesk.services.policy import Operation, authorize
from taskdesk.services.tasks import get_live_task

logger = logging.getLogger(__name__)


def add_comment(db: Session, actor: User, task_id: int, body: str) -> Comment:
    """Comment on a live task. Every role may comment."""
    authorize(actor, Operation.COMMENT_CREATE)
    body = (body or "").strip()
    if not body:
        raise ValidationError("body required")
    task = get_live_task(db, task_id)

    comment = Comment(task_id=task.id, author_user_id=actor.id, body=body)
    db.add(comment)
    db.flush()
    audit.record(db, actor, "comment", comment.id, AuditAction.create, {"task_id": task.id})
    db.commit()
    db.refresh(comment)
    logger.info("User %s commented on task %s", actor.id, task.id)
    return comment


def list_comments(db: Session, task_id: int) -> List[Comment]:
    task = get_live_task(db, task_id)
    statement = select(Comment).where(Comment.task_id == task.id).order_by(Comment.id)
    return list(db.exec(statement).all())


def delete_comment(db: Session, actor: User, comment_id: int) -> None:
    """Admins may delete any comment, everybody else only their own."""
    comment = db.get(Comment, comment_id)
    if not comment:
        raise NotFoundError("Comment not found")
    authorize(actor, Operation.COMMENT_DELETE, owner_id=comment.author_user_id)

    audit.record(
        db, actor, "comment", comment.id, AuditAction.delete,
        {"task_id": comment.task_id, "body": comment.body},
    )
    db.delete(comment)
    db.commit()
    logger.info("User %s deleted comment %s", actor.id, comment_id)
