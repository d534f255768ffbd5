from fastapi import APIRouter, Depends
from sqlmodel import Session

from taskdesk.api import deps
from taskdesk.models.user import User
from taskdesk.services import comments as comment_service

router = APIRouter()


@router.delete("/{comment_id}")
def delete_comment(
    comment_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Delete a comment. Admins, or the comment's author.
    """
    comment_service.delete_comment(db, current_user, comment_id)
    return {"status": "success", "detail": "Comment deleted"}
