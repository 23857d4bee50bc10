import logging
from datetime import datetime, timezone
from typing import List

from fastapi import HTTPException
from sqlmodel import Session, select

from ..models.comment import Comment
from ..models.student import Student
from .access import resolve_access, require_full_access
from .admin import is_admin
from .auth import Viewer
from .censor import censor_text, contains_bad_words
from .errors import Forbidden, NotFound
from .projection import CommentPublic, project_comment, project_comments
from .submissions import get_submission

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 5000


def _get_comment(session: Session, submission_id: int, comment_id: int) -> Comment:
    comment = session.get(Comment, comment_id)
    if not comment or comment.submission_id != submission_id:
        raise NotFound("Comment not found")
    return comment


def list_comments(session: Session, viewer: Viewer, submission_id: int) -> List[CommentPublic]:
    submission = get_submission(session, submission_id)
    require_full_access(resolve_access(session, viewer, submission), "read comments on this submission")

    comments = session.exec(
        select(Comment)
        .where(Comment.submission_id == submission_id)
        .order_by(Comment.created_at.asc(), Comment.comment_id.asc())
    ).all()
    return project_comments(session, list(comments), viewer)


def create_comment(
    session: Session,
    viewer: Viewer,
    submission_id: int,
    content: str,
    is_anonymous: bool = False,
) -> CommentPublic:
    submission = get_submission(session, submission_id)
    require_full_access(resolve_access(session, viewer, submission), "comment on this submission")

    content = (content or "").strip()
    if not content:
        raise HTTPException(status_code=400, detail="Comment content is required")
    if len(content) > MAX_COMMENT_LENGTH:
        raise HTTPException(status_code=400, detail=f"Comment cannot exceed {MAX_COMMENT_LENGTH} characters")

    is_censored = contains_bad_words(content)
    comment = Comment(
        submission_id=submission_id,
        student_id=viewer.student_id,
        content=censor_text(content) if is_censored else content,
        is_anonymous=is_anonymous,
        is_censored=is_censored,
    )
    session.add(comment)
    session.commit()
    session.refresh(comment)

    return project_comment(comment, session.get(Student, viewer.student_id), viewer)


def set_comment_anonymity(
    session: Session,
    viewer: Viewer,
    submission_id: int,
    comment_id: int,
    is_anonymous: bool,
) -> CommentPublic:
    comment = _get_comment(session, submission_id, comment_id)
    if comment.student_id != viewer.student_id:
        raise Forbidden("Cannot update other users' comments")
    if comment.is_auto_log:
        # Auto-log comments keep the anonymity they were stamped with
        raise Forbidden("Activity log entries cannot be changed")

    comment.is_anonymous = is_anonymous
    comment.updated_at = datetime.now(timezone.utc)
    session.add(comment)
    session.commit()
    session.refresh(comment)

    return project_comment(comment, session.get(Student, viewer.student_id), viewer)


def delete_comment(session: Session, viewer: Viewer, submission_id: int, comment_id: int) -> None:
    comment = _get_comment(session, submission_id, comment_id)

    is_author = comment.student_id == viewer.student_id
    if not is_author and not is_admin(session, viewer.student_id):
        raise Forbidden("Cannot delete other users' comments")

    session.delete(comment)
    session.commit()

    if not is_author:
        logger.warning("Admin %s deleted comment %s", viewer.student_id, comment_id)
