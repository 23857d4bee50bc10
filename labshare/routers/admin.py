import logging

from fastapi import APIRouter, Depends
from sqlmodel import Session
from pydantic import BaseModel

from ..services.database import get_session
from ..services.auth import Viewer, get_authenticated_viewer
from ..services.admin import is_admin
from ..services.errors import Forbidden, NotFound
from ..models.comment import Comment
from ..models.student import Student
from ..models.submission import Submission

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"]
)


class RevealedAuthor(BaseModel):
    student_id: int
    name: str
    email: str


def require_admin(
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(get_authenticated_viewer)
) -> Viewer:
    if not is_admin(session, viewer.student_id):
        raise Forbidden("Admin privileges required")
    return viewer


def _reveal(session: Session, admin: Viewer, student_id: int, target: str) -> RevealedAuthor:
    student = session.get(Student, student_id)
    if not student:
        raise NotFound("Author not found")
    logger.warning("Admin %s revealed the author of %s", admin.student_id, target)
    return RevealedAuthor(student_id=student.student_id, name=student.name, email=student.email)


@router.post("/submissions/{submission_id}/reveal-author", response_model=RevealedAuthor)
def reveal_submission_author(
    submission_id: int,
    session: Session = Depends(get_session),
    admin: Viewer = Depends(require_admin)
):
    """Reveal the author of a submission for abuse investigation.

    This is the only path that shows an anonymous author to an admin; every
    call is logged.
    """
    submission = session.get(Submission, submission_id)
    if not submission:
        raise NotFound("Submission not found")
    return _reveal(session, admin, submission.student_id, f"submission {submission_id}")


@router.post("/comments/{comment_id}/reveal-author", response_model=RevealedAuthor)
def reveal_comment_author(
    comment_id: int,
    session: Session = Depends(get_session),
    admin: Viewer = Depends(require_admin)
):
    comment = session.get(Comment, comment_id)
    if not comment:
        raise NotFound("Comment not found")
    return _reveal(session, admin, comment.student_id, f"comment {comment_id}")
