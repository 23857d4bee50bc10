"""Upvote ledger.

One ``Upvote`` row per (voter, submission). ``Submission.upvote_count`` is a
denormalized copy that is only ever recomputed from those rows, never
incremented in place.
"""
import logging

from pydantic import BaseModel
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, delete, func

from ..models.submission import Submission
from ..models.upvote import Upvote
from .access import resolve_access, require_full_access
from .auth import Viewer
from .errors import Forbidden, NotFound

logger = logging.getLogger(__name__)


class UpvoteState(BaseModel):
    upvoted: bool
    upvote_count: int


def has_upvoted(session: Session, student_id: int, submission_id: int) -> bool:
    return session.get(Upvote, (student_id, submission_id)) is not None


def recount_upvotes(session: Session, submission_id: int) -> None:
    live_count = (
        select(func.count())
        .select_from(Upvote)
        .where(Upvote.submission_id == submission_id)
        .scalar_subquery()
    )
    session.exec(
        update(Submission)
        .where(Submission.submission_id == submission_id)
        .values(upvote_count=live_count)
    )


def _get_submission(session: Session, submission_id: int) -> Submission:
    submission = session.get(Submission, submission_id)
    if not submission:
        raise NotFound("Submission not found")
    return submission


def get_upvote_state(session: Session, viewer: Viewer, submission_id: int) -> UpvoteState:
    submission = _get_submission(session, submission_id)
    upvoted = viewer.is_authenticated and has_upvoted(session, viewer.student_id, submission_id)
    return UpvoteState(upvoted=upvoted, upvote_count=submission.upvote_count)


def toggle_upvote(session: Session, viewer: Viewer, submission_id: int) -> UpvoteState:
    """Flip the viewer's upvote and return the new state.

    Toggling twice restores the original state and count. A duplicate insert
    from a concurrent request is not an error: the row already exists, so the
    current state is re-read and returned.
    """
    submission = _get_submission(session, submission_id)

    if submission.student_id == viewer.student_id:
        raise Forbidden("You cannot upvote your own submission")
    require_full_access(resolve_access(session, viewer, submission), "upvote this submission")

    if has_upvoted(session, viewer.student_id, submission_id):
        session.exec(
            delete(Upvote).where(
                (Upvote.student_id == viewer.student_id) &
                (Upvote.submission_id == submission_id)
            )
        )
    else:
        session.add(Upvote(student_id=viewer.student_id, submission_id=submission_id))

    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        logger.info(
            "Concurrent upvote by student %s on submission %s, re-reading state",
            viewer.student_id, submission_id,
        )

    recount_upvotes(session, submission_id)
    session.commit()
    session.refresh(submission)

    return UpvoteState(
        upvoted=has_upvoted(session, viewer.student_id, submission_id),
        upvote_count=submission.upvote_count,
    )
