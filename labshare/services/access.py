"""Access resolution for submissions.

Every request derives the viewer's access level from durable state; nothing
here is cached between requests because a viewer can unlock a lab at any
moment by submitting their own solution.
"""
import logging
from enum import Enum
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session

from ..models.submission import Submission
from .admin import is_admin
from .auth import Viewer
from .errors import Forbidden, Unauthenticated, LOGIN, SUBMIT_SOLUTION
from .unlocks import has_unlocked

logger = logging.getLogger(__name__)


class AccessLevel(str, Enum):
    # Ranked: the first matching level wins
    OWNER = "owner"
    ADMIN = "admin"
    PEER_UNLOCKED = "peer_unlocked"
    AUTHENTICATED_LOCKED = "authenticated_locked"
    GUEST = "guest"

    @property
    def has_full_access(self) -> bool:
        return self in (AccessLevel.OWNER, AccessLevel.ADMIN, AccessLevel.PEER_UNLOCKED)

    @property
    def required_action(self) -> Optional[str]:
        if self is AccessLevel.GUEST:
            return LOGIN
        if self is AccessLevel.AUTHENTICATED_LOCKED:
            return SUBMIT_SOLUTION
        return None


def rank_access(
    viewer_id: Optional[int],
    owner_id: int,
    viewer_is_admin: bool,
    viewer_has_unlocked: bool,
) -> AccessLevel:
    if viewer_id is None:
        return AccessLevel.GUEST
    if viewer_id == owner_id:
        return AccessLevel.OWNER
    if viewer_is_admin:
        return AccessLevel.ADMIN
    if viewer_has_unlocked:
        return AccessLevel.PEER_UNLOCKED
    return AccessLevel.AUTHENTICATED_LOCKED


def resolve_access(session: Session, viewer: Viewer, submission: Submission) -> AccessLevel:
    """Compute the viewer's access level for a submission.

    The peer check uses the viewer's own unlock for the submission's lab, not
    anything recorded on the target submission. Lookups are skipped once a
    higher-ranked level already applies.
    """
    if not viewer.is_authenticated:
        return AccessLevel.GUEST
    if viewer.student_id == submission.student_id:
        return AccessLevel.OWNER
    if is_admin(session, viewer.student_id):
        return AccessLevel.ADMIN
    return rank_access(
        viewer.student_id,
        submission.student_id,
        viewer_is_admin=False,
        viewer_has_unlocked=has_unlocked(session, viewer.student_id, submission.lab_id),
    )


def require_full_access(access: AccessLevel, action: str = "view this submission") -> None:
    if access is AccessLevel.GUEST:
        raise Unauthenticated(f"Log in to {action}")
    if not access.has_full_access:
        raise Forbidden(
            f"Submit a solution to this lab before you {action}",
            required_action=SUBMIT_SOLUTION,
        )


def register_view(session: Session, submission: Submission, access: AccessLevel) -> bool:
    """Count one view for a non-owner with full access.

    The increment runs as a single UPDATE so concurrent viewers never lose
    each other's counts. Returns whether a view was counted.
    """
    if access is AccessLevel.OWNER or not access.has_full_access:
        return False

    session.exec(
        update(Submission)
        .where(Submission.submission_id == submission.submission_id)
        .values(view_count=Submission.view_count + 1)
    )
    session.commit()
    session.refresh(submission)
    logger.debug("Counted view of submission %s (%s)", submission.submission_id, access.value)
    return True
