"""Auto-log comments describing file changes on a submission.

The log is stamped with the submission's anonymity flag at the moment it is
written. When the submission is anonymous the actor's name is left out of
the text as well, so the comment body cannot undo the anonymity either.
Writing the log is best-effort: it runs after the file change has been
committed and never raises.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from sqlmodel import Session

from ..models.comment import Comment
from ..models.student import Student
from ..models.submission import Submission

logger = logging.getLogger(__name__)

AUTO_LOG_SUFFIX = "(auto-log)"


class ActivityKind(str, Enum):
    CODE_UPDATE = "code_update"
    CODE_ADD = "code_add"
    CODE_DELETE = "code_delete"
    ATTACHMENT_ADD = "attachment_add"
    ATTACHMENT_RENAME = "attachment_rename"
    ATTACHMENT_DELETE = "attachment_delete"


@dataclass
class ActivityEvent:
    kind: ActivityKind
    filename: Optional[str] = None
    old_filename: Optional[str] = None
    new_filename: Optional[str] = None
    old_language: Optional[str] = None
    new_language: Optional[str] = None
    content_changed: bool = False

    @classmethod
    def code_update(cls, old_filename, new_filename, old_language, new_language, content_changed):
        return cls(
            ActivityKind.CODE_UPDATE,
            filename=new_filename or old_filename,
            old_filename=old_filename,
            new_filename=new_filename,
            old_language=old_language,
            new_language=new_language,
            content_changed=content_changed,
        )


def _line(actor: Optional[str], text: str) -> str:
    prefix = f"{actor} " if actor else ""
    return f"{prefix}{text} {AUTO_LOG_SUFFIX}"


def render_activity(event: ActivityEvent, actor: Optional[str]) -> Optional[str]:
    """Render an event as comment text, or None when nothing changed.

    A code update lists each change on its own line: rename, then language
    change, then content edit.
    """
    if event.kind is ActivityKind.CODE_UPDATE:
        lines = []
        if event.old_filename and event.new_filename and event.old_filename != event.new_filename:
            lines.append(_line(actor, f"renamed: {event.old_filename} → {event.new_filename}"))
        if event.old_language and event.new_language and event.old_language != event.new_language:
            lines.append(_line(actor, f"changed language: {event.old_language} → {event.new_language}"))
        if event.content_changed:
            lines.append(_line(actor, f"edited: {event.filename or 'file'}"))
        return "\n".join(lines) or None

    if event.kind is ActivityKind.ATTACHMENT_RENAME:
        if not (event.old_filename and event.new_filename) or event.old_filename == event.new_filename:
            return None
        return _line(actor, f"renamed: {event.old_filename} → {event.new_filename}")

    if not event.filename:
        return None

    verbs = {
        ActivityKind.CODE_ADD: "added",
        ActivityKind.CODE_DELETE: "deleted",
        ActivityKind.ATTACHMENT_ADD: "uploaded",
        ActivityKind.ATTACHMENT_DELETE: "removed",
    }
    return _line(actor, f"{verbs[event.kind]}: {event.filename}")


def record_activity(
    session: Session,
    submission_id: int,
    actor_id: int,
    events: List[ActivityEvent],
) -> Optional[Comment]:
    """Write one auto-log comment for the events of a single operation."""
    try:
        submission = session.get(Submission, submission_id)
        if submission is None:
            return None

        is_anonymous = submission.is_anonymous
        actor = None
        if not is_anonymous:
            student = session.get(Student, actor_id)
            actor = student.name if student else "User"

        texts = [text for text in (render_activity(e, actor) for e in events) if text]
        if not texts:
            return None

        comment = Comment(
            submission_id=submission_id,
            student_id=actor_id,
            content="\n".join(texts),
            is_anonymous=is_anonymous,
            is_auto_log=True,
        )
        session.add(comment)
        session.commit()
        session.refresh(comment)
        return comment
    except Exception:
        session.rollback()
        logger.exception("Failed to write auto-log comment for submission %s", submission_id)
        return None
