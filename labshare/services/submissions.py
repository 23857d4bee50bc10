"""Submission lifecycle.

Every operation that creates, moves or deletes a submission changes the lab
unlock ledger in the same transaction, so a student has an unlock for a lab
exactly when they own a submission there. File changes are committed first
and described by an auto-log comment afterwards.
"""
import base64
import binascii
import logging
import os
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from fastapi import HTTPException
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, delete

from ..models.attachment import Attachment
from ..models.code_file import CodeFile
from ..models.comment import Comment
from ..models.lab import Lab
from ..models.student import Student
from ..models.submission import Submission
from ..models.upvote import Upvote
from .activity_log import ActivityEvent, ActivityKind, record_activity
from .admin import is_admin
from .errors import Conflict, Forbidden, NotFound, Unauthenticated
from .storage import attachment_key
from .unlocks import record_unlock, revoke_unlock, transfer_unlock

logger = logging.getLogger(__name__)

# Files with these extensions are stored as text even without an explicit language
CODE_EXTENSIONS = {
    ".js", ".ts", ".py", ".cpp", ".c", ".h", ".java", ".cs", ".php", ".rb",
    ".go", ".rs", ".txt", ".sql", ".html", ".css",
}


class FileUpload(BaseModel):
    filename: str
    content: Optional[str] = None
    language: Optional[str] = None
    mime_type: Optional[str] = None
    # base64 payload for attachments, optionally a data: URL
    data: Optional[str] = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _decode_base64(data: str, filename: str) -> bytes:
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail=f'File "{filename}" has invalid base64 data')


def split_uploads(
    files: List[FileUpload],
    existing_names=(),
) -> Tuple[List[FileUpload], List[Tuple[FileUpload, bytes]]]:
    """Validate an upload batch and split it into code files and attachments."""
    if not files:
        raise HTTPException(status_code=400, detail="At least one file is required")

    seen = {name.lower() for name in existing_names}
    duplicates = []
    for file in files:
        if not file.filename or not file.filename.strip():
            raise HTTPException(status_code=400, detail="All files must have a filename")
        key = file.filename.strip().lower()
        if key in seen:
            duplicates.append(file.filename)
        seen.add(key)
    if duplicates:
        raise HTTPException(
            status_code=400,
            detail=f"Duplicate filenames detected: {', '.join(duplicates)}. Each file must have a unique name.",
        )

    code_files, attachments = [], []
    for file in files:
        extension = os.path.splitext(file.filename)[1].lower()
        if (file.content and file.language) or extension in CODE_EXTENSIONS:
            code_files.append(file)
        elif file.data:
            attachments.append((file, _decode_base64(file.data, file.filename)))
        else:
            raise HTTPException(
                status_code=400,
                detail=f'File "{file.filename}" is not a code file and no file data provided. '
                       f'Attachments must include file data.',
            )
    return code_files, attachments


def get_submission(session: Session, submission_id: int) -> Submission:
    submission = session.get(Submission, submission_id)
    if not submission:
        raise NotFound("Submission not found")
    return submission


def get_owned_submission(session: Session, student_id: int, submission_id: int, action: str) -> Submission:
    submission = get_submission(session, submission_id)
    if submission.student_id != student_id:
        raise Forbidden(f"Cannot {action} other users' submissions")
    return submission


def _stage_files(
    session: Session,
    storage,
    submission: Submission,
    code_files: List[FileUpload],
    attachments: List[Tuple[FileUpload, bytes]],
    uploaded_keys: List[str],
) -> List[ActivityEvent]:
    events = []
    for file in code_files:
        session.add(CodeFile(
            submission_id=submission.submission_id,
            filename=file.filename.strip(),
            language=(file.language or "text").strip(),
            content=file.content or "",
        ))
        events.append(ActivityEvent(ActivityKind.CODE_ADD, filename=file.filename.strip()))

    for file, data in attachments:
        mime_type = file.mime_type or "application/octet-stream"
        key = storage.upload(attachment_key(submission.submission_id, file.filename), data, mime_type)
        uploaded_keys.append(key)
        session.add(Attachment(
            submission_id=submission.submission_id,
            filename=file.filename.strip(),
            storage_path=key,
            mime_type=mime_type,
            file_size=len(data),
        ))
        events.append(ActivityEvent(ActivityKind.ATTACHMENT_ADD, filename=file.filename.strip()))
    return events


def create_submission(
    session: Session,
    storage,
    student_id: int,
    lab_id: int,
    title: str,
    files: List[FileUpload],
    is_anonymous: bool = False,
) -> Submission:
    if not title or not title.strip():
        raise HTTPException(status_code=400, detail="Title is required")

    # Tokens can outlive their student
    if session.get(Student, student_id) is None:
        raise Unauthenticated("Student account not found")

    lab = session.get(Lab, lab_id)
    if not lab:
        raise NotFound("Lab not found")

    existing = session.exec(
        select(Submission.submission_id).where(
            (Submission.student_id == student_id) &
            (Submission.lab_id == lab_id)
        )
    ).first()
    if existing is not None:
        raise Conflict(f'You already have a submission in "{lab.title}"')

    code_files, attachments = split_uploads(files)

    submission = Submission(
        student_id=student_id,
        lab_id=lab_id,
        title=title.strip(),
        is_anonymous=is_anonymous,
    )
    uploaded_keys: List[str] = []
    try:
        session.add(submission)
        record_unlock(session, student_id, lab_id)
        session.flush()  # Get the submission_id
        _stage_files(session, storage, submission, code_files, attachments, uploaded_keys)
        session.commit()
    except IntegrityError:
        # Student and lab exist, so only the one-per-lab constraint can fail here
        session.rollback()
        storage.delete_quietly(uploaded_keys)
        raise Conflict(f'You already have a submission in "{lab.title}"')
    except Exception:
        session.rollback()
        storage.delete_quietly(uploaded_keys)
        raise

    session.refresh(submission)
    logger.info("Student %s created submission %s in lab %s", student_id, submission.submission_id, lab_id)
    return submission


def move_submission(session: Session, student_id: int, submission_id: int, target_lab_id: int) -> Submission:
    """Move a submission to another lab, carrying its unlock along.

    The destination is checked before anything changes; the submission update
    and both ledger changes then commit as one unit.
    """
    submission = get_owned_submission(session, student_id, submission_id, "move")

    if submission.lab_id == target_lab_id:
        raise HTTPException(status_code=400, detail="Submission is already in this lab")

    target_lab = session.get(Lab, target_lab_id)
    if not target_lab:
        raise NotFound("Target lab not found")

    duplicate = session.exec(
        select(Submission.submission_id).where(
            (Submission.student_id == student_id) &
            (Submission.lab_id == target_lab_id)
        )
    ).first()
    if duplicate is not None:
        raise Conflict(
            f'You already have a submission in "{target_lab.title}". '
            f'A user cannot have multiple submissions in the same lab.'
        )

    old_lab_id = submission.lab_id
    try:
        submission.lab_id = target_lab_id
        submission.updated_at = _now()
        session.add(submission)
        transfer_unlock(session, student_id, old_lab_id, target_lab_id)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict(f'You already have a submission in "{target_lab.title}"')

    session.refresh(submission)
    logger.info("Moved submission %s from lab %s to lab %s", submission_id, old_lab_id, target_lab_id)
    return submission


def delete_submission(session: Session, storage, student_id: int, submission_id: int) -> None:
    submission = get_submission(session, submission_id)

    is_owner = submission.student_id == student_id
    if not is_owner and not is_admin(session, student_id):
        raise Forbidden("Cannot delete other users' submissions")

    storage_keys = list(session.exec(
        select(Attachment.storage_path).where(Attachment.submission_id == submission_id)
    ).all())

    # Delete in order to satisfy foreign keys
    session.exec(delete(Upvote).where(Upvote.submission_id == submission_id))
    session.exec(delete(Comment).where(Comment.submission_id == submission_id))
    session.exec(delete(CodeFile).where(CodeFile.submission_id == submission_id))
    session.exec(delete(Attachment).where(Attachment.submission_id == submission_id))
    revoke_unlock(session, submission.student_id, submission.lab_id)
    session.delete(submission)
    session.commit()

    if not is_owner:
        logger.warning("Admin %s deleted submission %s", student_id, submission_id)

    # After successful database deletion, delete the stored attachments
    storage.delete_quietly(storage_keys)


def set_submission_anonymity(session: Session, student_id: int, submission_id: int, is_anonymous: bool) -> Submission:
    # Existing comments keep the flag they were stamped with
    submission = get_owned_submission(session, student_id, submission_id, "update")
    submission.is_anonymous = is_anonymous
    submission.updated_at = _now()
    session.add(submission)
    session.commit()
    session.refresh(submission)
    return submission


def _touch(session: Session, submission: Submission) -> None:
    submission.updated_at = _now()
    session.add(submission)


def add_files(session: Session, storage, student_id: int, submission_id: int, files: List[FileUpload]) -> Submission:
    submission = get_owned_submission(session, student_id, submission_id, "add files to")

    existing_names = list(session.exec(
        select(CodeFile.filename).where(CodeFile.submission_id == submission_id)
    ).all()) + list(session.exec(
        select(Attachment.filename).where(Attachment.submission_id == submission_id)
    ).all())
    code_files, attachments = split_uploads(files, existing_names)

    uploaded_keys: List[str] = []
    try:
        events = _stage_files(session, storage, submission, code_files, attachments, uploaded_keys)
        _touch(session, submission)
        session.commit()
    except Exception:
        session.rollback()
        storage.delete_quietly(uploaded_keys)
        raise

    record_activity(session, submission_id, student_id, events)
    session.refresh(submission)
    return submission


def _get_code_file(session: Session, submission_id: int, code_id: int) -> CodeFile:
    code_file = session.get(CodeFile, code_id)
    if not code_file or code_file.submission_id != submission_id:
        raise NotFound("Code file not found")
    return code_file


def _get_attachment(session: Session, submission_id: int, attachment_id: int) -> Attachment:
    attachment = session.get(Attachment, attachment_id)
    if not attachment or attachment.submission_id != submission_id:
        raise NotFound("Attachment not found")
    return attachment


def update_code_file(
    session: Session,
    student_id: int,
    submission_id: int,
    code_id: int,
    filename: Optional[str] = None,
    language: Optional[str] = None,
    content: Optional[str] = None,
) -> CodeFile:
    submission = get_owned_submission(session, student_id, submission_id, "update")
    code_file = _get_code_file(session, submission_id, code_id)

    if filename is not None and not filename.strip():
        raise HTTPException(status_code=400, detail="Filename cannot be empty")
    if language is not None and not language.strip():
        raise HTTPException(status_code=400, detail="Language cannot be empty")

    old_filename, old_language, old_content = code_file.filename, code_file.language, code_file.content

    if filename is not None:
        code_file.filename = filename.strip()
    if language is not None:
        code_file.language = language.strip()
    if content is not None:
        code_file.content = content
    code_file.updated_at = _now()
    session.add(code_file)
    _touch(session, submission)
    session.commit()
    session.refresh(code_file)

    record_activity(session, submission_id, student_id, [
        ActivityEvent.code_update(
            old_filename=old_filename,
            new_filename=code_file.filename,
            old_language=old_language,
            new_language=code_file.language,
            content_changed=content is not None and content != old_content,
        )
    ])
    return code_file


def delete_code_file(session: Session, student_id: int, submission_id: int, code_id: int) -> None:
    submission = get_owned_submission(session, student_id, submission_id, "delete")
    code_file = _get_code_file(session, submission_id, code_id)
    filename = code_file.filename

    session.delete(code_file)
    _touch(session, submission)
    session.commit()

    record_activity(session, submission_id, student_id, [
        ActivityEvent(ActivityKind.CODE_DELETE, filename=filename)
    ])


def rename_attachment(session: Session, student_id: int, submission_id: int, attachment_id: int, filename: str) -> Attachment:
    submission = get_owned_submission(session, student_id, submission_id, "update")
    attachment = _get_attachment(session, submission_id, attachment_id)

    if not filename or not filename.strip():
        raise HTTPException(status_code=400, detail="Filename cannot be empty")

    old_filename = attachment.filename
    attachment.filename = filename.strip()
    attachment.updated_at = _now()
    session.add(attachment)
    _touch(session, submission)
    session.commit()
    session.refresh(attachment)

    record_activity(session, submission_id, student_id, [
        ActivityEvent(
            ActivityKind.ATTACHMENT_RENAME,
            old_filename=old_filename,
            new_filename=attachment.filename,
        )
    ])
    return attachment


def delete_attachment(session: Session, storage, student_id: int, submission_id: int, attachment_id: int) -> None:
    submission = get_owned_submission(session, student_id, submission_id, "delete")
    attachment = _get_attachment(session, submission_id, attachment_id)
    filename, key = attachment.filename, attachment.storage_path

    session.delete(attachment)
    _touch(session, submission)
    session.commit()

    storage.delete_quietly([key])
    record_activity(session, submission_id, student_id, [
        ActivityEvent(ActivityKind.ATTACHMENT_DELETE, filename=filename)
    ])
