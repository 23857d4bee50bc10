from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from sqlmodel import Session, select

from ..models.attachment import Attachment
from ..models.code_file import CodeFile
from ..models.comment import Comment
from ..models.lab import Lab, LabPublic
from ..models.student import Student, StudentPublic
from ..models.submission import Submission
from .access import AccessLevel, resolve_access, register_view
from .anonymity import project_author
from .auth import Viewer
from .errors import NotFound
from .redaction import ProjectedAttachment, ProjectedCodeFile, redact_attachment, redact_code


class SubmissionPublic(BaseModel):
    submission_id: int
    lab_id: int
    title: str
    is_anonymous: bool
    view_count: int
    upvote_count: int
    created_at: datetime
    updated_at: datetime
    author: StudentPublic


class CommentPublic(BaseModel):
    comment_id: int
    submission_id: int
    content: str
    is_anonymous: bool
    is_auto_log: bool
    is_censored: bool
    is_mine: bool
    author: StudentPublic
    created_at: datetime
    updated_at: datetime


class RedactedView(BaseModel):
    submission: SubmissionPublic
    lab: Optional[LabPublic] = None
    access: AccessLevel
    has_full_access: bool
    is_owner: bool
    required_action: Optional[str] = None
    code_files: List[ProjectedCodeFile]
    attachments: List[ProjectedAttachment]
    comments: List[CommentPublic]
    comment_count: int


def load_students(session: Session, student_ids) -> dict:
    ids = set(student_ids)
    if not ids:
        return {}
    students = session.exec(select(Student).where(Student.student_id.in_(ids))).all()
    return {s.student_id: s for s in students}


def project_submission_header(
    submission: Submission,
    author: Optional[Student],
    viewer: Viewer,
) -> SubmissionPublic:
    return SubmissionPublic(
        submission_id=submission.submission_id,
        lab_id=submission.lab_id,
        title=submission.title,
        is_anonymous=submission.is_anonymous,
        view_count=submission.view_count,
        upvote_count=submission.upvote_count,
        created_at=submission.created_at,
        updated_at=submission.updated_at,
        author=project_author(submission, author, viewer.student_id),
    )


def project_comment(comment: Comment, author: Optional[Student], viewer: Viewer) -> CommentPublic:
    return CommentPublic(
        comment_id=comment.comment_id,
        submission_id=comment.submission_id,
        content=comment.content,
        is_anonymous=comment.is_anonymous,
        is_auto_log=comment.is_auto_log,
        is_censored=comment.is_censored,
        is_mine=viewer.is_authenticated and comment.student_id == viewer.student_id,
        author=project_author(comment, author, viewer.student_id),
        created_at=comment.created_at,
        updated_at=comment.updated_at,
    )


def project_comments(session: Session, comments: List[Comment], viewer: Viewer) -> List[CommentPublic]:
    authors = load_students(session, (c.student_id for c in comments))
    return [project_comment(c, authors.get(c.student_id), viewer) for c in comments]


def project_submission(
    session: Session,
    submission: Submission,
    code_files: List[CodeFile],
    attachments: List[Attachment],
    comments: List[Comment],
    access: AccessLevel,
    viewer: Viewer,
    storage,
) -> RedactedView:
    """Build what a single viewer may see of a submission on this request.

    Code bodies, attachment URLs and the comment thread are only included with
    full access. Attachment URLs are signed here, after access is known.
    """
    full = access.has_full_access
    author = session.get(Student, submission.student_id)
    lab = session.get(Lab, submission.lab_id)

    return RedactedView(
        submission=project_submission_header(submission, author, viewer),
        lab=LabPublic.model_validate(lab, from_attributes=True) if lab else None,
        access=access,
        has_full_access=full,
        is_owner=access is AccessLevel.OWNER,
        required_action=access.required_action,
        code_files=[redact_code(f, full) for f in code_files],
        attachments=[redact_attachment(a, full, storage) for a in attachments],
        comments=project_comments(session, comments, viewer) if full else [],
        comment_count=len(comments),
    )


def view_submission(session: Session, viewer: Viewer, submission_id: int, storage) -> RedactedView:
    submission = session.get(Submission, submission_id)
    if not submission:
        raise NotFound("Submission not found")

    access = resolve_access(session, viewer, submission)
    register_view(session, submission, access)

    code_files = session.exec(
        select(CodeFile)
        .where(CodeFile.submission_id == submission_id)
        .order_by(CodeFile.created_at.desc(), CodeFile.code_id.desc())
    ).all()
    attachments = session.exec(
        select(Attachment)
        .where(Attachment.submission_id == submission_id)
        .order_by(Attachment.created_at.desc(), Attachment.attachment_id.desc())
    ).all()
    comments = session.exec(
        select(Comment)
        .where(Comment.submission_id == submission_id)
        .order_by(Comment.created_at.asc(), Comment.comment_id.asc())
    ).all()

    return project_submission(
        session, submission, list(code_files), list(attachments), list(comments),
        access, viewer, storage,
    )
