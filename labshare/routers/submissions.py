from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from ..services.database import get_session
from ..services.auth import Viewer, get_viewer, get_authenticated_viewer
from ..services.storage import AttachmentStorage, get_storage
from ..services.projection import RedactedView, SubmissionPublic, project_submission_header, view_submission
from ..services.submissions import (
    FileUpload,
    create_submission,
    move_submission,
    delete_submission,
    set_submission_anonymity,
    add_files,
    update_code_file,
    delete_code_file,
    rename_attachment,
    delete_attachment,
)
from ..services.upvotes import UpvoteState, get_upvote_state, toggle_upvote
from ..models.student import Student

router = APIRouter(
    prefix="/submissions",
    tags=["Submissions"]
)


def _owner_view(session: Session, submission, viewer: Viewer) -> SubmissionPublic:
    return project_submission_header(submission, session.get(Student, submission.student_id), viewer)


@router.get("/{submission_id}", response_model=RedactedView)
def get_submission_view(
    submission_id: int,
    session: Session = Depends(get_session),
    storage: AttachmentStorage = Depends(get_storage),
    viewer: Viewer = Depends(get_viewer)
):
    """Return what the viewer may see of a submission.

    Viewers without full access still get a response, with masked code, no
    attachment URLs and a `required_action` telling them to log in or submit.
    """
    return view_submission(session, viewer, submission_id, storage)


class SubmissionCreate(BaseModel):
    lab_id: int
    title: str
    files: List[FileUpload]
    is_anonymous: bool = False

@router.post("", response_model=SubmissionPublic, status_code=status.HTTP_201_CREATED)
def create_new_submission(
    payload: SubmissionCreate,
    session: Session = Depends(get_session),
    storage: AttachmentStorage = Depends(get_storage),
    viewer: Viewer = Depends(get_authenticated_viewer)
):
    submission = create_submission(
        session,
        storage,
        student_id=viewer.student_id,
        lab_id=payload.lab_id,
        title=payload.title,
        files=payload.files,
        is_anonymous=payload.is_anonymous,
    )
    return _owner_view(session, submission, viewer)


@router.delete("/{submission_id}")
def remove_submission(
    submission_id: int,
    session: Session = Depends(get_session),
    storage: AttachmentStorage = Depends(get_storage),
    viewer: Viewer = Depends(get_authenticated_viewer)
):
    delete_submission(session, storage, viewer.student_id, submission_id)
    return {"message": "Submission deleted successfully"}


class SubmissionMove(BaseModel):
    target_lab_id: int

@router.patch("/{submission_id}/move", response_model=SubmissionPublic)
def move_to_lab(
    submission_id: int,
    payload: SubmissionMove,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(get_authenticated_viewer)
):
    submission = move_submission(session, viewer.student_id, submission_id, payload.target_lab_id)
    return _owner_view(session, submission, viewer)


class AnonymityUpdate(BaseModel):
    is_anonymous: bool

@router.patch("/{submission_id}/anonymity", response_model=SubmissionPublic)
def update_anonymity(
    submission_id: int,
    payload: AnonymityUpdate,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(get_authenticated_viewer)
):
    submission = set_submission_anonymity(session, viewer.student_id, submission_id, payload.is_anonymous)
    return _owner_view(session, submission, viewer)


class FilesAdd(BaseModel):
    files: List[FileUpload]

@router.post("/{submission_id}/files", response_model=SubmissionPublic)
def add_submission_files(
    submission_id: int,
    payload: FilesAdd,
    session: Session = Depends(get_session),
    storage: AttachmentStorage = Depends(get_storage),
    viewer: Viewer = Depends(get_authenticated_viewer)
):
    submission = add_files(session, storage, viewer.student_id, submission_id, payload.files)
    return _owner_view(session, submission, viewer)


class CodeFileUpdate(BaseModel):
    filename: Optional[str] = None
    language: Optional[str] = None
    content: Optional[str] = None

class CodeFileRead(BaseModel):
    code_id: int
    submission_id: int
    filename: str
    language: str
    content: str
    updated_at: datetime

@router.patch("/{submission_id}/code/{code_id}", response_model=CodeFileRead)
def update_code(
    submission_id: int,
    code_id: int,
    payload: CodeFileUpdate,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(get_authenticated_viewer)
):
    return update_code_file(
        session,
        viewer.student_id,
        submission_id,
        code_id,
        filename=payload.filename,
        language=payload.language,
        content=payload.content,
    )


@router.delete("/{submission_id}/code/{code_id}")
def remove_code(
    submission_id: int,
    code_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(get_authenticated_viewer)
):
    delete_code_file(session, viewer.student_id, submission_id, code_id)
    return {"message": "Code file deleted successfully"}


class AttachmentRename(BaseModel):
    filename: str

class AttachmentRead(BaseModel):
    attachment_id: int
    submission_id: int
    filename: str
    mime_type: str
    file_size: Optional[int]
    updated_at: datetime

@router.patch("/{submission_id}/attachments/{attachment_id}", response_model=AttachmentRead)
def update_attachment(
    submission_id: int,
    attachment_id: int,
    payload: AttachmentRename,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(get_authenticated_viewer)
):
    return rename_attachment(session, viewer.student_id, submission_id, attachment_id, payload.filename)


@router.delete("/{submission_id}/attachments/{attachment_id}")
def remove_attachment(
    submission_id: int,
    attachment_id: int,
    session: Session = Depends(get_session),
    storage: AttachmentStorage = Depends(get_storage),
    viewer: Viewer = Depends(get_authenticated_viewer)
):
    delete_attachment(session, storage, viewer.student_id, submission_id, attachment_id)
    return {"message": "Attachment deleted successfully"}


@router.get("/{submission_id}/upvote", response_model=UpvoteState)
def read_upvote(
    submission_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(get_viewer)
):
    return get_upvote_state(session, viewer, submission_id)


@router.post("/{submission_id}/upvote", response_model=UpvoteState)
def toggle_submission_upvote(
    submission_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(get_authenticated_viewer)
):
    return toggle_upvote(session, viewer, submission_id)
