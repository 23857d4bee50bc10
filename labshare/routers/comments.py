from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from pydantic import BaseModel
from typing import List

from ..services.database import get_session
from ..services.auth import Viewer, get_viewer, get_authenticated_viewer
from ..services.comments import list_comments, create_comment, set_comment_anonymity, delete_comment
from ..services.projection import CommentPublic

router = APIRouter(
    prefix="/submissions/{submission_id}/comments",
    tags=["Comments"]
)


@router.get("", response_model=List[CommentPublic])
def get_comments(
    submission_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(get_viewer)
):
    return list_comments(session, viewer, submission_id)


class CommentCreate(BaseModel):
    content: str
    is_anonymous: bool = False

@router.post("", response_model=CommentPublic, status_code=status.HTTP_201_CREATED)
def post_comment(
    submission_id: int,
    payload: CommentCreate,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(get_authenticated_viewer)
):
    return create_comment(session, viewer, submission_id, payload.content, payload.is_anonymous)


class CommentAnonymityUpdate(BaseModel):
    is_anonymous: bool

@router.patch("/{comment_id}", response_model=CommentPublic)
def update_comment(
    submission_id: int,
    comment_id: int,
    payload: CommentAnonymityUpdate,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(get_authenticated_viewer)
):
    return set_comment_anonymity(session, viewer, submission_id, comment_id, payload.is_anonymous)


@router.delete("/{comment_id}")
def remove_comment(
    submission_id: int,
    comment_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(get_authenticated_viewer)
):
    delete_comment(session, viewer, submission_id, comment_id)
    return {"message": "Comment deleted successfully"}
