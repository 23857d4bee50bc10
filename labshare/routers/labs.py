from fastapi import APIRouter, Depends
from sqlmodel import Session, select
from pydantic import BaseModel
from typing import List, Optional

from ..services.database import get_session
from ..services.auth import Viewer, get_viewer
from ..services.admin import is_admin
from ..services.errors import NotFound, LOGIN, SUBMIT_SOLUTION
from ..services.projection import SubmissionPublic, load_students, project_submission_header
from ..services.unlocks import has_unlocked
from ..models.lab import Lab, LabPublic
from ..models.submission import Submission

router = APIRouter(
    prefix="/labs",
    tags=["Labs"]
)


class LabSubmissionsResponse(BaseModel):
    lab: LabPublic
    unlocked: bool
    required_action: Optional[str] = None
    submissions: List[SubmissionPublic]

@router.get("/{lab_id}/submissions", response_model=LabSubmissionsResponse)
def get_lab_submissions(
    lab_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(get_viewer)
):
    lab = session.get(Lab, lab_id)
    if not lab:
        raise NotFound("Lab not found")

    lab_public = LabPublic.model_validate(lab, from_attributes=True)

    if not viewer.is_authenticated:
        return {"lab": lab_public, "unlocked": False, "required_action": LOGIN, "submissions": []}

    unlocked = has_unlocked(session, viewer.student_id, lab_id) or is_admin(session, viewer.student_id)

    # Locked viewers still get previews; the content itself stays redacted per submission
    submissions = session.exec(
        select(Submission)
        .where(Submission.lab_id == lab_id)
        .order_by(Submission.upvote_count.desc(), Submission.created_at.desc())
    ).all()

    authors = load_students(session, (s.student_id for s in submissions))
    return {
        "lab": lab_public,
        "unlocked": unlocked,
        "required_action": None if unlocked else SUBMIT_SOLUTION,
        "submissions": [
            project_submission_header(s, authors.get(s.student_id), viewer)
            for s in submissions
        ],
    }
