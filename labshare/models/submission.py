from sqlmodel import SQLModel, Field, UniqueConstraint
from typing import Optional
from datetime import datetime, timezone

class SubmissionBase(SQLModel):
    student_id: int = Field(foreign_key="student.student_id", index=True)
    lab_id: int = Field(foreign_key="lab.lab_id", index=True)
    title: str = Field(max_length=200)
    is_anonymous: bool = Field(default=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class Submission(SubmissionBase, table=True):
    # One live submission per student per lab
    __table_args__ = (
        UniqueConstraint("student_id", "lab_id", name="uq_submission_student_lab"),
    )

    submission_id: Optional[int] = Field(default=None, primary_key=True)
    view_count: int = Field(default=0)
    upvote_count: int = Field(default=0)
