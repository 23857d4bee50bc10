from sqlmodel import SQLModel, Field
from datetime import datetime, timezone

class Upvote(SQLModel, table=True):
    student_id: int = Field(foreign_key="student.student_id", primary_key=True)
    submission_id: int = Field(foreign_key="submission.submission_id", primary_key=True, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
