from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, timezone

class CommentBase(SQLModel):
    submission_id: int = Field(foreign_key="submission.submission_id", index=True)
    student_id: int = Field(foreign_key="student.student_id", index=True)
    content: str = Field(max_length=5000)
    is_anonymous: bool = Field(default=False)
    is_auto_log: bool = Field(default=False)
    is_censored: bool = Field(default=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class Comment(CommentBase, table=True):
    comment_id: Optional[int] = Field(default=None, primary_key=True)
