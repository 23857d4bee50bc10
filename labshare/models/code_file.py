from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, timezone

class CodeFileBase(SQLModel):
    submission_id: int = Field(foreign_key="submission.submission_id", index=True)
    filename: str = Field(max_length=255)
    language: str = Field(max_length=50)
    content: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class CodeFile(CodeFileBase, table=True):
    code_id: Optional[int] = Field(default=None, primary_key=True)
