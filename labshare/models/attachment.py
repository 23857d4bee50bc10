from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, timezone

class AttachmentBase(SQLModel):
    submission_id: int = Field(foreign_key="submission.submission_id", index=True)
    filename: str = Field(max_length=255)
    storage_path: str = Field(max_length=500)
    mime_type: str = Field(default="application/octet-stream", max_length=100)
    file_size: Optional[int] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class Attachment(AttachmentBase, table=True):
    attachment_id: Optional[int] = Field(default=None, primary_key=True)
