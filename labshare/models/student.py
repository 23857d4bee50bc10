from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, timezone

class StudentBase(SQLModel):
    name: str = Field(max_length=100)
    email: str = Field(index=True, unique=True, max_length=255)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class Student(StudentBase, table=True):
    student_id: Optional[int] = Field(default=None, primary_key=True)

class StudentPublic(SQLModel):
    # student_id is None when the author is hidden
    student_id: Optional[int]
    name: str
