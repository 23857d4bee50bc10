from sqlmodel import SQLModel, Field, UniqueConstraint
from typing import Optional
from datetime import datetime, timezone

class Course(SQLModel, table=True):
    course_id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class LabBase(SQLModel):
    course_id: int = Field(foreign_key="course.course_id", index=True)
    lab_number: int
    title: str = Field(max_length=200)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class Lab(LabBase, table=True):
    __table_args__ = (
        UniqueConstraint("course_id", "lab_number", name="uq_lab_course_number"),
    )

    lab_id: Optional[int] = Field(default=None, primary_key=True)

class LabPublic(SQLModel):
    lab_id: int
    course_id: int
    lab_number: int
    title: str
