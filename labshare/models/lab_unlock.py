from sqlmodel import SQLModel, Field
from datetime import datetime, timezone

class LabUnlock(SQLModel, table=True):
    # A row exists iff the student has a live submission in the lab
    student_id: int = Field(foreign_key="student.student_id", primary_key=True)
    lab_id: int = Field(foreign_key="lab.lab_id", primary_key=True)
    unlocked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
