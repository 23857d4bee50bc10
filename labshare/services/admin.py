from typing import Optional

from sqlmodel import Session, select, func

from ..models.admin import Admin
from ..models.student import Student


def is_admin(session: Session, student_id: Optional[int]) -> bool:
    """Admin membership is keyed on the student's email, case-insensitively."""
    if student_id is None:
        return False

    student = session.get(Student, student_id)
    if not student or not student.email:
        return False

    return session.exec(
        select(Admin.admin_id).where(func.lower(Admin.email) == student.email.lower())
    ).first() is not None
