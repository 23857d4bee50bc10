"""Lab unlock ledger.

A row in ``LabUnlock`` for (student, lab) exists exactly when that student
owns a live submission in the lab. Mutations here only stage changes on the
session; the caller commits them together with the submission change that
justifies them.
"""
from sqlmodel import Session, select, delete

from ..models.lab_unlock import LabUnlock


def has_unlocked(session: Session, student_id: int, lab_id: int) -> bool:
    return session.exec(
        select(LabUnlock.student_id).where(
            (LabUnlock.student_id == student_id) &
            (LabUnlock.lab_id == lab_id)
        )
    ).first() is not None


def record_unlock(session: Session, student_id: int, lab_id: int) -> None:
    if session.get(LabUnlock, (student_id, lab_id)) is not None:
        return
    session.add(LabUnlock(student_id=student_id, lab_id=lab_id))


def revoke_unlock(session: Session, student_id: int, lab_id: int) -> None:
    session.exec(
        delete(LabUnlock).where(
            (LabUnlock.student_id == student_id) &
            (LabUnlock.lab_id == lab_id)
        )
    )


def transfer_unlock(session: Session, student_id: int, old_lab_id: int, new_lab_id: int) -> None:
    # Insert first so the primary key rejects a concurrent duplicate before the old row goes
    session.add(LabUnlock(student_id=student_id, lab_id=new_lab_id))
    session.flush()
    revoke_unlock(session, student_id, old_lab_id)
