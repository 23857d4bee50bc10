from sqlmodel import select

from labshare.models.lab_unlock import LabUnlock
from labshare.services.unlocks import has_unlocked, record_unlock, revoke_unlock, transfer_unlock


def unlock_rows(session):
    return [(u.student_id, u.lab_id) for u in session.exec(select(LabUnlock)).all()]


def test_record_unlock_is_idempotent(session, lab1, alice):
    record_unlock(session, alice.student_id, lab1.lab_id)
    session.commit()
    record_unlock(session, alice.student_id, lab1.lab_id)
    session.commit()

    assert unlock_rows(session) == [(alice.student_id, lab1.lab_id)]
    assert has_unlocked(session, alice.student_id, lab1.lab_id)


def test_revoke_missing_unlock_is_a_no_op(session, lab1, lab2, alice):
    record_unlock(session, alice.student_id, lab1.lab_id)
    session.commit()

    revoke_unlock(session, alice.student_id, lab2.lab_id)
    session.commit()
    assert unlock_rows(session) == [(alice.student_id, lab1.lab_id)]

    revoke_unlock(session, alice.student_id, lab1.lab_id)
    revoke_unlock(session, alice.student_id, lab1.lab_id)
    session.commit()
    assert unlock_rows(session) == []


def test_unlocks_are_per_student(session, lab1, alice, bob):
    record_unlock(session, alice.student_id, lab1.lab_id)
    session.commit()

    assert not has_unlocked(session, bob.student_id, lab1.lab_id)


def test_transfer_moves_the_row(session, lab1, lab2, alice):
    record_unlock(session, alice.student_id, lab1.lab_id)
    session.commit()

    transfer_unlock(session, alice.student_id, lab1.lab_id, lab2.lab_id)
    session.commit()

    assert unlock_rows(session) == [(alice.student_id, lab2.lab_id)]


def test_transfer_is_undone_with_its_transaction(session, lab1, lab2, alice):
    record_unlock(session, alice.student_id, lab1.lab_id)
    session.commit()

    transfer_unlock(session, alice.student_id, lab1.lab_id, lab2.lab_id)
    session.rollback()

    assert has_unlocked(session, alice.student_id, lab1.lab_id)
    assert not has_unlocked(session, alice.student_id, lab2.lab_id)
