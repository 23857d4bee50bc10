from labshare.models.comment import Comment
from labshare.models.student import Student
from labshare.models.submission import Submission
from labshare.services.anonymity import ANONYMOUS_NAME, project_author

AUTHOR = Student(student_id=1, name="Alice Adams", email="alice@example.com")


def test_anonymous_submission_hidden_from_other_viewers():
    submission = Submission(student_id=1, lab_id=1, title="t", is_anonymous=True)

    for viewer_id in (2, None):
        projected = project_author(submission, AUTHOR, viewer_id)
        assert projected.name == ANONYMOUS_NAME
        assert projected.student_id is None


def test_owner_always_sees_own_name():
    submission = Submission(student_id=1, lab_id=1, title="t", is_anonymous=True)

    projected = project_author(submission, AUTHOR, 1)
    assert projected.name == "Alice Adams"
    assert projected.student_id == 1


def test_named_content_shows_author():
    comment = Comment(submission_id=1, student_id=1, content="nice", is_anonymous=False)

    projected = project_author(comment, AUTHOR, 5)
    assert projected.name == "Alice Adams"
