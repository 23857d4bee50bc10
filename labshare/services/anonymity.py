from typing import Optional, Protocol

from ..models.student import Student, StudentPublic

ANONYMOUS_NAME = "Anonymous"


class AuthoredEntity(Protocol):
    student_id: int
    is_anonymous: bool


def is_hidden_from(entity: AuthoredEntity, viewer_id: Optional[int]) -> bool:
    """Anonymous entities hide their author from everyone but the author.

    Admins get no exception here; revealing an author to an admin is a
    separate, logged action.
    """
    return bool(entity.is_anonymous) and entity.student_id != viewer_id


def project_author(
    entity: AuthoredEntity,
    author: Optional[Student],
    viewer_id: Optional[int],
) -> StudentPublic:
    if is_hidden_from(entity, viewer_id):
        return StudentPublic(student_id=None, name=ANONYMOUS_NAME)
    if author is None:
        return StudentPublic(student_id=entity.student_id, name="Unknown")
    return StudentPublic(student_id=author.student_id, name=author.name)
