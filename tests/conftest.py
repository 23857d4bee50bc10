import os

# Must be set before labshare.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session, create_engine
from sqlmodel.pool import StaticPool

from labshare.main import app
from labshare.models.admin import Admin
from labshare.models.lab import Course, Lab
from labshare.models.student import Student
from labshare.services.auth import create_access_token
from labshare.services.database import get_session
from labshare.services.storage import AttachmentStorage, get_storage

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


class FakeS3Client:
    """Stands in for the boto3 S3 client."""

    def __init__(self):
        self.objects = {}
        self.signed = []
        self.deleted = []
        # put_object raises once this many objects are stored
        self.fail_after_puts = None

    def put_object(self, Bucket, Key, Body, ContentType, **kwargs):
        if self.fail_after_puts is not None and len(self.objects) >= self.fail_after_puts:
            raise RuntimeError("storage unavailable")
        self.objects[Key] = (Body, ContentType)

    def generate_presigned_url(self, operation, Params, ExpiresIn):
        self.signed.append((Params["Key"], ExpiresIn))
        return f"https://storage.test/{Params['Bucket']}/{Params['Key']}?expires={ExpiresIn}&sig={len(self.signed)}"

    def delete_object(self, Bucket, Key):
        self.deleted.append(Key)
        self.objects.pop(Key, None)


@pytest.fixture()
def session():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture()
def s3():
    return FakeS3Client()


@pytest.fixture()
def storage(s3):
    return AttachmentStorage(client=s3, bucket="test-bucket")


@pytest.fixture()
def client(session, storage):
    """Test client that uses the test session and fake storage via dependency overrides."""
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_header(student_id: int) -> dict:
    return {"Authorization": f"Bearer {create_access_token(student_id)}"}


def add_student(session: Session, name: str, email: str) -> Student:
    student = Student(name=name, email=email)
    session.add(student)
    session.commit()
    session.refresh(student)
    return student


@pytest.fixture()
def course(session):
    course = Course(name="Operating Systems")
    session.add(course)
    session.commit()
    session.refresh(course)
    return course


@pytest.fixture()
def lab1(session, course):
    lab = Lab(course_id=course.course_id, lab_number=1, title="Processes")
    session.add(lab)
    session.commit()
    session.refresh(lab)
    return lab


@pytest.fixture()
def lab2(session, course):
    lab = Lab(course_id=course.course_id, lab_number=2, title="Threads")
    session.add(lab)
    session.commit()
    session.refresh(lab)
    return lab


@pytest.fixture()
def alice(session):
    return add_student(session, "Alice Adams", "alice@example.com")


@pytest.fixture()
def bob(session):
    return add_student(session, "Bob Brown", "bob@example.com")


@pytest.fixture()
def carol(session):
    return add_student(session, "Carol Clark", "carol@example.com")


@pytest.fixture()
def admin(session):
    student = add_student(session, "Dana Admin", "Dana.Admin@Example.com")
    session.add(Admin(email="dana.admin@example.com"))
    session.commit()
    return student


SOLUTION = """def fork_tree(depth):
    if depth == 0:
        return 1
    total = 0
    for child in range(2):
        total += fork_tree(depth - 1)
    return total
"""


def submit(client, student, lab, title="My solution", is_anonymous=False, files=None):
    files = files if files is not None else [
        {"filename": "solution.py", "language": "python", "content": SOLUTION},
        {"filename": "report.pdf", "mime_type": "application/pdf", "data": "JVBERi0xLjQK"},
    ]
    r = client.post(
        "/submissions",
        headers=auth_header(student.student_id),
        json={
            "lab_id": lab.lab_id,
            "title": title,
            "is_anonymous": is_anonymous,
            "files": files,
        },
    )
    assert r.status_code == 201, r.text
    return r.json()
