import sys
import os

# Add the project root directory to Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlmodel import Session, select
import random

from labshare.models.admin import Admin
from labshare.models.lab import Course, Lab
from labshare.models.student import Student
from labshare.services.database import create_db_and_tables, engine
from labshare.services.storage import get_storage
from labshare.services.submissions import FileUpload, create_submission
from labshare.services.upvotes import toggle_upvote
from labshare.services.auth import Viewer

# Test data
test_students = [
    {"name": "John Doe", "email": "john@example.com"},
    {"name": "Jane Smith", "email": "jane@example.com"},
    {"name": "Bob Wilson", "email": "bob@example.com"},
    {"name": "Alice Jones", "email": "alice@example.com"},
    {"name": "Charlie Brown", "email": "charlie@example.com"},
    {"name": "Emma Davis", "email": "emma@example.com"},
]

test_admins = ["teacher@example.com"]

test_labs = [
    (1, "Processes and fork()"),
    (2, "Threads and mutexes"),
    (3, "Pipes and signals"),
]

SAMPLE_CODE = """#include <stdio.h>
#include <unistd.h>

int main(void) {
    pid_t pid = fork();
    if (pid == 0) {
        printf("child\\n");
    } else {
        printf("parent of %d\\n", pid);
    }
    return 0;
}
"""

def create_students(session: Session):
    students = [Student(name=s["name"], email=s["email"]) for s in test_students]
    session.add_all(students)
    session.add_all([Student(name="Course Teacher", email=email) for email in test_admins])
    session.add_all([Admin(email=email) for email in test_admins])
    session.commit()
    for student in students:
        session.refresh(student)
    return students

def create_course(session: Session):
    course = Course(name="Operating Systems", description="Weekly systems programming labs")
    session.add(course)
    session.commit()
    session.refresh(course)

    labs = [Lab(course_id=course.course_id, lab_number=n, title=title) for n, title in test_labs]
    session.add_all(labs)
    session.commit()
    for lab in labs:
        session.refresh(lab)
    return labs

def create_submissions(session: Session, students: list[Student], labs: list[Lab]):
    storage = get_storage()
    submissions = []
    for student in students:
        # Each student submits to a random subset of labs, at most once per lab
        for lab in random.sample(labs, k=random.randint(1, len(labs))):
            submission = create_submission(
                session,
                storage,
                student_id=student.student_id,
                lab_id=lab.lab_id,
                title=f"{student.name.split()[0]}'s take on {lab.title}",
                files=[FileUpload(filename="main.c", language="c", content=SAMPLE_CODE)],
                is_anonymous=random.random() < 0.3,
            )
            submissions.append(submission)
    return submissions

def create_upvotes(session: Session, students: list[Student], submissions):
    for _ in range(15):
        voter = random.choice(students)
        submission = random.choice(submissions)
        if submission.student_id == voter.student_id:
            continue
        # Only students who unlocked the lab may vote
        try:
            toggle_upvote(session, Viewer(student_id=voter.student_id), submission.submission_id)
        except Exception as e:
            print(f"Skipped upvote by {voter.name}: {str(e)}")

def main():
    create_db_and_tables()

    with Session(engine) as session:
        if session.exec(select(Course)).first():
            print("Database already populated")
            return

        students = create_students(session)
        print(f"Created {len(students)} students")

        labs = create_course(session)
        print(f"Created {len(labs)} labs")

        submissions = create_submissions(session, students, labs)
        print(f"Created {len(submissions)} submissions")

        create_upvotes(session, students, submissions)
        print("Created upvotes")

if __name__ == "__main__":
    main()
