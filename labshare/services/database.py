from sqlmodel import SQLModel, Session, create_engine

from ..config import DATABASE_URL

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# SQLAlchemy database engine
engine = create_engine(DATABASE_URL, connect_args=connect_args)


def create_db_and_tables():
    # import models so SQLModel registers them
    from ..models import (  # noqa: F401
        admin, attachment, code_file, comment, lab, lab_unlock, student, submission, upvote
    )
    SQLModel.metadata.create_all(engine)


# every request that needs the DB gets a fresh session, and it always closes
def get_session():
    with Session(engine) as session:
        yield session
