from datetime import datetime, timezone

from sqlmodel import SQLModel, create_engine, Session

from moturn.config import DATABASE_URL

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)


def utcnow():
    # naive UTC, matches what both sqlite and postgres hand back
    return datetime.now(timezone.utc).replace(tzinfo=None)


def create_db_and_tables():
    # table models register themselves on import
    from moturn.models import user_db, session_db, category_db, item_db, chat_db  # noqa: F401
    SQLModel.metadata.create_all(engine)


def get_session():
    return Session(engine)
