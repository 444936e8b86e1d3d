from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from app.settings import Settings


class Base(DeclarativeBase):
    pass


def make_engine(settings: Settings) -> Engine:
    # the worker task and request handlers share one engine
    return create_engine(
        f"sqlite:///{settings.SQLITE_PATH}", echo=False, future=True,
        connect_args={"check_same_thread": False})


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)


def init_db(engine: Engine):
    from infra.db.models import FileRecord, JobRecord, JobResultRecord, QueueEntryRecord
    Base.metadata.create_all(bind=engine)
