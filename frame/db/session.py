from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine, Session

from frame.core.config import settings

_engine = None


def get_engine():
    global _engine

    if _engine is not None:
        return _engine

    db_url = settings.DATABASE_URL or "sqlite:///./frame.db"

    if db_url.startswith("sqlite"):
        # SQLite fix for multithreading
        connect_args = {"check_same_thread": False}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            # An in-memory database lives inside one connection, so share it
            _engine = create_engine(db_url, connect_args=connect_args, poolclass=StaticPool)
        else:
            _engine = create_engine(db_url, connect_args=connect_args)
    else:
        _engine = create_engine(db_url, pool_pre_ping=True)
    return _engine

engine = get_engine()

def get_db():
    with Session(engine) as session:
        yield session
