from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from hanumant.core.config import settings


def engine_options(database_url: str) -> dict:
    """Engine keyword arguments for the configured backend.

    A realtime feed keeps one session across threadpool hops, so a SQLite
    connection must be usable from threads other than the one that opened it.
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
Base = declarative_base()


def get_db():
    """One session per request or socket; the store commits, this only closes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
