"""
Database engine and per-request sessions.

Each request gets its own Session; read-modify-write of a restaurant goes
through neighbo.db.transaction.run_in_transaction on that session.
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator

from neighbo.core.config import get_settings

settings = get_settings()


def engine_options(database_url: str) -> dict:
    """Backend specific create_engine() keyword arguments."""
    if make_url(database_url).get_backend_name() == "sqlite":
        # Sessions are handed to FastAPI's threadpool workers
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
