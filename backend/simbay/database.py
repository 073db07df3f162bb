# backend/simbay/database.py
"""
Database engine, session factory, and metadata shared across the application.

Sessions are request scoped: ``get_db`` opens one per request and the
engine is built lazily on first use so importing models never connects.
"""

from datetime import datetime
from functools import lru_cache
import logging
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .core.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def _engine_kwargs(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 10,  # Number of persistent connections
        "max_overflow": 10,  # Maximum overflow connections
        "pool_timeout": 30,  # Timeout for getting connection
        "pool_recycle": 1800,  # Recycle connections after 30 minutes
        "pool_pre_ping": True,  # Test connections before using
        "connect_args": {"connect_timeout": 10, "application_name": "simbay_backend"},
    }


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    url = settings.get_database_url()
    engine = create_engine(url, echo=settings.sql_echo, future=True, **_engine_kwargs(url))

    @event.listens_for(engine, "connect")
    def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
        connection_record.info["connect_time"] = datetime.now()
        if url.startswith("sqlite"):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
        logger.debug("Database connection established")

    return engine


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    return sessionmaker(
        autocommit=False, autoflush=False, bind=get_engine(), expire_on_commit=False
    )


def get_db() -> Generator[Session, None, None]:
    """Get database session with proper cleanup."""
    db = get_session_factory()()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
