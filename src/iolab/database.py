"""Database configuration and session management for game persistence."""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .config import get_settings
from .models.records import Base


def create_db_engine(database_url: Optional[str] = None) -> Engine:
    """Create an engine for the given URL, defaulting to the configured one."""
    settings = get_settings()
    url = database_url or settings.database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=settings.debug, connect_args=connect_args)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create session factory bound to the engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)

