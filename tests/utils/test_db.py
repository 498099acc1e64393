"""Test utilities for database management.

This module provides shared database setup and teardown functionality
for tests, eliminating duplication across test files.
"""

import atexit
import os
import tempfile
from typing import Tuple

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.iolab.models.records import Base
from src.iolab.persistence import GameRepository


class TestDatabaseManager:
    """Manages temporary test databases with automatic cleanup."""

    __test__ = False

    def __init__(self):
        self._temp_files = []
        self._cleanup_registered = False

    def create_temp_database(self) -> Tuple[str, sessionmaker]:
        """Create a temporary database file and return URL and session factory."""
        temp_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
        temp_file.close()
        self._temp_files.append(temp_file.name)

        if not self._cleanup_registered:
            atexit.register(self._cleanup_all_temp_files)
            self._cleanup_registered = True

        database_url = f"sqlite:///{temp_file.name}"

        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        Base.metadata.create_all(bind=engine)

        return database_url, session_factory

    def _cleanup_all_temp_files(self) -> None:
        """Clean up all temporary database files."""
        for temp_file in self._temp_files:
            if os.path.exists(temp_file):
                os.unlink(temp_file)
        self._temp_files.clear()


# Global instance for shared use
_db_manager = TestDatabaseManager()


def create_test_database() -> Tuple[str, sessionmaker]:
    """Create a temporary test database.

    Returns:
        Tuple of (database_url, session_factory)
    """
    return _db_manager.create_temp_database()


def create_test_repository() -> GameRepository:
    """Create a GameRepository backed by a fresh temporary database."""
    _, session_factory = create_test_database()
    return GameRepository(session_factory)
