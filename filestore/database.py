"""Database schema and connection management for SQLite."""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from common.logging_config import get_logger
from filestore.exceptions import (
    ConflictError,
    InvalidInputError,
    RepositoryUnavailableError,
    StorageUnavailableError,
)

logger = get_logger(__name__)


class Database:
    """
    SQLite database holding the `users` and `shared_files` tables.

    Opened once at startup and closed at shutdown. Each call to
    `connection()` hands out a fresh connection, so no state is shared
    between concurrent requests.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._is_open = False

    def open(self) -> None:
        """
        Create the database location and schema if they don't exist.

        Raises:
            StorageUnavailableError: If the database directory is not writable
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(f"Cannot create database directory {self.path.parent}: {e}") from e

        if not os.access(self.path.parent, os.W_OK):
            raise StorageUnavailableError(f"Database directory {self.path.parent} is not writable")

        self._is_open = True
        try:
            self.init_schema()
        except sqlite3.Error as e:
            self._is_open = False
            raise RepositoryUnavailableError(f"Failed to initialize database schema: {e}") from e

        logger.info(f"Database ready at {self.path}")

    def close(self) -> None:
        self._is_open = False
        logger.info("Database closed")

    def init_schema(self) -> None:
        """
        Initialize tables and indexes if they don't exist.
        """
        with self.connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT UNIQUE NOT NULL,
                    username TEXT,
                    email TEXT,
                    profile_picture_path TEXT,
                    profile_picture_url TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS shared_files (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    file_id TEXT UNIQUE NOT NULL,
                    user_id TEXT NOT NULL,
                    original_name TEXT NOT NULL,
                    file_name TEXT NOT NULL,
                    file_path TEXT NOT NULL,
                    file_url TEXT NOT NULL,
                    file_size INTEGER NOT NULL CHECK (file_size >= 0),
                    mime_type TEXT NOT NULL,
                    description TEXT,
                    category TEXT NOT NULL,
                    download_count INTEGER NOT NULL DEFAULT 0 CHECK (download_count >= 0),
                    is_public INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    last_accessed TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_users_user_id ON users(user_id)
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_files_user_id ON shared_files(user_id)
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_files_file_id ON shared_files(file_id)
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_files_created_at ON shared_files(created_at DESC)
            """)

            conn.commit()

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Context manager for database connections.

        Raises:
            RepositoryUnavailableError: If the database is closed or cannot be opened
        """
        if not self._is_open:
            raise RepositoryUnavailableError("Database is not open")

        try:
            conn = sqlite3.connect(self.path)
        except sqlite3.Error as e:
            raise RepositoryUnavailableError(f"Cannot connect to database: {e}") from e

        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()


@contextmanager
def translate_errors(action: str) -> Generator[None, None, None]:
    """
    Map sqlite3 errors raised inside the block to repository errors.

    A UNIQUE violation becomes ConflictError, any other constraint failure
    becomes InvalidInputError, everything else RepositoryUnavailableError.
    """
    try:
        yield
    except sqlite3.IntegrityError as e:
        if "UNIQUE" in str(e):
            logger.warning(f"Conflict while trying to {action}: {e}")
            raise ConflictError(f"Identifier already exists ({action})") from e
        logger.warning(f"Constraint violated while trying to {action}: {e}")
        raise InvalidInputError(f"Invalid record ({action})") from e
    except sqlite3.Error as e:
        logger.error(f"Database error while trying to {action}: {e}", exc_info=True)
        raise RepositoryUnavailableError(f"Failed to {action}") from e
