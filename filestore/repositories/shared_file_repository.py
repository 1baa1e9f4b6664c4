"""Shared file repository for database operations."""

import sqlite3
from dataclasses import dataclass, replace
from datetime import datetime
from typing import List, Optional

from common.constants import DEFAULT_PAGE_SIZE, SEARCH_RESULT_LIMIT
from common.logging_config import get_logger
from filestore.database import Database, translate_errors
from filestore.exceptions import InvalidInputError
from filestore.utils import from_db_timestamp, to_db_timestamp, utc_now

logger = get_logger(__name__)

_SELECT_COLUMNS = """
    id, file_id, user_id, original_name, file_name, file_path, file_url,
    file_size, mime_type, description, category, download_count, is_public,
    created_at, last_accessed
"""


@dataclass
class SharedFile:
    file_id: str
    owner_id: str
    original_name: str
    stored_name: str
    stored_path: str
    public_url: str
    size_bytes: int
    mime_type: str
    category: str
    created_at: datetime
    last_accessed_at: datetime
    description: Optional[str] = None
    download_count: int = 0
    is_public: bool = False
    id: Optional[int] = None

    def __post_init__(self):
        if not self.file_id:
            raise InvalidInputError("file_id is required")
        if not self.owner_id:
            raise InvalidInputError("owner_id is required")
        if self.size_bytes < 0:
            raise InvalidInputError("size_bytes must be non-negative")
        if self.download_count < 0:
            raise InvalidInputError("download_count must be non-negative")


@dataclass(frozen=True)
class FileStats:
    count: int
    total_bytes: int
    total_downloads: int


def _row_to_shared_file(row: sqlite3.Row) -> SharedFile:
    return SharedFile(
        id=row["id"],
        file_id=row["file_id"],
        owner_id=row["user_id"],
        original_name=row["original_name"],
        stored_name=row["file_name"],
        stored_path=row["file_path"],
        public_url=row["file_url"],
        size_bytes=row["file_size"],
        mime_type=row["mime_type"],
        description=row["description"],
        category=row["category"],
        download_count=row["download_count"],
        is_public=bool(row["is_public"]),
        created_at=from_db_timestamp(row["created_at"]),
        last_accessed_at=from_db_timestamp(row["last_accessed"]),
    )


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SharedFileRepository:
    def __init__(self, db: Database):
        self.db = db

    def create(self, record: SharedFile) -> SharedFile:
        """
        Insert a shared file row.

        Raises:
            ConflictError: If file_id already exists
            RepositoryUnavailableError: On any other storage error
        """
        logger.debug(f"Creating shared file [file_id={record.file_id}] [owner_id={record.owner_id}]")

        with translate_errors(f"create shared file {record.file_id}"):
            with self.db.connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO shared_files
                    (file_id, user_id, original_name, file_name, file_path, file_url,
                     file_size, mime_type, description, category, download_count,
                     is_public, created_at, last_accessed)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        record.file_id, record.owner_id, record.original_name,
                        record.stored_name, record.stored_path, record.public_url,
                        record.size_bytes, record.mime_type, record.description,
                        record.category, record.download_count, int(record.is_public),
                        to_db_timestamp(record.created_at),
                        to_db_timestamp(record.last_accessed_at),
                    )
                )
                conn.commit()
                row_id = cursor.lastrowid

        logger.info(f"Shared file created [file_id={record.file_id}]")
        return replace(record, id=row_id)

    def get_by_id(self, file_id: str) -> Optional[SharedFile]:
        with translate_errors(f"fetch shared file {file_id}"):
            with self.db.connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"SELECT {_SELECT_COLUMNS} FROM shared_files WHERE file_id = ?",
                    (file_id,)
                )
                row = cursor.fetchone()

        if row is None:
            return None
        return _row_to_shared_file(row)

    def list_by_owner(
        self,
        owner_id: str,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> List[SharedFile]:
        """
        List an owner's files, newest first; ties keep insertion order.
        """
        if limit < 0 or offset < 0:
            raise InvalidInputError("limit and offset must be non-negative")

        with translate_errors(f"list files for owner {owner_id}"):
            with self.db.connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"""
                    SELECT {_SELECT_COLUMNS} FROM shared_files
                    WHERE user_id = ?
                    ORDER BY created_at DESC, id ASC
                    LIMIT ? OFFSET ?
                    """,
                    (owner_id, limit, offset)
                )
                rows = cursor.fetchall()

        return [_row_to_shared_file(row) for row in rows]

    def search_by_owner(self, owner_id: str, term: str) -> List[SharedFile]:
        """
        Substring search over name, description and category.

        Matching ignores case for ASCII letters only (SQLite LIKE), so
        "ÄRGER" does not match "ärger.pdf".

        Always returns at most SEARCH_RESULT_LIMIT rows.
        """
        pattern = f"%{_escape_like(term)}%"

        with translate_errors(f"search files for owner {owner_id}"):
            with self.db.connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"""
                    SELECT {_SELECT_COLUMNS} FROM shared_files
                    WHERE user_id = ? AND (
                        original_name LIKE ? ESCAPE '\\' OR
                        description LIKE ? ESCAPE '\\' OR
                        category LIKE ? ESCAPE '\\'
                    )
                    ORDER BY created_at DESC, id ASC
                    LIMIT ?
                    """,
                    (owner_id, pattern, pattern, pattern, SEARCH_RESULT_LIMIT)
                )
                rows = cursor.fetchall()

        logger.debug(f"Search matched {len(rows)} files [owner_id={owner_id}]")
        return [_row_to_shared_file(row) for row in rows]

    def stats_by_owner(self, owner_id: str) -> FileStats:
        with translate_errors(f"compute stats for owner {owner_id}"):
            with self.db.connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    SELECT
                        COUNT(*) AS total_files,
                        COALESCE(SUM(file_size), 0) AS total_size,
                        COALESCE(SUM(download_count), 0) AS total_downloads
                    FROM shared_files
                    WHERE user_id = ?
                    """,
                    (owner_id,)
                )
                row = cursor.fetchone()

        return FileStats(
            count=row["total_files"],
            total_bytes=row["total_size"],
            total_downloads=row["total_downloads"],
        )

    def increment_download(self, file_id: str) -> bool:
        """
        Add one to download_count and touch last_accessed in a single update.

        Returns:
            True if a row was updated, False if no such file
        """
        with translate_errors(f"increment downloads for {file_id}"):
            with self.db.connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    UPDATE shared_files
                    SET download_count = download_count + 1, last_accessed = ?
                    WHERE file_id = ?
                    """,
                    (to_db_timestamp(utc_now()), file_id)
                )
                conn.commit()
                updated = cursor.rowcount == 1

        return updated

    def delete(self, file_id: str, owner_id: str) -> int:
        """
        Delete a file row owned by owner_id.

        Returns:
            Number of rows deleted (0 if missing or owned by someone else)
        """
        logger.debug(f"Deleting shared file [file_id={file_id}] [owner_id={owner_id}]")

        with translate_errors(f"delete shared file {file_id}"):
            with self.db.connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "DELETE FROM shared_files WHERE file_id = ? AND user_id = ?",
                    (file_id, owner_id)
                )
                conn.commit()
                deleted = cursor.rowcount

        logger.info(f"Deleted {deleted} shared file row(s) [file_id={file_id}]")
        return deleted
