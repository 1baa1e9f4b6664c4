"""User repository for database operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from common.logging_config import get_logger
from filestore.database import Database, translate_errors
from filestore.exceptions import InvalidInputError
from filestore.utils import from_db_timestamp, to_db_timestamp, utc_now

logger = get_logger(__name__)


@dataclass
class User:
    user_id: str
    username: Optional[str] = None
    email: Optional[str] = None
    profile_picture_path: Optional[str] = None
    profile_picture_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.user_id:
            raise InvalidInputError("user_id is required")
        # path and url are set together and cleared together
        if bool(self.profile_picture_path) != bool(self.profile_picture_url):
            raise InvalidInputError("profile_picture_path and profile_picture_url must be set together")

    @property
    def has_profile_picture(self) -> bool:
        return bool(self.profile_picture_path)


class UserRepository:
    def __init__(self, db: Database):
        self.db = db

    def get_by_id(self, user_id: str) -> Optional[User]:
        logger.debug(f"Fetching user by user_id: {user_id}")
        with translate_errors(f"fetch user {user_id}"):
            with self.db.connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """SELECT user_id, username, email, profile_picture_path, profile_picture_url,
                              created_at, updated_at
                       FROM users WHERE user_id = ?""",
                    (user_id,)
                )
                row = cursor.fetchone()

        if row is None:
            logger.debug(f"User not found: {user_id}")
            return None

        return User(
            user_id=row["user_id"],
            username=row["username"],
            email=row["email"],
            profile_picture_path=row["profile_picture_path"] or None,
            profile_picture_url=row["profile_picture_url"] or None,
            created_at=from_db_timestamp(row["created_at"]),
            updated_at=from_db_timestamp(row["updated_at"]),
        )

    def upsert(self, user: User) -> User:
        """
        Insert a user or replace every mutable column of the existing row.

        Fields are written exactly as given; carrying existing values
        forward is the caller's job.
        """
        now = utc_now()
        created_at = user.created_at or now

        with translate_errors(f"upsert user {user.user_id}"):
            with self.db.connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO users (user_id, username, email, profile_picture_path,
                                       profile_picture_url, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(user_id) DO UPDATE SET
                        username = excluded.username,
                        email = excluded.email,
                        profile_picture_path = excluded.profile_picture_path,
                        profile_picture_url = excluded.profile_picture_url,
                        updated_at = excluded.updated_at
                    """,
                    (user.user_id, user.username, user.email, user.profile_picture_path,
                     user.profile_picture_url, to_db_timestamp(created_at), to_db_timestamp(now))
                )
                conn.commit()

        logger.info(f"User upserted [user_id={user.user_id}]")
        return self.get_by_id(user.user_id)

    def update_profile(self, user_id: str, username: Optional[str], email: Optional[str]) -> User:
        """
        Insert a user or update only username/email of the existing row.

        Picture columns of an existing row are left as they are.
        """
        now = to_db_timestamp(utc_now())

        with translate_errors(f"update profile {user_id}"):
            with self.db.connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO users (user_id, username, email, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(user_id) DO UPDATE SET
                        username = excluded.username,
                        email = excluded.email,
                        updated_at = excluded.updated_at
                    """,
                    (user_id, username, email, now, now)
                )
                conn.commit()

        logger.info(f"Profile updated [user_id={user_id}]")
        return self.get_by_id(user_id)
