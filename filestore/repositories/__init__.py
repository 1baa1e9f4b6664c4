"""Repository layer for data access."""

from filestore.repositories.user_repository import User, UserRepository
from filestore.repositories.shared_file_repository import FileStats, SharedFile, SharedFileRepository

__all__ = [
    "User",
    "UserRepository",
    "FileStats",
    "SharedFile",
    "SharedFileRepository",
]
