"""Service layer coordinating the blob store and repositories."""

from filestore.services.file_service import FileService, OwnerStats
from filestore.services.profile_service import ProfileService

__all__ = [
    "FileService",
    "OwnerStats",
    "ProfileService",
]
