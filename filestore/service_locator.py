"""Service locator for the coordinators built at startup."""

from typing import Optional

from filestore.blob_storage import BlobStore
from filestore.exceptions import StorageUnavailableError
from filestore.services.file_service import FileService
from filestore.services.profile_service import ProfileService

_file_service: Optional[FileService] = None
_profile_service: Optional[ProfileService] = None
_blob_store: Optional[BlobStore] = None


def set_services(file_service: FileService, profile_service: ProfileService, blob_store: BlobStore) -> None:
    """Set global service instances"""
    global _file_service, _profile_service, _blob_store
    _file_service = file_service
    _profile_service = profile_service
    _blob_store = blob_store


def clear_services() -> None:
    global _file_service, _profile_service, _blob_store
    _file_service = None
    _profile_service = None
    _blob_store = None


def get_file_service() -> FileService:
    """Get global file service instance (FastAPI dependency)"""
    if _file_service is None:
        raise StorageUnavailableError("File service is not initialized")
    return _file_service


def get_profile_service() -> ProfileService:
    """Get global profile service instance (FastAPI dependency)"""
    if _profile_service is None:
        raise StorageUnavailableError("Profile service is not initialized")
    return _profile_service


def get_blob_store() -> BlobStore:
    if _blob_store is None:
        raise StorageUnavailableError("Blob store is not initialized")
    return _blob_store
