"""Pydantic schemas for API requests and responses."""

from filestore.schemas.files import (
    SharedFileResponse,
    UploadFileResponse,
    Pagination,
    ListFilesResponse,
    DeleteFileRequest,
    DeleteFileResponse,
    FileStatsResponse,
    StatsResponse,
    SearchResponse,
)
from filestore.schemas.profile import (
    ProfileData,
    SyncProfileRequest,
    ProfileResponse,
    PictureUploadResponse,
    PictureUrlResponse,
)
from filestore.schemas.common import ErrorResponse

__all__ = [
    "SharedFileResponse",
    "UploadFileResponse",
    "Pagination",
    "ListFilesResponse",
    "DeleteFileRequest",
    "DeleteFileResponse",
    "FileStatsResponse",
    "StatsResponse",
    "SearchResponse",
    "ProfileData",
    "SyncProfileRequest",
    "ProfileResponse",
    "PictureUploadResponse",
    "PictureUrlResponse",
    "ErrorResponse",
]
