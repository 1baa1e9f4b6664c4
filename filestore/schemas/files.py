"""Pydantic schemas for shared file endpoints."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from filestore.classification import format_size
from filestore.repositories.shared_file_repository import SharedFile


class SharedFileResponse(BaseModel):
    """Response model for shared file metadata."""
    file_id: str
    original_name: str
    file_name: str
    file_url: str
    file_size: int
    formatted_size: str
    mime_type: str
    category: str
    description: Optional[str] = None
    download_count: int
    uploaded_at: str
    last_accessed: str

    @classmethod
    def from_record(cls, record: SharedFile) -> "SharedFileResponse":
        return cls(
            file_id=record.file_id,
            original_name=record.original_name,
            file_name=record.stored_name,
            file_url=record.public_url,
            file_size=record.size_bytes,
            formatted_size=format_size(record.size_bytes),
            mime_type=record.mime_type,
            category=record.category,
            description=record.description,
            download_count=record.download_count,
            uploaded_at=record.created_at.isoformat(),
            last_accessed=record.last_accessed_at.isoformat(),
        )


class UploadFileResponse(BaseModel):
    """Response model for file upload."""
    success: bool = True
    message: str = "File uploaded successfully"
    file: SharedFileResponse


class Pagination(BaseModel):
    page: int
    limit: int
    total: int


class ListFilesResponse(BaseModel):
    """Response model for listing a user's files."""
    success: bool = True
    files: List[SharedFileResponse]
    pagination: Pagination


class DeleteFileRequest(BaseModel):
    """Request model for file deletion."""
    model_config = ConfigDict(extra="forbid")

    user_id: str


class DeleteFileResponse(BaseModel):
    """Response model for file deletion."""
    success: bool = True
    deleted: bool
    message: str


class FileStatsResponse(BaseModel):
    total_files: int
    total_size: int
    formatted_total_size: str
    total_downloads: int
    recent_files: List[SharedFileResponse]


class StatsResponse(BaseModel):
    """Response model for per-user file statistics."""
    success: bool = True
    stats: FileStatsResponse


class SearchResponse(BaseModel):
    """Response model for file search."""
    success: bool = True
    search_term: str
    results: List[SharedFileResponse]
    count: int
