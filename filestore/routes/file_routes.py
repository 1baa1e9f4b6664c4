"""Shared file API routes."""

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import StreamingResponse

from common.constants import DEFAULT_PAGE_SIZE
from filestore.classification import format_size
from filestore.schemas.common import ErrorResponse
from filestore.schemas.files import (
    DeleteFileRequest,
    DeleteFileResponse,
    FileStatsResponse,
    ListFilesResponse,
    Pagination,
    SearchResponse,
    SharedFileResponse,
    StatsResponse,
    UploadFileResponse,
)
from filestore.service_locator import get_file_service
from filestore.services.file_service import FileService

router = APIRouter(
    prefix="/api/files",
    tags=["Files"],
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.post("/upload", response_model=UploadFileResponse)
def upload_file(
    file: UploadFile = File(...),
    user_id: str = Form(...),
    description: Optional[str] = Form(None),
    file_service: FileService = Depends(get_file_service),
):
    """
    Upload a shared file.

    Parameters:
        - file: File to upload (multipart/form-data)
        - user_id: Owner of the file
        - description: Optional free-text description

    Raises:
        - 400: Missing user id, disallowed type or file too large
        - 500: Internal server error
    """
    data = file.file.read(file_service.max_file_bytes + 1)

    record = file_service.upload_file(
        owner_id=user_id,
        data=data,
        original_name=file.filename or "",
        mime_type=file.content_type or "",
        description=description,
    )

    return UploadFileResponse(file=SharedFileResponse.from_record(record))


@router.get("/download/{file_id}")
def download_file(file_id: str, file_service: FileService = Depends(get_file_service)):
    """
    Download a file and count the download.

    Raises:
        - 404: File not found (row or blob)
    """
    record, stream = file_service.download_file(file_id)

    return StreamingResponse(
        stream,
        media_type=record.mime_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(record.original_name)}",
            "Content-Length": str(record.size_bytes),
        }
    )


@router.get("/info/{file_id}", response_model=SharedFileResponse)
def get_file_info(file_id: str, file_service: FileService = Depends(get_file_service)):
    return SharedFileResponse.from_record(file_service.get_file_info(file_id))


@router.get("/user/{user_id}", response_model=ListFilesResponse)
def list_user_files(
    user_id: str,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=200),
    page: int = Query(1, ge=1),
    file_service: FileService = Depends(get_file_service),
):
    """
    List a user's files, newest first.
    """
    offset = (page - 1) * limit
    records = file_service.list_files(user_id, limit=limit, offset=offset)

    return ListFilesResponse(
        files=[SharedFileResponse.from_record(record) for record in records],
        pagination=Pagination(page=page, limit=limit, total=len(records)),
    )


@router.delete("/{file_id}", response_model=DeleteFileResponse)
def delete_file(
    file_id: str,
    request: DeleteFileRequest,
    file_service: FileService = Depends(get_file_service),
):
    """
    Delete a file owned by the caller.

    Deleting an already-deleted file succeeds with deleted=false.

    Raises:
        - 403: Caller does not own the file
    """
    deleted = file_service.delete_file(file_id, request.user_id)

    return DeleteFileResponse(
        deleted=deleted,
        message="File deleted successfully" if deleted else "File already deleted",
    )


@router.get("/stats/{user_id}", response_model=StatsResponse)
def get_file_stats(user_id: str, file_service: FileService = Depends(get_file_service)):
    owner_stats = file_service.get_stats(user_id)
    stats = owner_stats.stats

    return StatsResponse(
        stats=FileStatsResponse(
            total_files=stats.count,
            total_size=stats.total_bytes,
            formatted_total_size=format_size(stats.total_bytes),
            total_downloads=stats.total_downloads,
            recent_files=[SharedFileResponse.from_record(record) for record in owner_stats.recent_files],
        )
    )


@router.get("/search/{user_id}", response_model=SearchResponse)
def search_files(
    user_id: str,
    q: str = Query("", description="Substring to match against name, description or category"),
    file_service: FileService = Depends(get_file_service),
):
    records = file_service.search_files(user_id, q)

    return SearchResponse(
        search_term=q,
        results=[SharedFileResponse.from_record(record) for record in records],
        count=len(records),
    )
