"""Profile API routes."""

import mimetypes
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import StreamingResponse

from filestore.schemas.common import ErrorResponse
from filestore.schemas.profile import (
    PictureUploadResponse,
    PictureUrlResponse,
    ProfileResponse,
    SyncProfileRequest,
)
from filestore.service_locator import get_profile_service
from filestore.services.profile_service import ProfileService

router = APIRouter(
    prefix="/api/profile",
    tags=["Profile"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.post("/upload-picture", response_model=PictureUploadResponse)
def upload_profile_picture(
    profile_picture: UploadFile = File(...),
    user_id: str = Form(...),
    username: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    profile_service: ProfileService = Depends(get_profile_service),
):
    """
    Upload or replace a user's profile picture.

    Raises:
        - 400: Missing user id, non-image file or file too large
        - 500: Internal server error (previous picture is kept)
    """
    data = profile_picture.file.read(profile_service.max_picture_bytes + 1)

    user = profile_service.upload_profile_picture(
        user_id=user_id,
        data=data,
        original_name=profile_picture.filename,
        mime_type=profile_picture.content_type or "",
        username=username,
        email=email,
    )

    return PictureUploadResponse(profile_picture_url=user.profile_picture_url, file_size=len(data))


@router.get("/picture/{user_id}")
def get_profile_picture(user_id: str, profile_service: ProfileService = Depends(get_profile_service)):
    user, stream = profile_service.get_profile_picture(user_id)
    media_type = mimetypes.guess_type(user.profile_picture_path)[0] or "application/octet-stream"
    return StreamingResponse(stream, media_type=media_type)


@router.get("/picture-url/{user_id}", response_model=PictureUrlResponse)
def get_profile_picture_url(user_id: str, profile_service: ProfileService = Depends(get_profile_service)):
    return PictureUrlResponse(
        profile_picture_url=profile_service.get_profile_picture_url(user_id),
        user_id=user_id,
    )


@router.delete("/picture/{user_id}", response_model=ProfileResponse)
def delete_profile_picture(user_id: str, profile_service: ProfileService = Depends(get_profile_service)):
    user = profile_service.delete_profile_picture(user_id)
    return ProfileResponse(
        message="Profile picture deleted successfully",
        user_id=user.user_id,
        username=user.username,
        email=user.email,
    )


@router.post("/sync", response_model=ProfileResponse)
def sync_profile(request: SyncProfileRequest, profile_service: ProfileService = Depends(get_profile_service)):
    user = profile_service.sync_profile(
        user_id=request.user_id,
        username=request.profile_data.username,
        email=request.profile_data.email,
    )
    return ProfileResponse(
        message="Profile synced successfully",
        user_id=user.user_id,
        username=user.username,
        email=user.email,
        profile_picture_url=user.profile_picture_url,
    )
