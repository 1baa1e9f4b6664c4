"""Pydantic schemas for profile endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class ProfileData(BaseModel):
    model_config = ConfigDict(extra="forbid")

    username: Optional[str] = None
    email: Optional[str] = None


class SyncProfileRequest(BaseModel):
    """Request model for profile sync."""
    model_config = ConfigDict(extra="forbid")

    user_id: str
    profile_data: ProfileData


class ProfileResponse(BaseModel):
    """Response model for a user profile."""
    success: bool = True
    message: str
    user_id: str
    username: Optional[str] = None
    email: Optional[str] = None
    profile_picture_url: Optional[str] = None


class PictureUploadResponse(BaseModel):
    """Response model for profile picture upload."""
    success: bool = True
    message: str = "Profile picture uploaded successfully"
    profile_picture_url: str
    file_size: int


class PictureUrlResponse(BaseModel):
    profile_picture_url: str
    user_id: str
