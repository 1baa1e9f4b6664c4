"""Profile service: profile sync and profile picture replacement."""

import logging
from typing import Optional, Tuple

from common.constants import (
    PROFILE_PICTURE_ALLOWED_MIME_PREFIXES,
    PROFILE_PICTURE_DEFAULT_EXTENSION,
    PROFILES_BUCKET,
)
from filestore.blob_storage import BlobStore, BlobStream
from filestore.config import MAX_PROFILE_PICTURE_BYTES
from filestore.exceptions import InconsistentStateError, InvalidInputError, NotFoundError
from filestore.repositories.user_repository import User, UserRepository
from filestore.utils import generate_file_id

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(
        self,
        user_repo: UserRepository,
        blob_store: BlobStore,
        max_picture_bytes: int = MAX_PROFILE_PICTURE_BYTES,
    ):
        self.user_repo = user_repo
        self.blob_store = blob_store
        self.max_picture_bytes = max_picture_bytes

    def upload_profile_picture(
        self,
        user_id: str,
        data: bytes,
        original_name: Optional[str],
        mime_type: str,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> User:
        """
        Replace a user's profile picture, creating the user if needed.

        The new blob is written and the row committed before the previous
        blob is removed, so a failure at any point leaves the old picture
        in place. Removing the old blob is best-effort.

        Raises:
            InvalidInputError: Missing user id, non-image MIME type or oversized payload
            RepositoryUnavailableError: Storage engine error (new blob is removed)
        """
        if not user_id:
            raise InvalidInputError("User ID is required")
        if not mime_type or not mime_type.startswith(PROFILE_PICTURE_ALLOWED_MIME_PREFIXES):
            raise InvalidInputError("Only image files are allowed for profile pictures")
        if len(data) > self.max_picture_bytes:
            raise InvalidInputError(
                f"File size exceeds maximum allowed size of {self.max_picture_bytes} bytes"
            )

        existing = self.user_repo.get_by_id(user_id)

        new_path = self.blob_store.put(
            PROFILES_BUCKET,
            generate_file_id(),
            data,
            original_name,
            default_extension=PROFILE_PICTURE_DEFAULT_EXTENSION,
        )

        try:
            user = self.user_repo.upsert(User(
                user_id=user_id,
                username=username if username is not None else (existing.username if existing else None),
                email=email if email is not None else (existing.email if existing else None),
                profile_picture_path=new_path,
                profile_picture_url=self.blob_store.public_url(new_path),
                created_at=existing.created_at if existing else None,
            ))
        except Exception as e:
            logger.error(f"Profile picture upload failed for {user_id}: {e}")
            try:
                self.blob_store.remove(new_path)
            except OSError as cleanup_error:
                logger.error(f"Orphaned profile picture {new_path}: {cleanup_error}", exc_info=True)
                raise InconsistentStateError(f"Orphaned profile picture left for user {user_id}") from e
            raise

        if existing and existing.profile_picture_path and existing.profile_picture_path != new_path:
            self._remove_quietly(existing.profile_picture_path)

        logger.info(f"Profile picture updated for {user_id} ({len(data)} bytes)")
        return user

    def _remove_quietly(self, path: str) -> None:
        try:
            self.blob_store.remove(path)
        except Exception as e:
            logger.warning(f"Failed to delete old profile picture {path}: {e}")

    def _get_user_with_picture(self, user_id: str) -> User:
        user = self.user_repo.get_by_id(user_id)
        if user is None or not user.has_profile_picture:
            raise NotFoundError("Profile picture not found")
        return user

    def get_profile_picture(self, user_id: str) -> Tuple[User, BlobStream]:
        user = self._get_user_with_picture(user_id)
        return user, self.blob_store.stream(user.profile_picture_path)

    def get_profile_picture_url(self, user_id: str) -> str:
        return self._get_user_with_picture(user_id).profile_picture_url

    def delete_profile_picture(self, user_id: str) -> User:
        """
        Clear a user's picture fields, then remove the blob.

        The user row is kept.
        """
        user = self._get_user_with_picture(user_id)

        cleared = self.user_repo.upsert(User(
            user_id=user.user_id,
            username=user.username,
            email=user.email,
            created_at=user.created_at,
        ))
        self._remove_quietly(user.profile_picture_path)

        logger.info(f"Profile picture deleted for {user_id}")
        return cleared

    def sync_profile(self, user_id: str, username: Optional[str], email: Optional[str]) -> User:
        """
        Update username/email, leaving any picture columns untouched.
        """
        if not user_id:
            raise InvalidInputError("User ID is required")

        user = self.user_repo.update_profile(user_id, username, email)

        logger.info(f"Profile synced for {user_id}")
        return user
