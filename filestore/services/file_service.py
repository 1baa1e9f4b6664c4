"""File service: keeps shared-file blobs and rows in agreement."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from common.constants import (
    DEFAULT_PAGE_SIZE,
    RECENT_FILES_LIMIT,
    SHARED_BUCKET,
    SHARED_FILE_ALLOWED_MIME_PREFIXES,
)
from filestore.blob_storage import BlobStore, BlobStream
from filestore.classification import category_of
from filestore.config import MAX_SHARED_FILE_BYTES
from filestore.exceptions import (
    ForbiddenError,
    InconsistentStateError,
    InvalidInputError,
    NotFoundError,
)
from filestore.repositories.shared_file_repository import FileStats, SharedFile, SharedFileRepository
from filestore.utils import generate_file_id, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnerStats:
    stats: FileStats
    recent_files: List[SharedFile]


class FileService:
    def __init__(
        self,
        file_repo: SharedFileRepository,
        blob_store: BlobStore,
        max_file_bytes: int = MAX_SHARED_FILE_BYTES,
    ):
        self.file_repo = file_repo
        self.blob_store = blob_store
        self.max_file_bytes = max_file_bytes

    def _validate_upload(self, owner_id: str, data: bytes, original_name: str, mime_type: str) -> None:
        if not owner_id:
            raise InvalidInputError("User ID is required")
        if not original_name:
            raise InvalidInputError("Original filename is required")
        if not mime_type or not mime_type.startswith(SHARED_FILE_ALLOWED_MIME_PREFIXES):
            raise InvalidInputError(f"File type not allowed: {mime_type}")
        if len(data) > self.max_file_bytes:
            raise InvalidInputError(
                f"File size exceeds maximum allowed size of {self.max_file_bytes} bytes"
            )

    def upload_file(
        self,
        owner_id: str,
        data: bytes,
        original_name: str,
        mime_type: str,
        description: Optional[str] = None,
    ) -> SharedFile:
        """
        Store a blob and create its row as one logical operation.

        If the row cannot be created the blob just written is removed before
        the error propagates.

        Raises:
            InvalidInputError: Missing owner, disallowed MIME type or oversized payload
            ConflictError: Generated file_id already exists
            RepositoryUnavailableError: Storage engine error
            InconsistentStateError: Row creation failed and the blob could not be removed
        """
        self._validate_upload(owner_id, data, original_name, mime_type)

        file_id = generate_file_id()
        stored_path = self.blob_store.put(SHARED_BUCKET, file_id, data, original_name)
        logger.info(f"Wrote blob {stored_path} for file {file_id}")

        created_at = utc_now()
        try:
            record = self.file_repo.create(SharedFile(
                file_id=file_id,
                owner_id=owner_id,
                original_name=original_name,
                stored_name=stored_path.rsplit("/", 1)[-1],
                stored_path=stored_path,
                public_url=self.blob_store.public_url(stored_path),
                size_bytes=len(data),
                mime_type=mime_type,
                category=category_of(mime_type),
                description=description or "",
                created_at=created_at,
                last_accessed_at=created_at,
            ))
        except Exception as e:
            logger.error(f"Upload failed for file {file_id}: {e}")
            self._rollback_blob(file_id, stored_path, e)
            raise

        logger.info(f"Successfully uploaded file {file_id} ({record.size_bytes} bytes) for {owner_id}")
        return record

    def _rollback_blob(self, file_id: str, stored_path: str, cause: Exception) -> None:
        try:
            self.blob_store.remove(stored_path)
            logger.info(f"Rolled back blob {stored_path} for file {file_id}")
        except OSError as cleanup_error:
            logger.error(
                f"Orphaned blob {stored_path}: row for {file_id} was not created "
                f"and the blob could not be removed: {cleanup_error}",
                exc_info=True
            )
            raise InconsistentStateError(f"Orphaned blob left for file {file_id}") from cause

    def get_file_info(self, file_id: str) -> SharedFile:
        record = self.file_repo.get_by_id(file_id)
        if record is None:
            raise NotFoundError(f"File {file_id} not found")
        return record

    def download_file(self, file_id: str) -> Tuple[SharedFile, BlobStream]:
        """
        Open a file for download and count the download.

        The counter is only bumped once the blob has been opened.

        Returns:
            The refreshed record and an iterator over the blob content

        Raises:
            NotFoundError: No such file
            BlobNotFoundError: Row exists but the blob is missing on disk
        """
        record = self.get_file_info(file_id)

        stream = self.blob_store.stream(record.stored_path)

        try:
            counted = self.file_repo.increment_download(file_id)
        except Exception:
            stream.close()
            raise

        if not counted:
            # row vanished between the lookup and the update
            stream.close()
            raise NotFoundError(f"File {file_id} not found")

        refreshed = self.file_repo.get_by_id(file_id) or record
        logger.info(f"Serving file {file_id} (download #{refreshed.download_count})")
        return refreshed, stream

    def list_files(self, owner_id: str, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> List[SharedFile]:
        return self.file_repo.list_by_owner(owner_id, limit=limit, offset=offset)

    def search_files(self, owner_id: str, term: str) -> List[SharedFile]:
        if not term:
            raise InvalidInputError("Search term is required")
        return self.file_repo.search_by_owner(owner_id, term)

    def get_stats(self, owner_id: str) -> OwnerStats:
        return OwnerStats(
            stats=self.file_repo.stats_by_owner(owner_id),
            recent_files=self.file_repo.list_by_owner(owner_id, limit=RECENT_FILES_LIMIT, offset=0),
        )

    def delete_file(self, file_id: str, caller_id: str) -> bool:
        """
        Delete a file row and its blob.

        Deleting a file that is already gone is not an error.

        Returns:
            True if this call removed the file, False if there was nothing to delete

        Raises:
            InvalidInputError: Missing caller id
            ForbiddenError: Caller does not own the file
            InconsistentStateError: Row deleted but the blob could not be removed
        """
        if not caller_id:
            raise InvalidInputError("User ID is required")

        record = self.file_repo.get_by_id(file_id)
        if record is None:
            logger.info(f"Delete of {file_id} found no row")
            return False

        if record.owner_id != caller_id:
            raise ForbiddenError("Unauthorized - you can only delete your own files")

        deleted = self.file_repo.delete(file_id, caller_id)
        if deleted == 0:
            logger.info(f"File {file_id} was already deleted by a concurrent request")
            return False

        try:
            self.blob_store.remove(record.stored_path)
        except OSError as e:
            logger.error(
                f"Orphaned blob {record.stored_path}: row for {file_id} deleted "
                f"but the blob could not be removed: {e}",
                exc_info=True
            )
            raise InconsistentStateError(f"Orphaned blob left for file {file_id}") from e

        logger.info(f"Deleted file {file_id} for {caller_id}")
        return True
