"""Manages blob files on disk: write, read, stream and remove by bucket-relative path."""

import os
import re
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from common.constants import BUCKETS, STREAM_PIECE_SIZE
from common.logging_config import get_logger
from filestore.exceptions import BlobNotFoundError, InvalidInputError, StorageUnavailableError

logger = get_logger(__name__)

_EXTENSION_RE = re.compile(r"^\.[A-Za-z0-9]{1,16}$")


class BlobStream:
    """
    Iterator over an open blob file, read in fixed-size pieces.

    Closes the file when exhausted or when `close()` is called.
    """

    def __init__(self, handle: BinaryIO, piece_size: int = STREAM_PIECE_SIZE):
        self._handle = handle
        self.piece_size = piece_size

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        if self._handle.closed:
            raise StopIteration
        piece = self._handle.read(self.piece_size)
        if not piece:
            self.close()
            raise StopIteration
        return piece

    def close(self) -> None:
        self._handle.close()


def extract_extension(original_name: Optional[str], default: str = "") -> str:
    """
    Get the extension to keep from a caller-supplied filename.

    Args:
        original_name: Filename as uploaded (may be None or contain anything)
        default: Extension used when none can be kept

    Returns:
        Extension including the leading dot, or `default`
    """
    if not original_name:
        return default
    suffix = os.path.splitext(original_name.replace("\\", "/").rsplit("/", 1)[-1])[1]
    if _EXTENSION_RE.match(suffix):
        return suffix
    return default


class BlobStore:
    """
    Owns every byte written under the upload root.

    Paths handed out by `put` are relative to the root ("shared/<id>.pdf")
    and are the only form accepted by the read/remove operations.
    """

    def __init__(self, root, public_url_prefix: str = "/uploads"):
        self.root = Path(root)
        self.public_url_prefix = public_url_prefix.rstrip("/")

    def open(self) -> None:
        """
        Ensure bucket directories exist and the root is writable.

        Raises:
            StorageUnavailableError: If the root cannot be created or written to
        """
        try:
            for bucket in BUCKETS:
                (self.root / bucket).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(f"Cannot create blob root {self.root}: {e}") from e

        for bucket in BUCKETS:
            if not os.access(self.root / bucket, os.W_OK):
                raise StorageUnavailableError(f"Blob bucket {self.root / bucket} is not writable")

        logger.info(f"Blob store ready at {self.root.resolve()}")

    def _resolve(self, relative_path: str) -> Path:
        if not relative_path:
            raise InvalidInputError("Blob path is empty")

        root = self.root.resolve()
        candidate = (root / relative_path).resolve()
        if candidate == root or root not in candidate.parents:
            logger.warning(f"Rejected blob path outside root: {relative_path!r}")
            raise InvalidInputError("Blob path escapes the storage root")
        return candidate

    def put(
        self,
        bucket: str,
        blob_id: str,
        data: bytes,
        original_name: Optional[str] = None,
        default_extension: str = "",
    ) -> str:
        """
        Write blob data to disk.

        Args:
            bucket: Logical bucket ("profiles" or "shared")
            blob_id: Generated identifier naming the blob
            data: Raw bytes
            original_name: Uploaded filename, used only for its extension
            default_extension: Extension applied when the original has none

        Returns:
            Root-relative path of the written blob

        Raises:
            InvalidInputError: If the bucket is unknown
            StorageUnavailableError: If the write fails
        """
        if bucket not in BUCKETS:
            raise InvalidInputError(f"Unknown bucket: {bucket}")

        stored_name = f"{blob_id}{extract_extension(original_name, default_extension)}"
        relative_path = f"{bucket}/{stored_name}"
        filepath = self._resolve(relative_path)
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to write blob {relative_path}: {e}", exc_info=True)
            filepath.unlink(missing_ok=True)
            raise StorageUnavailableError(f"Failed to write blob {relative_path}") from e

        logger.debug(f"Wrote blob {relative_path} ({len(data)} bytes)")
        return relative_path

    def get(self, relative_path: str) -> bytes:
        """
        Read an entire blob.

        Raises:
            BlobNotFoundError: If the blob does not exist
        """
        filepath = self._resolve(relative_path)
        try:
            return filepath.read_bytes()
        except FileNotFoundError as e:
            raise BlobNotFoundError(f"Blob {relative_path} not found") from e

    def stream(self, relative_path: str, piece_size: int = STREAM_PIECE_SIZE) -> BlobStream:
        """
        Stream blob data in pieces.

        The file is opened before returning, so a missing blob raises here
        rather than part-way through a response.

        Raises:
            BlobNotFoundError: If the blob does not exist
        """
        filepath = self._resolve(relative_path)
        try:
            handle = open(filepath, "rb")
        except FileNotFoundError as e:
            raise BlobNotFoundError(f"Blob {relative_path} not found") from e
        return BlobStream(handle, piece_size)

    def remove(self, relative_path: str) -> bool:
        """
        Delete a blob from disk. Removing an absent blob is not an error.

        Returns:
            True if file was deleted, False if it didn't exist
        """
        filepath = self._resolve(relative_path)
        try:
            filepath.unlink()
        except FileNotFoundError:
            return False
        logger.debug(f"Removed blob {relative_path}")
        return True

    def exists(self, relative_path: str) -> bool:
        return self._resolve(relative_path).is_file()

    def public_url(self, relative_path: str) -> str:
        return f"{self.public_url_prefix}/{relative_path}"

    def count(self, bucket: str) -> int:
        """
        Count blobs currently stored in a bucket.
        """
        if bucket not in BUCKETS:
            raise InvalidInputError(f"Unknown bucket: {bucket}")
        bucket_dir = self.root / bucket
        if not bucket_dir.exists():
            return 0
        return sum(1 for path in bucket_dir.iterdir() if path.is_file())
