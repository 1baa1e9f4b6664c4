"""Custom exception classes for the file store."""


class FileStoreException(Exception):
    """
    Base exception class for all file store errors.
    """
    pass


class NotFoundError(FileStoreException):
    """
    Raised when a requested record or blob does not exist.
    """
    pass


class BlobNotFoundError(NotFoundError):
    """
    Raised when a record exists but its blob is missing from disk.
    """
    pass


class ForbiddenError(FileStoreException):
    """
    Raised when a caller attempts to delete a file they don't own.
    """
    pass


class ConflictError(FileStoreException):
    """
    Raised when an insert collides with an existing file_id or user_id.
    """
    pass


class InvalidInputError(FileStoreException):
    """
    Raised for a disallowed MIME type, missing owner id or a malformed path.
    """
    pass


class StorageUnavailableError(FileStoreException):
    """
    Raised when the blob root or the database location cannot be used.
    """
    pass


class RepositoryUnavailableError(StorageUnavailableError):
    """
    Raised when the storage engine reports an error other than a uniqueness violation.
    """
    pass


class InconsistentStateError(FileStoreException):
    """
    Raised when a blob and its row could not be kept in agreement.

    The orphan is logged and left in place; nothing repairs it later.
    """
    pass
