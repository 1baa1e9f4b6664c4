"""Utility helper functions for the file store."""

import uuid
from datetime import datetime, timezone


def generate_file_id() -> str:
    """
    Generate a new opaque file identifier (UUID4 string).

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """
    Get the current time as a timezone-aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def to_db_timestamp(value: datetime) -> str:
    """
    Serialize a datetime for storage.

    Microseconds are always emitted so stored values sort lexically.
    """
    return value.isoformat(timespec="microseconds")


def from_db_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value)
