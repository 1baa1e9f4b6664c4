"""MIME type classification and human-readable size formatting."""

SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]
SIZE_BASE = 1024


def category_of(mime_type: str) -> str:
    """
    Derive a coarse category tag from a MIME type.

    Rules are checked in order and the first match wins; prefix checks are case-sensitive.
    """
    if mime_type.startswith("image/"):
        return "image"
    if mime_type.startswith("video/"):
        return "video"
    if mime_type.startswith("audio/"):
        return "audio"
    if mime_type == "application/pdf":
        return "pdf"
    if mime_type.startswith("text/"):
        return "text"
    if "word" in mime_type or "document" in mime_type:
        return "document"
    if "zip" in mime_type:
        return "archive"
    return "other"


def format_size(num_bytes: int) -> str:
    """
    Format a byte count as e.g. "1.50 KB".

    Args:
        num_bytes: Non-negative byte count

    Returns:
        "0 Bytes" for zero, otherwise the value scaled into the largest unit
        where it is >= 1 (capped at GB), with two decimal places
    """
    if num_bytes == 0:
        return "0 Bytes"

    unit_index = 0
    while unit_index < len(SIZE_UNITS) - 1 and num_bytes >= SIZE_BASE ** (unit_index + 1):
        unit_index += 1

    scaled = num_bytes / (SIZE_BASE ** unit_index)
    return f"{scaled:.2f} {SIZE_UNITS[unit_index]}"
