"""Project-wide constants (buckets, limits, allowed MIME types)."""

PROFILES_BUCKET: str = "profiles"
SHARED_BUCKET: str = "shared"
BUCKETS: tuple = (PROFILES_BUCKET, SHARED_BUCKET)

PROFILE_PICTURE_DEFAULT_EXTENSION: str = ".jpg"

SEARCH_RESULT_LIMIT: int = 20
RECENT_FILES_LIMIT: int = 5
DEFAULT_PAGE_SIZE: int = 50

STREAM_PIECE_SIZE: int = 64 * 1024

SHARED_FILE_ALLOWED_MIME_PREFIXES: tuple = (
    "image/",
    "video/",
    "audio/",
    "application/pdf",
    "text/",
    "application/msword",
    "application/vnd.openxmlformats",
    "application/zip",
    "application/x-zip-compressed",
)

PROFILE_PICTURE_ALLOWED_MIME_PREFIXES: tuple = ("image/",)
