"""Configuration settings for the file store service."""

import os


DATABASE_PATH = os.environ.get("FILESTORE_DATABASE_PATH", "./data/filestore.db")

UPLOAD_ROOT = os.environ.get("FILESTORE_UPLOAD_ROOT", "./uploads")

PUBLIC_URL_PREFIX = os.environ.get("FILESTORE_PUBLIC_URL_PREFIX", "/uploads")

FILESTORE_HOST = os.environ.get("FILESTORE_HOST", "0.0.0.0")

FILESTORE_PORT = int(os.environ.get("FILESTORE_PORT", "3001"))

MAX_SHARED_FILE_BYTES = int(os.environ.get("FILESTORE_MAX_SHARED_FILE_BYTES", str(50 * 1024 * 1024)))

MAX_PROFILE_PICTURE_BYTES = int(os.environ.get("FILESTORE_MAX_PROFILE_PICTURE_BYTES", str(5 * 1024 * 1024)))
