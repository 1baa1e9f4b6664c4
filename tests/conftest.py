"""Shared pytest fixtures for all tests."""

import pytest

from filestore.blob_storage import BlobStore
from filestore.database import Database
from filestore.repositories.shared_file_repository import SharedFileRepository
from filestore.repositories.user_repository import UserRepository
from filestore.services.file_service import FileService
from filestore.services.profile_service import ProfileService


@pytest.fixture
def test_db(tmp_path):
    """
    Create an opened database in a temporary directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Opened Database instance
    """
    db = Database(tmp_path / "data" / "filestore.db")
    db.open()
    yield db
    db.close()


@pytest.fixture
def blob_store(tmp_path):
    """
    Create an opened blob store rooted in a temporary uploads directory.
    """
    store = BlobStore(tmp_path / "uploads")
    store.open()
    return store


@pytest.fixture
def file_repo(test_db):
    return SharedFileRepository(test_db)


@pytest.fixture
def user_repo(test_db):
    return UserRepository(test_db)


@pytest.fixture
def file_service(file_repo, blob_store):
    return FileService(file_repo, blob_store)


@pytest.fixture
def profile_service(user_repo, blob_store):
    return ProfileService(user_repo, blob_store)


@pytest.fixture
def sample_pdf():
    """
    Bytes of a small fake PDF used for upload tests.
    """
    return b"%PDF-1.4\n" + bytes(range(256)) * 8
