"""Tests for ProfileService picture replacement and profile sync."""

import pytest

from filestore.exceptions import (
    InvalidInputError,
    NotFoundError,
    RepositoryUnavailableError,
    StorageUnavailableError,
)
from filestore.services.profile_service import ProfileService

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x11" * 64


def profile_blobs(blob_store):
    return sorted(p.name for p in (blob_store.root / "profiles").iterdir())


class TestUploadProfilePicture:
    def test_upload_creates_user_and_blob(self, profile_service, user_repo, blob_store):
        user = profile_service.upload_profile_picture(
            "user-1", PNG_BYTES, "me.png", "image/png", username="alice", email="a@example.com"
        )

        assert user.username == "alice"
        assert user.profile_picture_path.startswith("profiles/")
        assert user.profile_picture_path.endswith(".png")
        assert user.profile_picture_url == f"/uploads/{user.profile_picture_path}"
        assert blob_store.get(user.profile_picture_path) == PNG_BYTES
        assert user_repo.get_by_id("user-1") == user

    def test_missing_extension_defaults_to_jpg(self, profile_service):
        user = profile_service.upload_profile_picture("user-1", JPEG_BYTES, None, "image/jpeg")

        assert user.profile_picture_path.endswith(".jpg")

    def test_replace_removes_old_blob(self, profile_service, blob_store):
        first = profile_service.upload_profile_picture("user-1", PNG_BYTES, "a.png", "image/png")
        second = profile_service.upload_profile_picture("user-1", JPEG_BYTES, "b.jpg", "image/jpeg")

        assert second.profile_picture_path != first.profile_picture_path
        assert not blob_store.exists(first.profile_picture_path)
        assert blob_store.get(second.profile_picture_path) == JPEG_BYTES
        assert profile_blobs(blob_store) == [second.profile_picture_path.split("/")[-1]]

    def test_replace_keeps_profile_fields(self, profile_service):
        first = profile_service.upload_profile_picture(
            "user-1", PNG_BYTES, "a.png", "image/png", username="alice", email="a@example.com"
        )
        second = profile_service.upload_profile_picture("user-1", JPEG_BYTES, "b.jpg", "image/jpeg")

        assert second.username == "alice"
        assert second.email == "a@example.com"
        assert second.created_at == first.created_at

    def test_failed_blob_write_keeps_old_picture(self, profile_service, user_repo, blob_store, monkeypatch):
        old = profile_service.upload_profile_picture("user-1", PNG_BYTES, "a.png", "image/png")

        def failing_put(*args, **kwargs):
            raise StorageUnavailableError("disk full")

        monkeypatch.setattr(blob_store, "put", failing_put)

        with pytest.raises(StorageUnavailableError):
            profile_service.upload_profile_picture("user-1", JPEG_BYTES, "b.jpg", "image/jpeg")

        current = user_repo.get_by_id("user-1")
        assert current.profile_picture_path == old.profile_picture_path
        assert current.profile_picture_url == old.profile_picture_url
        assert blob_store.get(old.profile_picture_path) == PNG_BYTES

    def test_failed_row_update_removes_new_blob(self, profile_service, user_repo, blob_store, monkeypatch):
        old = profile_service.upload_profile_picture("user-1", PNG_BYTES, "a.png", "image/png")

        def failing_upsert(user):
            raise RepositoryUnavailableError("database is locked")

        monkeypatch.setattr(user_repo, "upsert", failing_upsert)

        with pytest.raises(RepositoryUnavailableError):
            profile_service.upload_profile_picture("user-1", JPEG_BYTES, "b.jpg", "image/jpeg")

        assert profile_blobs(blob_store) == [old.profile_picture_path.split("/")[-1]]
        assert user_repo.get_by_id("user-1").profile_picture_path == old.profile_picture_path

    def test_old_blob_removal_failure_is_ignored(self, profile_service, blob_store, monkeypatch):
        profile_service.upload_profile_picture("user-1", PNG_BYTES, "a.png", "image/png")

        def failing_remove(path):
            raise OSError("permission denied")

        monkeypatch.setattr(blob_store, "remove", failing_remove)

        user = profile_service.upload_profile_picture("user-1", JPEG_BYTES, "b.jpg", "image/jpeg")

        assert blob_store.get(user.profile_picture_path) == JPEG_BYTES

    @pytest.mark.parametrize("mime_type", ["application/pdf", "text/plain", ""])
    def test_non_image_rejected(self, profile_service, blob_store, mime_type):
        with pytest.raises(InvalidInputError):
            profile_service.upload_profile_picture("user-1", b"data", "a.pdf", mime_type)

        assert profile_blobs(blob_store) == []

    def test_missing_user_id_rejected(self, profile_service):
        with pytest.raises(InvalidInputError):
            profile_service.upload_profile_picture("", PNG_BYTES, "a.png", "image/png")

    def test_oversized_picture_rejected(self, user_repo, blob_store):
        service = ProfileService(user_repo, blob_store, max_picture_bytes=10)

        with pytest.raises(InvalidInputError):
            service.upload_profile_picture("user-1", PNG_BYTES, "a.png", "image/png")


class TestProfileQueries:
    def test_get_profile_picture_streams_bytes(self, profile_service):
        profile_service.upload_profile_picture("user-1", PNG_BYTES, "a.png", "image/png")

        user, stream = profile_service.get_profile_picture("user-1")

        assert b"".join(stream) == PNG_BYTES
        assert profile_service.get_profile_picture_url("user-1") == user.profile_picture_url

    def test_getters_raise_not_found(self, profile_service):
        with pytest.raises(NotFoundError):
            profile_service.get_profile_picture("nobody")
        with pytest.raises(NotFoundError):
            profile_service.get_profile_picture_url("nobody")

    def test_user_without_picture_is_not_found(self, profile_service):
        profile_service.sync_profile("user-1", "alice", None)

        with pytest.raises(NotFoundError):
            profile_service.get_profile_picture_url("user-1")


class TestDeleteProfilePicture:
    def test_delete_keeps_user_row(self, profile_service, user_repo, blob_store):
        uploaded = profile_service.upload_profile_picture(
            "user-1", PNG_BYTES, "a.png", "image/png", username="alice"
        )

        cleared = profile_service.delete_profile_picture("user-1")

        assert cleared.username == "alice"
        assert not cleared.has_profile_picture
        assert user_repo.get_by_id("user-1") is not None
        assert not blob_store.exists(uploaded.profile_picture_path)

    def test_delete_without_picture_is_not_found(self, profile_service):
        with pytest.raises(NotFoundError):
            profile_service.delete_profile_picture("nobody")


class TestSyncProfile:
    def test_sync_creates_user(self, profile_service):
        user = profile_service.sync_profile("user-1", "alice", "a@example.com")

        assert user.username == "alice"
        assert user.email == "a@example.com"
        assert not user.has_profile_picture

    def test_sync_carries_picture_forward(self, profile_service):
        uploaded = profile_service.upload_profile_picture("user-1", PNG_BYTES, "a.png", "image/png")

        user = profile_service.sync_profile("user-1", "bob", "b@example.com")

        assert user.username == "bob"
        assert user.profile_picture_path == uploaded.profile_picture_path
        assert user.profile_picture_url == uploaded.profile_picture_url

    def test_sync_does_not_restore_replaced_picture(self, profile_service, user_repo, blob_store, monkeypatch):
        profile_service.upload_profile_picture("user-1", PNG_BYTES, "a.png", "image/png")
        original_get = user_repo.get_by_id
        replaced = []

        def get_then_replace(user_id):
            user = original_get(user_id)
            if not replaced:
                replaced.append(True)
                profile_service.upload_profile_picture("user-1", JPEG_BYTES, "b.jpg", "image/jpeg")
            return user

        monkeypatch.setattr(user_repo, "get_by_id", get_then_replace)
        profile_service.sync_profile("user-1", "bob", "b@example.com")
        monkeypatch.undo()

        current = user_repo.get_by_id("user-1")
        assert replaced
        assert current.username == "bob"
        assert current.profile_picture_path.endswith(".jpg")
        assert blob_store.get(current.profile_picture_path) == JPEG_BYTES

    def test_sync_requires_user_id(self, profile_service):
        with pytest.raises(InvalidInputError):
            profile_service.sync_profile("", "alice", None)
