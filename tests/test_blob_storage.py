"""Tests for the on-disk blob store."""

import os

import pytest

from filestore.blob_storage import BlobStore, extract_extension
from filestore.exceptions import BlobNotFoundError, InvalidInputError, StorageUnavailableError


class TestExtractExtension:
    def test_keeps_simple_extension(self):
        assert extract_extension("report.pdf") == ".pdf"

    def test_default_when_missing(self):
        assert extract_extension("README", default=".jpg") == ".jpg"

    def test_default_when_none(self):
        assert extract_extension(None, default=".jpg") == ".jpg"

    def test_ignores_directory_components(self):
        assert extract_extension("../../etc/passwd") == ""
        assert extract_extension("..\\evil\\shell.sh") == ".sh"

    def test_rejects_odd_characters(self):
        assert extract_extension("photo.p g", default=".bin") == ".bin"


class TestBlobStore:
    def test_open_creates_buckets(self, tmp_path):
        store = BlobStore(tmp_path / "uploads")
        store.open()

        assert (tmp_path / "uploads" / "profiles").is_dir()
        assert (tmp_path / "uploads" / "shared").is_dir()

    @pytest.mark.skipif(os.geteuid() == 0, reason="root ignores directory permissions")
    def test_open_fails_fast_when_not_writable(self, tmp_path):
        root = tmp_path / "uploads"
        (root / "profiles").mkdir(parents=True)
        (root / "shared").mkdir()
        os.chmod(root / "shared", 0o500)
        try:
            with pytest.raises(StorageUnavailableError):
                BlobStore(root).open()
        finally:
            os.chmod(root / "shared", 0o700)

    def test_put_and_get(self, blob_store):
        path = blob_store.put("shared", "abc", b"hello", "greeting.txt")

        assert path == "shared/abc.txt"
        assert blob_store.get(path) == b"hello"
        assert blob_store.exists(path)

    def test_put_applies_default_extension(self, blob_store):
        path = blob_store.put("profiles", "xyz", b"img", "avatar", default_extension=".jpg")
        assert path == "profiles/xyz.jpg"

    def test_put_rejects_unknown_bucket(self, blob_store):
        with pytest.raises(InvalidInputError):
            blob_store.put("temp", "abc", b"data")

    def test_get_missing_blob(self, blob_store):
        with pytest.raises(BlobNotFoundError):
            blob_store.get("shared/missing.bin")

    def test_stream_returns_all_bytes(self, blob_store):
        payload = os.urandom(200 * 1024)
        path = blob_store.put("shared", "big", payload, "big.bin")

        stream = blob_store.stream(path, piece_size=64 * 1024)
        pieces = list(stream)

        assert len(pieces) == 4
        assert b"".join(pieces) == payload

    def test_stream_missing_blob_raises_before_iterating(self, blob_store):
        with pytest.raises(BlobNotFoundError):
            blob_store.stream("shared/missing.bin")

    def test_remove_is_idempotent(self, blob_store):
        path = blob_store.put("shared", "abc", b"data", "a.bin")

        assert blob_store.remove(path) is True
        assert blob_store.remove(path) is False
        assert not blob_store.exists(path)

    @pytest.mark.parametrize("path", [
        "../outside.txt",
        "shared/../../outside.txt",
        "/etc/passwd",
        "",
    ])
    def test_rejects_paths_outside_root(self, blob_store, path):
        with pytest.raises(InvalidInputError):
            blob_store.get(path)
        with pytest.raises(InvalidInputError):
            blob_store.remove(path)

    def test_public_url(self, tmp_path):
        store = BlobStore(tmp_path, public_url_prefix="/uploads/")
        assert store.public_url("shared/abc.pdf") == "/uploads/shared/abc.pdf"

    def test_count(self, blob_store):
        blob_store.put("shared", "a", b"1", "a.txt")
        blob_store.put("shared", "b", b"2", "b.txt")

        assert blob_store.count("shared") == 2
        assert blob_store.count("profiles") == 0
