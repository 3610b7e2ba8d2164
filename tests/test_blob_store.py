"""Tests for the on-disk blob store."""

import io

import pytest

from roomserver.blob_store import LocalBlobStore, sanitize_file_name
from roomserver.exceptions import BlobNotFoundError, FileTooLargeError, StorageFailureError


@pytest.fixture
def store(tmp_path):
    return LocalBlobStore(tmp_path / "uploads")


class TestSanitizeFileName:
    @pytest.mark.parametrize("name,expected", [
        ("report.pdf", "report.pdf"),
        ("my report (1).pdf", "my_report_1_.pdf"),
        ("../../etc/passwd", "passwd"),
        ("..\\..\\windows\\system.ini", "system.ini"),
        ("...", "file"),
        ("", "file"),
    ])
    def test_sanitize(self, name, expected):
        assert sanitize_file_name(name) == expected

    def test_long_names_are_truncated(self):
        assert len(sanitize_file_name("a" * 500 + ".txt")) == 120


class TestPutAndResolve:
    def test_put_writes_bytes(self, store):
        locator, size = store.put("hello.txt", io.BytesIO(b"hello world"))

        assert size == 11
        assert locator.endswith("-hello.txt")
        assert store.resolve(locator).read_bytes() == b"hello world"

    def test_same_name_gets_distinct_locators(self, store):
        first, _ = store.put("a.txt", io.BytesIO(b"1"))
        second, _ = store.put("a.txt", io.BytesIO(b"2"))

        assert first != second
        assert store.resolve(first).read_bytes() == b"1"
        assert store.resolve(second).read_bytes() == b"2"

    def test_empty_file(self, store):
        locator, size = store.put("empty.bin", io.BytesIO(b""))
        assert size == 0
        assert store.resolve(locator).read_bytes() == b""

    def test_large_stream_is_copied_in_pieces(self, store):
        data = b"x" * (200 * 1024 + 7)
        locator, size = store.put("big.bin", io.BytesIO(data))
        assert size == len(data)
        assert store.resolve(locator).read_bytes() == data

    def test_too_large_removes_partial_blob(self, store):
        with pytest.raises(FileTooLargeError):
            store.put("big.bin", io.BytesIO(b"x" * 100), max_bytes=10)

        assert list(store.root.iterdir()) == []

    def test_stream_error_removes_partial_blob(self, store):
        class BrokenStream(io.BytesIO):
            def read(self, size=-1):
                if self.tell() > 0:
                    raise ValueError("I/O operation on closed file")
                return super().read(size)

        with pytest.raises(ValueError):
            store.put("big.bin", BrokenStream(b"x" * (200 * 1024)))

        assert list(store.root.iterdir()) == []

    def test_write_failure_becomes_storage_failure(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("occupied")
        store = LocalBlobStore(blocker)

        with pytest.raises(StorageFailureError):
            store.put("a.txt", io.BytesIO(b"data"))

    @pytest.mark.parametrize("locator", [
        "../secret",
        "not-a-locator",
        "123-zzzzzzzz-a.txt",
        "123-abcdef01-a/b.txt",
    ])
    def test_resolve_rejects_malformed_locators(self, store, locator):
        with pytest.raises(BlobNotFoundError):
            store.resolve(locator)

    def test_resolve_missing_blob(self, store):
        with pytest.raises(BlobNotFoundError):
            store.resolve("123-abcdef01-gone.txt")

    def test_delete(self, store):
        locator, _ = store.put("a.txt", io.BytesIO(b"data"))

        assert store.delete(locator) is True
        assert store.delete(locator) is False
        with pytest.raises(BlobNotFoundError):
            store.resolve(locator)
