"""Tests for the file ledger service."""

import io
import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from common.types import IncomingFile
from roomserver.blob_store import LocalBlobStore
from roomserver.exceptions import (
    BlobNotFoundError,
    FileTooLargeError,
    RoomExpiredError,
    RoomNotFoundError,
    StorageFailureError,
    ValidationError,
)
from roomserver.repositories.file_repository import FileRepository
from roomserver.repositories.room_repository import RoomRepository
from roomserver.services.auth_service import AuthService
from roomserver.services.file_service import DEFAULT_MIME_TYPE, FileService
from roomserver.services.room_service import RoomService


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def incoming(name: str, data: bytes, mime_type: str = "text/plain") -> IncomingFile:
    return IncomingFile(file_name=name, mime_type=mime_type, stream=io.BytesIO(data))


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def blob_store(upload_dir):
    return LocalBlobStore(upload_dir)


@pytest.fixture
def room(test_db, clock):
    host = AuthService().create_user("host@example.com", "secret123")
    return RoomService(clock=clock).create_room(host.user_id)


@pytest.fixture
def file_service(blob_store, clock):
    return FileService(blob_store=blob_store, clock=clock, allow_uploads_to_expired=True, max_upload_bytes=1024)


class TestRecord:
    def test_record_appends_ledger_entry(self, file_service, room, clock):
        record = file_service.record(room.room_id, room.host_id, "a.txt", 3, "text/plain", "1-aaaaaaaa-a.txt")

        assert record.file_id is not None
        assert record.sent_at == clock.now
        assert file_service.list_for_room(room.room_id) == [record]

    def test_record_defaults_mime_type(self, file_service, room):
        record = file_service.record(room.room_id, room.host_id, "a", 3, "", "1-aaaaaaaa-a")
        assert record.file_type == DEFAULT_MIME_TYPE

    def test_record_unknown_room(self, file_service, test_db):
        with pytest.raises(RoomNotFoundError):
            file_service.record("missing", "user", "a.txt", 3, "text/plain", "1-aaaaaaaa-a.txt")

    def test_record_in_expired_room_allowed_by_default(self, file_service, room, clock):
        clock.advance(hours=1)
        record = file_service.record(room.room_id, room.host_id, "late.txt", 1, "text/plain", "1-aaaaaaaa-late.txt")
        assert record.file_name == "late.txt"

    def test_record_in_expired_room_rejected_when_disabled(self, blob_store, room, clock):
        service = FileService(blob_store=blob_store, clock=clock, allow_uploads_to_expired=False)
        clock.advance(hours=1)

        with pytest.raises(RoomExpiredError) as exc_info:
            service.record(room.room_id, room.host_id, "late.txt", 1, "text/plain", "1-aaaaaaaa-late.txt")
        assert exc_info.value.code == "ROOM_EXPIRED"

    def test_list_for_unknown_room_is_empty(self, file_service, test_db):
        assert file_service.list_for_room("missing") == []


class TestUploadFiles:
    def test_upload_records_each_file(self, file_service, room):
        result = file_service.upload_files(
            room.room_id, room.host_id,
            [incoming("a.txt", b"aaa"), incoming("b.png", b"bbbb", "image/png")],
        )

        assert [r.file_name for r in result.recorded] == ["a.txt", "b.png"]
        assert [r.file_size for r in result.recorded] == [3, 4]
        assert result.recorded[1].file_type == "image/png"
        assert result.rejected == []
        assert [r.file_name for r in file_service.list_for_room(room.room_id)] == ["a.txt", "b.png"]

    def test_uploaded_bytes_are_downloadable(self, file_service, room):
        result = file_service.upload_files(room.room_id, room.host_id, [incoming("a.txt", b"payload")])
        locator = result.recorded[0].locator

        path, download_name = file_service.open_download(locator)
        assert path.read_bytes() == b"payload"
        assert download_name == "a.txt"

    def test_no_files(self, file_service, room):
        with pytest.raises(ValidationError):
            file_service.upload_files(room.room_id, room.host_id, [])

    def test_unknown_room_writes_nothing(self, file_service, test_db, upload_dir):
        with pytest.raises(RoomNotFoundError):
            file_service.upload_files("missing", "user", [incoming("a.txt", b"aaa")])
        assert not upload_dir.exists() or list(upload_dir.iterdir()) == []

    def test_oversized_file_rejected_others_kept(self, file_service, room):
        result = file_service.upload_files(
            room.room_id, room.host_id,
            [incoming("big.bin", b"x" * 2048), incoming("small.txt", b"ok")],
        )

        assert [r.file_name for r in result.recorded] == ["small.txt"]
        assert len(result.rejected) == 1
        assert result.rejected[0].file_name == "big.bin"
        assert result.rejected[0].code == "FILE_TOO_LARGE"

    def test_all_files_rejected_raises_first_error(self, file_service, room):
        with pytest.raises(FileTooLargeError):
            file_service.upload_files(room.room_id, room.host_id, [incoming("big.bin", b"x" * 2048)])
        assert file_service.list_for_room(room.room_id) == []

    def test_ledger_failure_removes_blob(self, file_service, room, upload_dir, monkeypatch):
        def fail(**kwargs):
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(FileRepository, "create_record", staticmethod(fail))

        with pytest.raises(StorageFailureError):
            file_service.upload_files(room.room_id, room.host_id, [incoming("a.txt", b"aaa")])
        assert list(upload_dir.iterdir()) == []

    def test_upload_to_expired_room_when_disabled(self, blob_store, room, clock, upload_dir):
        service = FileService(blob_store=blob_store, clock=clock, allow_uploads_to_expired=False)
        clock.advance(minutes=31)

        with pytest.raises(RoomExpiredError):
            service.upload_files(room.room_id, room.host_id, [incoming("a.txt", b"aaa")])
        assert not upload_dir.exists() or list(upload_dir.iterdir()) == []


class TestOpenDownload:
    def test_unknown_locator(self, file_service, test_db):
        with pytest.raises(BlobNotFoundError):
            file_service.open_download("123-abcdef01-nothing.txt")

    def test_blob_without_ledger_entry_uses_locator_name(self, file_service, blob_store, test_db):
        locator, _ = blob_store.put("orphan.txt", io.BytesIO(b"data"))

        path, download_name = file_service.open_download(locator)
        assert download_name == path.name == locator


class TestStorageFailures:
    @staticmethod
    def locked(*args, **kwargs):
        raise sqlite3.OperationalError("database is locked")

    def test_room_lookup_failure_writes_nothing(self, file_service, room, upload_dir, monkeypatch):
        monkeypatch.setattr(RoomRepository, "get_by_id", staticmethod(self.locked))

        with pytest.raises(StorageFailureError):
            file_service.upload_files(room.room_id, room.host_id, [incoming("a.txt", b"aaa")])
        assert not upload_dir.exists() or list(upload_dir.iterdir()) == []

    def test_list_for_room(self, file_service, room, monkeypatch):
        monkeypatch.setattr(FileRepository, "list_by_room", staticmethod(self.locked))

        with pytest.raises(StorageFailureError):
            file_service.list_for_room(room.room_id)

    def test_open_download(self, file_service, blob_store, test_db, monkeypatch):
        locator, _ = blob_store.put("a.txt", io.BytesIO(b"data"))
        monkeypatch.setattr(FileRepository, "get_by_locator", staticmethod(self.locked))

        with pytest.raises(StorageFailureError):
            file_service.open_download(locator)
