"""File ledger service: per-room upload records and blob access."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple
import sqlite3

from common.logging_config import get_logger
from common.types import IncomingFile, RejectedFile
from roomserver.blob_store import LocalBlobStore
from roomserver.config import ALLOW_UPLOADS_TO_EXPIRED, MAX_UPLOAD_BYTES
from roomserver.exceptions import (
    RoomExpiredError,
    RoomNotFoundError,
    SkyDropError,
    StorageFailureError,
    ValidationError,
)
from roomserver.repositories.file_repository import FileRepository, FileRecord
from roomserver.repositories.room_repository import RoomRepository
from roomserver.utils import utc_now

logger = get_logger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass
class UploadResult:
    recorded: List[FileRecord] = field(default_factory=list)
    rejected: List[RejectedFile] = field(default_factory=list)


class FileService:
    def __init__(
        self,
        file_repo: Optional[FileRepository] = None,
        room_repo: Optional[RoomRepository] = None,
        blob_store: Optional[LocalBlobStore] = None,
        clock: Callable[[], datetime] = utc_now,
        allow_uploads_to_expired: Optional[bool] = None,
        max_upload_bytes: Optional[int] = None,
    ):
        self.file_repo = file_repo or FileRepository()
        self.room_repo = room_repo or RoomRepository()
        self.blob_store = blob_store or LocalBlobStore()
        self.clock = clock
        self.allow_uploads_to_expired = (
            ALLOW_UPLOADS_TO_EXPIRED if allow_uploads_to_expired is None else allow_uploads_to_expired
        )
        self.max_upload_bytes = MAX_UPLOAD_BYTES if max_upload_bytes is None else max_upload_bytes

    def _check_room_accepts_uploads(self, room_id: str) -> None:
        try:
            room = self.room_repo.get_by_id(room_id)
        except sqlite3.Error as e:
            raise StorageFailureError("Failed to read room") from e
        if room is None:
            raise RoomNotFoundError("Room not found")

        if not self.allow_uploads_to_expired and not room.is_live(self.clock()):
            raise RoomExpiredError("Room has expired")

    def record(
        self,
        room_id: str,
        sender_id: str,
        file_name: str,
        size: int,
        mime_type: str,
        locator: str,
    ) -> FileRecord:
        self._check_room_accepts_uploads(room_id)

        try:
            return self.file_repo.create_record(
                room_id=room_id,
                sender_id=sender_id,
                file_name=file_name,
                file_size=size,
                file_type=mime_type or DEFAULT_MIME_TYPE,
                locator=locator,
                sent_at=self.clock(),
            )
        except sqlite3.Error as e:
            raise StorageFailureError("Failed to record file") from e

    def list_for_room(self, room_id: str) -> List[FileRecord]:
        try:
            return self.file_repo.list_by_room(room_id)
        except sqlite3.Error as e:
            raise StorageFailureError("Failed to list files") from e

    def upload_files(self, room_id: str, sender_id: str, files: Sequence[IncomingFile]) -> UploadResult:
        """
        Store each file's bytes and record one ledger entry per accepted file.

        A failure on one file is reported in the result and does not affect
        the others. If no file is accepted, the first failure is raised.

        Raises:
            ValidationError: If no files were given
            RoomNotFoundError: If the room is unknown (checked before any write)
            RoomExpiredError: If the room has expired and such uploads are disabled
        """
        if not files:
            raise ValidationError("No files uploaded")

        self._check_room_accepts_uploads(room_id)

        result = UploadResult()
        first_error: Optional[SkyDropError] = None

        for incoming in files:
            file_name = incoming.file_name or "file"
            try:
                locator, size = self.blob_store.put(file_name, incoming.stream, self.max_upload_bytes)
            except SkyDropError as e:
                logger.warning(f"Upload rejected for {file_name} [room_id={room_id}]: {e}")
                result.rejected.append(RejectedFile(file_name=file_name, reason=str(e), code=e.code))
                first_error = first_error or e
                continue

            try:
                record = self.record(
                    room_id=room_id,
                    sender_id=sender_id,
                    file_name=file_name,
                    size=size,
                    mime_type=incoming.mime_type,
                    locator=locator,
                )
            except SkyDropError as e:
                self.blob_store.delete(locator)
                logger.warning(f"Ledger insert failed for {file_name} [room_id={room_id}]: {e}")
                result.rejected.append(RejectedFile(file_name=file_name, reason=str(e), code=e.code))
                first_error = first_error or e
                continue

            result.recorded.append(record)

        if not result.recorded and first_error is not None:
            raise first_error

        logger.info(
            f"Upload finished [room_id={room_id}] [sender_id={sender_id}] "
            f"recorded={len(result.recorded)} rejected={len(result.rejected)}"
        )
        return result

    def open_download(self, locator: str) -> Tuple[Path, str]:
        """
        Resolve a locator to the blob path and the name to offer the client.

        Raises:
            BlobNotFoundError: If the locator does not point at a stored blob
        """
        path = self.blob_store.resolve(locator)
        try:
            record = self.file_repo.get_by_locator(locator)
        except sqlite3.Error as e:
            raise StorageFailureError("Failed to read file record") from e
        download_name = record.file_name if record is not None else path.name
        return path, download_name
