"""File ledger repository for database operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

import sqlite3

from common.logging_config import get_logger
from roomserver.database import get_db_connection
from roomserver.utils import to_db_timestamp, from_db_timestamp

logger = get_logger(__name__)


@dataclass(frozen=True)
class FileRecord:
    file_id: int
    room_id: str
    sender_id: str
    file_name: str
    file_size: int
    file_type: str
    locator: str
    sent_at: datetime


def _row_to_record(row: sqlite3.Row) -> FileRecord:
    return FileRecord(
        file_id=row["file_id"],
        room_id=row["room_id"],
        sender_id=row["sender_id"],
        file_name=row["file_name"],
        file_size=row["file_size"],
        file_type=row["file_type"],
        locator=row["locator"],
        sent_at=from_db_timestamp(row["sent_at"]),
    )


class FileRepository:
    @staticmethod
    def create_record(
        room_id: str,
        sender_id: str,
        file_name: str,
        file_size: int,
        file_type: str,
        locator: str,
        sent_at: datetime,
    ) -> FileRecord:
        logger.debug(f"Recording file {file_name} [room_id={room_id}] [sender_id={sender_id}]")

        with get_db_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(
                    """
                    INSERT INTO files (room_id, sender_id, file_name, file_size, file_type,
                                       locator, sent_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (room_id, sender_id, file_name, file_size, file_type, locator,
                     to_db_timestamp(sent_at))
                )
                conn.commit()
            except Exception as e:
                logger.error(f"Failed to record file {file_name} [room_id={room_id}]: {e}", exc_info=True)
                raise

            file_id = cursor.lastrowid

        logger.info(f"File recorded [file_id={file_id}] [room_id={room_id}] size={file_size}")
        return FileRecord(
            file_id=file_id,
            room_id=room_id,
            sender_id=sender_id,
            file_name=file_name,
            file_size=file_size,
            file_type=file_type,
            locator=locator,
            sent_at=sent_at,
        )

    @staticmethod
    def list_by_room(room_id: str) -> List[FileRecord]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """SELECT file_id, room_id, sender_id, file_name, file_size, file_type,
                          locator, sent_at
                   FROM files WHERE room_id = ? ORDER BY file_id""",
                (room_id,)
            )
            records = [_row_to_record(row) for row in cursor.fetchall()]

        logger.debug(f"Fetched {len(records)} file records [room_id={room_id}]")
        return records

    @staticmethod
    def get_by_locator(locator: str) -> Optional[FileRecord]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """SELECT file_id, room_id, sender_id, file_name, file_size, file_type,
                          locator, sent_at
                   FROM files WHERE locator = ?""",
                (locator,)
            )
            row = cursor.fetchone()
            return _row_to_record(row) if row is not None else None
