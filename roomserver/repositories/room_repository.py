"""Room repository for database operations."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

import sqlite3

from common.logging_config import get_logger
from roomserver.database import get_db_connection, write_transaction
from roomserver.utils import to_db_timestamp, from_db_timestamp

logger = get_logger(__name__)


@dataclass
class Room:
    room_id: str
    room_code: str
    room_password: str
    host_id: str
    created_at: datetime
    expires_at: datetime
    is_active: bool
    participants: List[str] = field(default_factory=list)

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def is_live(self, now: datetime) -> bool:
        return self.is_active and not self.is_expired(now)


def _fetch_participant_ids(cursor: sqlite3.Cursor, room_id: str) -> List[str]:
    cursor.execute(
        "SELECT user_id FROM room_participants WHERE room_id = ? ORDER BY seq",
        (room_id,)
    )
    return [row["user_id"] for row in cursor.fetchall()]


def _row_to_room(row: sqlite3.Row, participants: List[str]) -> Room:
    return Room(
        room_id=row["room_id"],
        room_code=row["room_code"],
        room_password=row["room_password"],
        host_id=row["host_id"],
        created_at=from_db_timestamp(row["created_at"]),
        expires_at=from_db_timestamp(row["expires_at"]),
        is_active=bool(row["is_active"]),
        participants=participants,
    )


class RoomRepository:
    @staticmethod
    def create_room(
        room_id: str,
        room_code: str,
        room_password: str,
        host_id: str,
        created_at: datetime,
        expires_at: datetime,
    ) -> Room:
        """
        Insert a room with its host as first participant.

        Rooms that still carry the same code but are past their deadline are
        deactivated in the same transaction, so only a live room can block
        the code.

        Raises:
            sqlite3.IntegrityError: The code is held by another active room
        """
        logger.debug(f"Creating room [room_id={room_id}] [host_id={host_id}]")
        now = to_db_timestamp(created_at)

        with get_db_connection() as conn:
            try:
                with write_transaction(conn) as cursor:
                    cursor.execute(
                        """
                        UPDATE rooms SET is_active = 0
                        WHERE room_code = ? AND is_active = 1 AND expires_at < ?
                        """,
                        (room_code, now)
                    )
                    if cursor.rowcount:
                        logger.info(f"Reclaimed room code from {cursor.rowcount} expired room(s)")

                    cursor.execute(
                        """
                        INSERT INTO rooms (room_id, room_code, room_password, host_id,
                                           created_at, expires_at, is_active)
                        VALUES (?, ?, ?, ?, ?, ?, 1)
                        """,
                        (room_id, room_code, room_password, host_id, now, to_db_timestamp(expires_at))
                    )
                    cursor.execute(
                        """
                        INSERT INTO room_participants (room_id, user_id, joined_at)
                        VALUES (?, ?, ?)
                        """,
                        (room_id, host_id, now)
                    )
            except sqlite3.IntegrityError:
                logger.debug(f"Room insert rejected by constraint [room_id={room_id}]")
                raise
            except Exception as e:
                logger.error(f"Failed to create room [room_id={room_id}]: {e}", exc_info=True)
                raise

        logger.info(f"Room created successfully [room_id={room_id}]")
        return Room(
            room_id=room_id,
            room_code=room_code,
            room_password=room_password,
            host_id=host_id,
            created_at=created_at,
            expires_at=expires_at,
            is_active=True,
            participants=[host_id],
        )

    @staticmethod
    def get_by_id(room_id: str) -> Optional[Room]:
        logger.debug(f"Fetching room [room_id={room_id}]")
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """SELECT room_id, room_code, room_password, host_id, created_at,
                          expires_at, is_active
                   FROM rooms WHERE room_id = ?""",
                (room_id,)
            )
            row = cursor.fetchone()

            if row is None:
                logger.debug(f"Room not found [room_id={room_id}]")
                return None

            return _row_to_room(row, _fetch_participant_ids(cursor, room_id))

    @staticmethod
    def add_participant_by_credentials(
        room_code: str,
        room_password: str,
        user_id: str,
        now: datetime,
    ) -> Optional[Room]:
        """
        Add user_id to the live room matching code and password.

        The membership insert is conditional on the room being active and
        not yet past its deadline, and a user already present is left as is.

        Returns:
            The room after the join, or None when no live room matches
        """
        timestamp = to_db_timestamp(now)

        with get_db_connection() as conn:
            with write_transaction(conn) as cursor:
                cursor.execute(
                    """
                    INSERT OR IGNORE INTO room_participants (room_id, user_id, joined_at)
                    SELECT room_id, ?, ? FROM rooms
                    WHERE room_code = ? AND room_password = ?
                      AND is_active = 1 AND expires_at >= ?
                    """,
                    (user_id, timestamp, room_code, room_password, timestamp)
                )
                added = cursor.rowcount > 0

                cursor.execute(
                    """SELECT room_id, room_code, room_password, host_id, created_at,
                              expires_at, is_active
                       FROM rooms
                       WHERE room_code = ? AND room_password = ?
                         AND is_active = 1 AND expires_at >= ?""",
                    (room_code, room_password, timestamp)
                )
                row = cursor.fetchone()

                if row is None:
                    return None

                room = _row_to_room(row, _fetch_participant_ids(cursor, row["room_id"]))

        if added:
            logger.info(f"Participant added [room_id={room.room_id}] [user_id={user_id}]")
        else:
            logger.debug(f"Participant already present [room_id={room.room_id}] [user_id={user_id}]")
        return room

    @staticmethod
    def deactivate_room(room_id: str) -> bool:
        with get_db_connection() as conn:
            with write_transaction(conn) as cursor:
                cursor.execute(
                    "UPDATE rooms SET is_active = 0 WHERE room_id = ? AND is_active = 1",
                    (room_id,)
                )
                changed = cursor.rowcount > 0

        if changed:
            logger.info(f"Room deactivated [room_id={room_id}]")
        return changed

    @staticmethod
    def deactivate_expired(now: datetime) -> int:
        """
        Flip every active room whose deadline has passed.

        Returns:
            Number of rooms deactivated
        """
        with get_db_connection() as conn:
            with write_transaction(conn) as cursor:
                cursor.execute(
                    "UPDATE rooms SET is_active = 0 WHERE is_active = 1 AND expires_at < ?",
                    (to_db_timestamp(now),)
                )
                return cursor.rowcount
