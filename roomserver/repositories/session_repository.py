"""Session repository for bearer token storage."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from common.logging_config import get_logger
from roomserver.database import get_db_connection
from roomserver.utils import to_db_timestamp, from_db_timestamp

logger = get_logger(__name__)


@dataclass
class Session:
    token: str
    user_id: str
    created_at: datetime


class SessionRepository:
    @staticmethod
    def create_session(token: str, user_id: str, created_at: datetime) -> Session:
        logger.debug(f"Creating session [user_id={user_id}]")
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO sessions (token, user_id, created_at) VALUES (?, ?, ?)",
                (token, user_id, to_db_timestamp(created_at))
            )
            conn.commit()

        return Session(token=token, user_id=user_id, created_at=created_at)

    @staticmethod
    def get_by_token(token: str) -> Optional[Session]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT token, user_id, created_at FROM sessions WHERE token = ?",
                (token,)
            )
            row = cursor.fetchone()

            if row is None:
                return None

            return Session(
                token=row["token"],
                user_id=row["user_id"],
                created_at=from_db_timestamp(row["created_at"]),
            )

    @staticmethod
    def delete_session(token: str) -> bool:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM sessions WHERE token = ?", (token,))
            conn.commit()
            return cursor.rowcount > 0

    @staticmethod
    def delete_created_before(cutoff: datetime) -> int:
        """
        Remove every session created before cutoff.

        Returns:
            Number of sessions removed
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM sessions WHERE created_at < ?",
                (to_db_timestamp(cutoff),)
            )
            conn.commit()
            deleted = cursor.rowcount

        if deleted:
            logger.info(f"Removed {deleted} stale sessions")
        return deleted
