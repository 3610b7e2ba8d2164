"""User repository for database operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List

import sqlite3

from common.logging_config import get_logger
from roomserver.database import get_db_connection
from roomserver.utils import to_db_timestamp, from_db_timestamp

logger = get_logger(__name__)


@dataclass
class User:
    user_id: str
    email: str
    username: str
    password_hash: str
    created_at: datetime


def _row_to_user(row: sqlite3.Row) -> User:
    return User(
        user_id=row["user_id"],
        email=row["email"],
        username=row["username"],
        password_hash=row["password_hash"],
        created_at=from_db_timestamp(row["created_at"]),
    )


class UserRepository:
    @staticmethod
    def create_user(
        user_id: str,
        email: str,
        username: str,
        password_hash: str,
        created_at: datetime,
    ) -> User:
        logger.debug(f"Creating user: {email} [user_id={user_id}]")

        with get_db_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(
                    """
                    INSERT INTO users (user_id, email, username, password_hash, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (user_id, email, username, password_hash, to_db_timestamp(created_at))
                )
                conn.commit()
                logger.info(f"User created successfully: {email} [user_id={user_id}]")
            except sqlite3.IntegrityError:
                logger.debug(f"User insert rejected by constraint: {email}")
                raise
            except Exception as e:
                logger.error(f"Failed to create user {email}: {e}", exc_info=True)
                raise

            return User(
                user_id=user_id,
                email=email,
                username=username,
                password_hash=password_hash,
                created_at=created_at,
            )

    @staticmethod
    def get_by_email(email: str) -> Optional[User]:
        logger.debug(f"Fetching user by email: {email}")
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """SELECT user_id, email, username, password_hash, created_at
                   FROM users WHERE email = ?""",
                (email,)
            )
            row = cursor.fetchone()

            if row is None:
                logger.debug(f"User not found: {email}")
                return None

            return _row_to_user(row)

    @staticmethod
    def get_by_user_id(user_id: str) -> Optional[User]:
        logger.debug(f"Fetching user by user_id: {user_id}")
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """SELECT user_id, email, username, password_hash, created_at
                   FROM users WHERE user_id = ?""",
                (user_id,)
            )
            row = cursor.fetchone()

            if row is None:
                logger.debug(f"User not found: {user_id}")
                return None

            return _row_to_user(row)

    @staticmethod
    def get_by_user_ids(user_ids: List[str]) -> List[User]:
        """
        Fetch users for a list of ids, keeping the order of the input.
        Ids with no matching row are left out.
        """
        if not user_ids:
            return []

        placeholders = ", ".join("?" for _ in user_ids)
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""SELECT user_id, email, username, password_hash, created_at
                    FROM users WHERE user_id IN ({placeholders})""",
                tuple(user_ids)
            )
            by_id = {row["user_id"]: _row_to_user(row) for row in cursor.fetchall()}

        users = [by_id[user_id] for user_id in user_ids if user_id in by_id]
        if len(users) != len(user_ids):
            logger.debug(f"Skipped {len(user_ids) - len(users)} unresolvable user ids")
        return users

    @staticmethod
    def count_by_email(email: str) -> int:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM users WHERE email = ?", (email,))
            return cursor.fetchone()[0]
