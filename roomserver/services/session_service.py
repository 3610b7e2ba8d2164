"""Session service mapping bearer tokens to users."""

from datetime import timedelta
from typing import Optional
import sqlite3

from common.logging_config import get_logger
from roomserver.auth import generate_session_token
from roomserver.config import SESSION_TTL_SECONDS
from roomserver.exceptions import StorageFailureError, UnauthorizedError
from roomserver.repositories.session_repository import SessionRepository
from roomserver.repositories.user_repository import UserRepository, User
from roomserver.utils import utc_now

logger = get_logger(__name__)

TOKEN_INSERT_ATTEMPTS = 3


class SessionService:
    def __init__(
        self,
        session_repo: Optional[SessionRepository] = None,
        user_repo: Optional[UserRepository] = None,
        ttl_seconds: Optional[int] = None,
    ):
        self.session_repo = session_repo or SessionRepository()
        self.user_repo = user_repo or UserRepository()
        self.ttl_seconds = SESSION_TTL_SECONDS if ttl_seconds is None else ttl_seconds

    def open_session(self, user: User) -> str:
        for attempt in range(TOKEN_INSERT_ATTEMPTS):
            token = generate_session_token()
            try:
                self.session_repo.create_session(token, user.user_id, utc_now())
            except sqlite3.IntegrityError:
                logger.warning(f"Session token collision (attempt {attempt + 1}), drawing a new one")
                continue
            except sqlite3.Error as e:
                raise StorageFailureError("Failed to store session") from e

            logger.info(f"Session opened [user_id={user.user_id}]")
            return token

        raise StorageFailureError("Could not allocate a unique session token")

    def resolve(self, token: Optional[str]) -> User:
        if not token:
            raise UnauthorizedError("Unauthorized")

        try:
            session = self.session_repo.get_by_token(token)
            if session is None:
                logger.debug("Session lookup failed: unknown token")
                raise UnauthorizedError("Unauthorized")

            if self.ttl_seconds > 0 and utc_now() - session.created_at > timedelta(seconds=self.ttl_seconds):
                logger.info(f"Session expired [user_id={session.user_id}]")
                self.session_repo.delete_session(token)
                raise UnauthorizedError("Unauthorized")

            user = self.user_repo.get_by_user_id(session.user_id)
        except sqlite3.Error as e:
            raise StorageFailureError("Failed to resolve session") from e

        if user is None:
            logger.warning(f"Session points at missing user [user_id={session.user_id}]")
            raise UnauthorizedError("Unauthorized")

        return user

    def close_session(self, token: Optional[str]) -> None:
        if not token:
            return
        try:
            deleted = self.session_repo.delete_session(token)
        except sqlite3.Error as e:
            raise StorageFailureError("Failed to close session") from e

        if deleted:
            logger.info("Session closed")
        else:
            logger.debug("Logout for unknown token ignored")

    def purge_expired_sessions(self) -> int:
        if self.ttl_seconds <= 0:
            return 0
        cutoff = utc_now() - timedelta(seconds=self.ttl_seconds)
        try:
            return self.session_repo.delete_created_before(cutoff)
        except sqlite3.Error as e:
            raise StorageFailureError("Failed to purge sessions") from e
