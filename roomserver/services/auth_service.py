"""Identity service: sign up, credential checks and user lookup."""

from typing import Optional
import sqlite3

from common.logging_config import get_logger
from roomserver.auth import BCRYPT_MAX_BYTES, hash_password, verify_password
from roomserver.repositories.user_repository import UserRepository, User
from roomserver.exceptions import (
    InvalidCredentialsError,
    StorageFailureError,
    UserAlreadyExistsError,
    UserNotFoundError,
    ValidationError,
)
from roomserver.utils import email_local_part, generate_uuid, utc_now

logger = get_logger(__name__)


def _require(value: Optional[str], message: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(message)
    return value


class AuthService:
    def __init__(self, user_repo: Optional[UserRepository] = None):
        self.user_repo = user_repo or UserRepository()

    def create_user(self, email: Optional[str], password: Optional[str], username: Optional[str] = None) -> User:
        email = _require(email, "Email and password are required")
        password = _require(password, "Email and password are required")
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValidationError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")

        logger.info(f"Attempting to register user: {email}")
        try:
            existing = self.user_repo.get_by_email(email)
        except sqlite3.Error as e:
            raise StorageFailureError("Failed to read user") from e
        if existing is not None:
            logger.warning(f"Registration failed: email '{email}' already exists")
            raise UserAlreadyExistsError("User already exists")

        display_name = username.strip() if username and username.strip() else email_local_part(email)

        try:
            user = self.user_repo.create_user(
                user_id=generate_uuid(),
                email=email,
                username=display_name,
                password_hash=hash_password(password),
                created_at=utc_now(),
            )
        except sqlite3.IntegrityError:
            logger.warning(f"Registration failed due to integrity error: email '{email}'")
            raise UserAlreadyExistsError("User already exists")
        except sqlite3.Error as e:
            raise StorageFailureError("Failed to store user") from e

        logger.info(f"Successfully registered user: {email} [user_id={user.user_id}]")
        return user

    def authenticate(self, email: Optional[str], password: Optional[str]) -> User:
        email = _require(email, "Email and password are required")
        password = _require(password, "Email and password are required")

        logger.info(f"Login attempt for user: {email}")
        try:
            user = self.user_repo.get_by_email(email)
        except sqlite3.Error as e:
            raise StorageFailureError("Failed to read user") from e
        if user is None:
            logger.warning(f"Login failed: email '{email}' not found")
            raise InvalidCredentialsError("Invalid credentials")

        if not verify_password(password, user.password_hash):
            logger.warning(f"Login failed: invalid password for '{email}'")
            raise InvalidCredentialsError("Invalid credentials")

        return user

    def get_user(self, user_id: str) -> User:
        try:
            user = self.user_repo.get_by_user_id(user_id)
        except sqlite3.Error as e:
            raise StorageFailureError("Failed to read user") from e
        if user is None:
            raise UserNotFoundError("User not found")
        return user
