"""Authentication and security utilities."""

import secrets
from typing import Optional

import bcrypt
from fastapi import Header

from common.constants import SESSION_TOKEN_BYTES
from roomserver.config import BCRYPT_ROUNDS
from roomserver.exceptions import UnauthorizedError
from roomserver.repositories.user_repository import User

BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Bcrypt hash of the password
    """
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Args:
        password: Plain text password to verify
        password_hash: Bcrypt hash to verify against

    Returns:
        True if password matches hash, False otherwise
    """
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > BCRYPT_MAX_BYTES:
        return False
    hash_bytes = password_hash.encode('utf-8')
    return bcrypt.checkpw(password_bytes, hash_bytes)


def generate_session_token() -> str:
    """
    Generate a new opaque session token.

    Returns:
        Hex string carrying SESSION_TOKEN_BYTES of randomness
    """
    return secrets.token_hex(SESSION_TOKEN_BYTES)


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the token from an Authorization header value.

    Args:
        authorization: Header value (format: "Bearer <token>"), may be None

    Returns:
        The token, or None when the header is absent or malformed
    """
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """
    FastAPI dependency returning the bearer token, if any, without validating it.
    """
    return parse_bearer_token(authorization)


def get_current_user(authorization: Optional[str] = Header(None)) -> User:
    """
    FastAPI dependency to resolve the bearer token to its user.

    Args:
        authorization: Authorization header value (format: "Bearer <token>")

    Returns:
        The authenticated User

    Raises:
        UnauthorizedError: If the header is missing or the token does not resolve
    """
    from roomserver.services.session_service import SessionService

    token = parse_bearer_token(authorization)
    if token is None:
        raise UnauthorizedError("Unauthorized")

    return SessionService().resolve(token)
