"""Utility helper functions for the room server."""

import secrets
import uuid
from datetime import datetime, timezone


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_db_timestamp(value: datetime) -> str:
    """
    Serialize a datetime for storage.

    All stored timestamps share one fixed-width UTC format so that SQL
    string comparisons order them chronologically.

    Args:
        value: Timezone-aware datetime (naive values are taken as UTC)

    Returns:
        ISO 8601 string with microseconds and +00:00 offset
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_db_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def random_string(alphabet: str, length: int) -> str:
    """
    Draw a string of the given length from alphabet using the system CSPRNG.

    Args:
        alphabet: Characters to choose from
        length: Number of characters

    Returns:
        Random string
    """
    return "".join(secrets.choice(alphabet) for _ in range(length))


def email_local_part(email: str) -> str:
    return email.split("@")[0]
