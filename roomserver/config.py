"""Configuration settings for the room server."""

import os

from common.constants import DEFAULT_SERVER_PORT, ROOM_TTL_MINUTES as DEFAULT_ROOM_TTL_MINUTES


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


DATABASE_PATH = os.environ.get("SKYDROP_DATABASE_PATH", "./data/skydrop.db")

UPLOAD_DIR = os.environ.get("SKYDROP_UPLOAD_DIR", "./data/uploads")

SERVER_HOST = os.environ.get("SKYDROP_HOST", "0.0.0.0")

SERVER_PORT = int(os.environ.get("SKYDROP_PORT", str(DEFAULT_SERVER_PORT)))

BASE_URL = os.environ.get("SKYDROP_BASE_URL") or None

ROOM_TTL_MINUTES = int(os.environ.get("SKYDROP_ROOM_TTL_MINUTES", str(DEFAULT_ROOM_TTL_MINUTES)))

ROOM_CODE_MAX_ATTEMPTS = 10

SWEEP_INTERVAL_SECONDS = int(os.environ.get("SKYDROP_SWEEP_INTERVAL_SECONDS", "60"))

# 0 keeps sessions alive until explicit logout
SESSION_TTL_SECONDS = int(os.environ.get("SKYDROP_SESSION_TTL_SECONDS", "0"))

ALLOW_UPLOADS_TO_EXPIRED = _env_bool("SKYDROP_ALLOW_UPLOADS_TO_EXPIRED", True)

MAX_UPLOAD_BYTES = int(os.environ.get("SKYDROP_MAX_UPLOAD_BYTES", str(50 * 1024 * 1024)))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("SKYDROP_CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

DB_BUSY_TIMEOUT_SECONDS = 10.0

BCRYPT_ROUNDS = int(os.environ.get("SKYDROP_BCRYPT_ROUNDS", "12"))
