"""Project-wide constants shared by the room server and the CLI."""

import string

ROOM_CODE_LENGTH: int = 6
ROOM_CODE_ALPHABET: str = string.ascii_uppercase + string.digits

ROOM_PASSWORD_LENGTH: int = 8
ROOM_PASSWORD_ALPHABET: str = string.ascii_letters + string.digits

ROOM_TTL_MINUTES: int = 30

SESSION_TOKEN_BYTES: int = 32

DEFAULT_SERVER_PORT: int = 3001
