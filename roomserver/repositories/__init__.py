"""Repository layer for data access."""

from roomserver.repositories.user_repository import UserRepository, User
from roomserver.repositories.session_repository import SessionRepository, Session
from roomserver.repositories.room_repository import RoomRepository, Room
from roomserver.repositories.file_repository import FileRepository, FileRecord

__all__ = [
    "UserRepository",
    "User",
    "SessionRepository",
    "Session",
    "RoomRepository",
    "Room",
    "FileRepository",
    "FileRecord",
]
