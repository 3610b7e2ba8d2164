"""Service layer for business logic."""

from roomserver.services.auth_service import AuthService
from roomserver.services.session_service import SessionService
from roomserver.services.room_service import RoomService
from roomserver.services.file_service import FileService, UploadResult

__all__ = [
    "AuthService",
    "SessionService",
    "RoomService",
    "FileService",
    "UploadResult",
]
