"""Pydantic schemas for API requests and responses."""

from roomserver.schemas.auth import (
    SignupRequest,
    SignupResponse,
    LoginRequest,
    LoginResponse,
    UserResponse,
)
from roomserver.schemas.rooms import (
    JoinRoomRequest,
    RoomResponse,
    RoomDetailResponse,
    FileRecordResponse,
    RejectedFileResponse,
    UploadResponse,
)
from roomserver.schemas.common import ErrorResponse, MessageResponse

__all__ = [
    "SignupRequest",
    "SignupResponse",
    "LoginRequest",
    "LoginResponse",
    "UserResponse",
    "JoinRoomRequest",
    "RoomResponse",
    "RoomDetailResponse",
    "FileRecordResponse",
    "RejectedFileResponse",
    "UploadResponse",
    "ErrorResponse",
    "MessageResponse",
]
