"""Pydantic schemas for room and file endpoints."""

from typing import List, Optional

from pydantic import BaseModel

from roomserver.repositories.file_repository import FileRecord
from roomserver.repositories.room_repository import Room
from roomserver.schemas.auth import UserResponse


class JoinRoomRequest(BaseModel):
    """Request model for joining a room."""
    room_code: Optional[str] = None
    room_password: Optional[str] = None


class RoomResponse(BaseModel):
    """Response model for a room; participants are user ids in join order."""
    id: str
    room_code: str
    room_password: str
    host_id: str
    created_at: str
    expires_at: str
    is_active: bool
    participants: List[str]

    @classmethod
    def from_room(cls, room: Room) -> "RoomResponse":
        return cls(
            id=room.room_id,
            room_code=room.room_code,
            room_password=room.room_password,
            host_id=room.host_id,
            created_at=room.created_at.isoformat(),
            expires_at=room.expires_at.isoformat(),
            is_active=room.is_active,
            participants=list(room.participants),
        )


class FileRecordResponse(BaseModel):
    """Response model for one file ledger entry."""
    id: int
    room_id: str
    sender_id: str
    file_name: str
    file_size: int
    file_type: str
    locator: str
    file_url: str
    sent_at: str

    @classmethod
    def from_record(cls, record: FileRecord, base_url: str) -> "FileRecordResponse":
        return cls(
            id=record.file_id,
            room_id=record.room_id,
            sender_id=record.sender_id,
            file_name=record.file_name,
            file_size=record.file_size,
            file_type=record.file_type,
            locator=record.locator,
            file_url=f"{base_url.rstrip('/')}/download/{record.locator}",
            sent_at=record.sent_at.isoformat(),
        )


class RoomDetailResponse(BaseModel):
    """Response model for room polling: room fields plus files and resolved participants."""
    id: str
    room_code: str
    room_password: str
    host_id: str
    created_at: str
    expires_at: str
    is_active: bool
    participants: List[UserResponse]
    files: List[FileRecordResponse]


class RejectedFileResponse(BaseModel):
    file_name: str
    reason: str
    code: Optional[str] = None


class UploadResponse(BaseModel):
    """Response model for multi-file upload."""
    message: str
    files: List[FileRecordResponse]
    failed: List[RejectedFileResponse]
