"""Room lifecycle API routes."""

from fastapi import APIRouter, Depends, Request, status

from roomserver.auth import get_current_user
from roomserver.config import BASE_URL
from roomserver.repositories.user_repository import User
from roomserver.schemas.auth import UserResponse
from roomserver.schemas.rooms import (
    FileRecordResponse,
    JoinRoomRequest,
    RoomDetailResponse,
    RoomResponse,
)
from roomserver.services.file_service import FileService
from roomserver.services.room_service import RoomService

router = APIRouter(prefix="/rooms", tags=["Rooms"])


def public_base_url(request: Request) -> str:
    return BASE_URL or str(request.base_url)


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room(user: User = Depends(get_current_user)):
    """
    Create a room hosted by the caller.

    Returns:
        - room_code / room_password: Credentials to share with other participants
        - expires_at: Fixed deadline, 30 minutes after creation
    """
    room = RoomService().create_room(user.user_id)
    return RoomResponse.from_room(room)


@router.post("/join", response_model=RoomResponse)
def join_room(request: JoinRoomRequest, user: User = Depends(get_current_user)):
    """
    Join the live room matching a code and password. Rejoining is a no-op success.

    Raises:
        - 400: Missing room code or password
        - 404: No live room matches (code and password mismatches look the same)
    """
    room = RoomService().join_room(request.room_code, request.room_password, user.user_id)
    return RoomResponse.from_room(room)


@router.get("/{room_id}", response_model=RoomDetailResponse)
def get_room(room_id: str, request: Request, user: User = Depends(get_current_user)):
    """
    Poll a room: its state, files and participants. Expired rooms stay readable.

    Raises:
        - 404: Unknown room
    """
    room_service = RoomService()
    room = room_service.get_room(room_id)
    records = FileService().list_for_room(room.room_id)
    participants = room_service.list_participants(room)
    base_url = public_base_url(request)

    return RoomDetailResponse(
        id=room.room_id,
        room_code=room.room_code,
        room_password=room.room_password,
        host_id=room.host_id,
        created_at=room.created_at.isoformat(),
        expires_at=room.expires_at.isoformat(),
        is_active=room.is_active,
        participants=[UserResponse.from_user(p) for p in participants],
        files=[FileRecordResponse.from_record(r, base_url) for r in records],
    )
