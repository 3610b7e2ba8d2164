"""Room registry: room creation, password-gated joins and expiry."""

from datetime import datetime, timedelta
from typing import Callable, List, Optional
import sqlite3

from common.constants import (
    ROOM_CODE_ALPHABET,
    ROOM_CODE_LENGTH,
    ROOM_PASSWORD_ALPHABET,
    ROOM_PASSWORD_LENGTH,
)
from common.logging_config import get_logger
from roomserver.config import ROOM_CODE_MAX_ATTEMPTS, ROOM_TTL_MINUTES
from roomserver.exceptions import (
    InvalidRoomCredentialsError,
    RoomNotFoundError,
    StorageFailureError,
    UserNotFoundError,
    ValidationError,
)
from roomserver.repositories.room_repository import RoomRepository, Room
from roomserver.repositories.user_repository import UserRepository, User
from roomserver.utils import generate_uuid, random_string, utc_now

logger = get_logger(__name__)


def generate_room_code() -> str:
    return random_string(ROOM_CODE_ALPHABET, ROOM_CODE_LENGTH)


def generate_room_password() -> str:
    return random_string(ROOM_PASSWORD_ALPHABET, ROOM_PASSWORD_LENGTH)


class RoomService:
    def __init__(
        self,
        room_repo: Optional[RoomRepository] = None,
        user_repo: Optional[UserRepository] = None,
        clock: Callable[[], datetime] = utc_now,
        ttl_minutes: Optional[int] = None,
    ):
        self.room_repo = room_repo or RoomRepository()
        self.user_repo = user_repo or UserRepository()
        self.clock = clock
        self.ttl = timedelta(minutes=ROOM_TTL_MINUTES if ttl_minutes is None else ttl_minutes)

    def create_room(self, host_id: str) -> Room:
        try:
            host = self.user_repo.get_by_user_id(host_id)
        except sqlite3.Error as e:
            raise StorageFailureError("Failed to read host user") from e
        if host is None:
            raise UserNotFoundError("Host user not found")

        for attempt in range(ROOM_CODE_MAX_ATTEMPTS):
            created_at = self.clock()
            room_code = generate_room_code()
            room_password = generate_room_password()

            try:
                room = self.room_repo.create_room(
                    room_id=generate_uuid(),
                    room_code=room_code,
                    room_password=room_password,
                    host_id=host_id,
                    created_at=created_at,
                    expires_at=created_at + self.ttl,
                )
            except sqlite3.IntegrityError as e:
                if "room_code" not in str(e):
                    raise StorageFailureError("Failed to store room") from e
                logger.info(f"Room code collision with an active room (attempt {attempt + 1}), retrying")
                continue
            except sqlite3.Error as e:
                raise StorageFailureError("Failed to store room") from e

            logger.info(f"Room created [room_id={room.room_id}] [host_id={host_id}] expires_at={room.expires_at.isoformat()}")
            return room

        logger.error(f"Gave up creating a room after {ROOM_CODE_MAX_ATTEMPTS} code collisions")
        raise StorageFailureError("Could not allocate a unique room code")

    def join_room(self, room_code: Optional[str], room_password: Optional[str], user_id: str) -> Room:
        if not room_code or not room_password:
            raise ValidationError("Room code and password are required")

        try:
            room = self.room_repo.add_participant_by_credentials(
                room_code=room_code,
                room_password=room_password,
                user_id=user_id,
                now=self.clock(),
            )
        except sqlite3.Error as e:
            raise StorageFailureError("Failed to join room") from e

        if room is None:
            logger.warning(f"Join failed: no live room for code {room_code} [user_id={user_id}]")
            raise InvalidRoomCredentialsError("Invalid room code or password")

        return room

    def get_room(self, room_id: str) -> Room:
        try:
            room = self.room_repo.get_by_id(room_id)
            if room is None:
                raise RoomNotFoundError("Room not found")

            if room.is_active and not room.is_live(self.clock()):
                self.room_repo.deactivate_room(room.room_id)
                room.is_active = False
        except sqlite3.Error as e:
            raise StorageFailureError("Failed to read room") from e

        return room

    def list_participants(self, room: Room) -> List[User]:
        try:
            return self.user_repo.get_by_user_ids(room.participants)
        except sqlite3.Error as e:
            raise StorageFailureError("Failed to read participants") from e

    def expire_rooms(self) -> int:
        try:
            count = self.room_repo.deactivate_expired(self.clock())
        except sqlite3.Error as e:
            raise StorageFailureError("Failed to expire rooms") from e

        if count:
            logger.info(f"Deactivated {count} expired room(s)")
        return count
