"""Tests for the room registry: creation, joins and expiry."""

import sqlite3
import threading
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from common.constants import ROOM_CODE_ALPHABET, ROOM_PASSWORD_ALPHABET
from roomserver.exceptions import (
    InvalidRoomCredentialsError,
    RoomNotFoundError,
    StorageFailureError,
    UserNotFoundError,
    ValidationError,
)
from roomserver.repositories.room_repository import RoomRepository
from roomserver.services.auth_service import AuthService
from roomserver.services.room_service import RoomService, generate_room_code, generate_room_password


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def room_service(test_db, clock):
    return RoomService(clock=clock, ttl_minutes=30)


@pytest.fixture
def users(test_db):
    auth = AuthService()
    return [
        auth.create_user("host@example.com", "secret123", "host"),
        auth.create_user("guest@example.com", "secret123", "guest"),
        auth.create_user("third@example.com", "secret123", "third"),
    ]


class TestCredentialGeneration:
    def test_room_code_shape(self):
        code = generate_room_code()
        assert len(code) == 6
        assert all(c in ROOM_CODE_ALPHABET for c in code)
        assert code == code.upper()

    def test_room_password_shape(self):
        password = generate_room_password()
        assert len(password) == 8
        assert all(c in ROOM_PASSWORD_ALPHABET for c in password)


class TestCreateRoom:
    def test_create_room(self, room_service, users, clock):
        host = users[0]
        room = room_service.create_room(host.user_id)

        assert room.host_id == host.user_id
        assert room.participants == [host.user_id]
        assert room.is_active
        assert room.created_at == clock.now
        assert room.expires_at == clock.now + timedelta(minutes=30)
        assert len(room.room_code) == 6
        assert len(room.room_password) == 8

    def test_unknown_host(self, room_service):
        with pytest.raises(UserNotFoundError):
            room_service.create_room("ghost")

    def test_retries_on_active_code_collision(self, room_service, users, monkeypatch):
        codes = iter(["SAME01", "SAME01", "OTHER1"])
        monkeypatch.setattr("roomserver.services.room_service.generate_room_code", lambda: next(codes))

        first = room_service.create_room(users[0].user_id)
        second = room_service.create_room(users[1].user_id)

        assert first.room_code == "SAME01"
        assert second.room_code == "OTHER1"

    def test_gives_up_after_max_attempts(self, room_service, users, monkeypatch):
        monkeypatch.setattr("roomserver.services.room_service.generate_room_code", lambda: "SAME01")
        room_service.create_room(users[0].user_id)

        with pytest.raises(StorageFailureError):
            room_service.create_room(users[1].user_id)

    def test_code_of_expired_room_can_be_reused(self, room_service, users, clock, monkeypatch):
        monkeypatch.setattr("roomserver.services.room_service.generate_room_code", lambda: "SAME01")
        old = room_service.create_room(users[0].user_id)

        clock.advance(minutes=31)
        new = room_service.create_room(users[1].user_id)

        assert new.room_code == "SAME01"
        assert new.room_id != old.room_id
        assert RoomRepository.get_by_id(old.room_id).is_active is False


class TestJoinRoom:
    def test_join(self, room_service, users):
        host, guest = users[0], users[1]
        room = room_service.create_room(host.user_id)

        joined = room_service.join_room(room.room_code, room.room_password, guest.user_id)

        assert joined.room_id == room.room_id
        assert joined.participants == [host.user_id, guest.user_id]

    def test_rejoin_is_idempotent(self, room_service, users):
        host, guest = users[0], users[1]
        room = room_service.create_room(host.user_id)

        room_service.join_room(room.room_code, room.room_password, guest.user_id)
        joined = room_service.join_room(room.room_code, room.room_password, guest.user_id)

        assert joined.participants == [host.user_id, guest.user_id]

    def test_host_join_is_noop(self, room_service, users):
        host = users[0]
        room = room_service.create_room(host.user_id)

        joined = room_service.join_room(room.room_code, room.room_password, host.user_id)
        assert joined.participants == [host.user_id]

    def test_wrong_password(self, room_service, users):
        room = room_service.create_room(users[0].user_id)

        with pytest.raises(InvalidRoomCredentialsError) as exc_info:
            room_service.join_room(room.room_code, "WRONGPWD", users[1].user_id)
        assert exc_info.value.code == "INVALID_ROOM_CREDENTIALS"

    def test_unknown_code_looks_like_wrong_password(self, room_service, users):
        room = room_service.create_room(users[0].user_id)

        with pytest.raises(InvalidRoomCredentialsError, match="Invalid room code or password"):
            room_service.join_room("ZZZZZZ", room.room_password, users[1].user_id)

    def test_join_after_expiry(self, room_service, users, clock):
        room = room_service.create_room(users[0].user_id)
        clock.advance(minutes=30, seconds=1)

        with pytest.raises(InvalidRoomCredentialsError):
            room_service.join_room(room.room_code, room.room_password, users[1].user_id)

    def test_join_just_before_deadline(self, room_service, users, clock):
        room = room_service.create_room(users[0].user_id)
        clock.advance(minutes=29, seconds=59)

        joined = room_service.join_room(room.room_code, room.room_password, users[1].user_id)
        assert users[1].user_id in joined.participants

    @pytest.mark.parametrize("code,password", [(None, "Pass1234"), ("ABC123", None), ("", "")])
    def test_missing_credentials(self, room_service, users, code, password):
        with pytest.raises(ValidationError):
            room_service.join_room(code, password, users[1].user_id)

    def test_concurrent_joins_lose_no_participant(self, room_service, users):
        room = room_service.create_room(users[0].user_id)
        auth = AuthService()
        guests = [auth.create_user(f"guest{i}@example.com", "secret123") for i in range(8)]
        errors = []

        def join(user_id):
            try:
                room_service.join_room(room.room_code, room.room_password, user_id)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=join, args=(g.user_id,)) for g in guests]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        participants = room_service.get_room(room.room_id).participants
        assert len(participants) == 9
        assert len(set(participants)) == 9
        assert participants[0] == users[0].user_id


class TestRoomReads:
    def test_get_room(self, room_service, users):
        room = room_service.create_room(users[0].user_id)
        fetched = room_service.get_room(room.room_id)

        assert fetched.room_code == room.room_code
        assert fetched.is_active

    def test_get_unknown_room(self, room_service):
        with pytest.raises(RoomNotFoundError):
            room_service.get_room("missing")

    def test_get_room_marks_expired_room_inactive(self, room_service, users, clock):
        room = room_service.create_room(users[0].user_id)
        clock.advance(minutes=31)

        fetched = room_service.get_room(room.room_id)
        assert fetched.is_active is False
        assert RoomRepository.get_by_id(room.room_id).is_active is False

    def test_list_participants_in_join_order(self, room_service, users):
        host, guest, third = users
        room = room_service.create_room(host.user_id)
        room_service.join_room(room.room_code, room.room_password, third.user_id)
        room = room_service.join_room(room.room_code, room.room_password, guest.user_id)

        names = [u.username for u in room_service.list_participants(room)]
        assert names == ["host", "third", "guest"]


class TestExpireRooms:
    def test_expire_rooms(self, room_service, users, clock):
        expiring = room_service.create_room(users[0].user_id)
        clock.advance(minutes=20)
        live = room_service.create_room(users[1].user_id)
        clock.advance(minutes=11)

        assert room_service.expire_rooms() == 1
        assert RoomRepository.get_by_id(expiring.room_id).is_active is False
        assert RoomRepository.get_by_id(live.room_id).is_active is True

    def test_expire_rooms_is_idempotent(self, room_service, users, clock):
        room_service.create_room(users[0].user_id)
        clock.advance(minutes=31)

        assert room_service.expire_rooms() == 1
        assert room_service.expire_rooms() == 0


class TestStorageFailures:
    @pytest.fixture
    def locked_repo(self):
        repo = Mock(spec=RoomRepository)
        error = sqlite3.OperationalError("database is locked")
        repo.get_by_id.side_effect = error
        repo.deactivate_expired.side_effect = error
        return repo

    def test_get_room_wraps_database_error(self, test_db, locked_repo, clock):
        service = RoomService(room_repo=locked_repo, clock=clock)
        with pytest.raises(StorageFailureError):
            service.get_room("room-1")

    def test_expire_rooms_wraps_database_error(self, test_db, locked_repo, clock):
        service = RoomService(room_repo=locked_repo, clock=clock)
        with pytest.raises(StorageFailureError):
            service.expire_rooms()

    def test_list_participants_wraps_database_error(self, room_service, users, monkeypatch):
        room = room_service.create_room(users[0].user_id)

        def locked(user_ids):
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(room_service.user_repo, "get_by_user_ids", locked)
        with pytest.raises(StorageFailureError):
            room_service.list_participants(room)
