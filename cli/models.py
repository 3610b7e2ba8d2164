"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal, Optional


@dataclass(frozen=True)
class SignupCommand:
    """Create a new account."""

    email: str
    password: str
    username: Optional[str] = None
    command: Literal["signup"] = "signup"


@dataclass(frozen=True)
class LoginCommand:
    """Login with email and password."""

    email: str
    password: str
    command: Literal["login"] = "login"


@dataclass(frozen=True)
class LogoutCommand:
    command: Literal["logout"] = "logout"


@dataclass(frozen=True)
class WhoAmICommand:
    command: Literal["whoami"] = "whoami"


@dataclass(frozen=True)
class CreateRoomCommand:
    command: Literal["create"] = "create"


@dataclass(frozen=True)
class JoinRoomCommand:
    """Join a room by code and password."""

    room_code: str
    room_password: str
    command: Literal["join"] = "join"


@dataclass(frozen=True)
class ShowRoomCommand:
    """Show a room; defaults to the current room."""

    room_id: Optional[str] = None
    command: Literal["room"] = "room"


@dataclass(frozen=True)
class UploadCommand:
    """Upload files into the current room."""

    file_list: tuple[str, ...]
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class DownloadCommand:
    """Download a file by locator."""

    locator: str
    output_path: Optional[str] = None
    command: Literal["download"] = "download"


CommandRequest = (
    SignupCommand
    | LoginCommand
    | LogoutCommand
    | WhoAmICommand
    | CreateRoomCommand
    | JoinRoomCommand
    | ShowRoomCommand
    | UploadCommand
    | DownloadCommand
)
