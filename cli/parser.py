"""Command parser for CLI input."""

import shlex

from common.constants import ROOM_CODE_LENGTH, ROOM_PASSWORD_LENGTH
from cli.models import (
    CommandRequest,
    CreateRoomCommand,
    DownloadCommand,
    JoinRoomCommand,
    LoginCommand,
    LogoutCommand,
    ShowRoomCommand,
    SignupCommand,
    UploadCommand,
    WhoAmICommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0].lower()
    args = tokens[1:]

    if command_name == "signup":
        return _parse_signup(args)
    elif command_name == "login":
        return _parse_login(args)
    elif command_name == "logout":
        _expect_no_args("logout", args)
        return LogoutCommand()
    elif command_name == "whoami":
        _expect_no_args("whoami", args)
        return WhoAmICommand()
    elif command_name == "create":
        _expect_no_args("create", args)
        return CreateRoomCommand()
    elif command_name == "join":
        return _parse_join(args)
    elif command_name == "room":
        return _parse_room(args)
    elif command_name == "upload":
        return _parse_upload(args)
    elif command_name == "download":
        return _parse_download(args)
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _expect_no_args(command_name: str, args: list[str]) -> None:
    if args:
        raise ParseError(f"{command_name} takes no arguments")


def _parse_signup(args: list[str]) -> SignupCommand:
    """Parse 'signup <email> <password> [name]' command."""
    if len(args) not in (2, 3):
        raise ParseError("signup requires 2 or 3 arguments: <email> <password> [name]")

    email, password = args[0], args[1]
    if "@" not in email:
        raise ParseError(f"Not an email address: {email}")

    username = args[2] if len(args) == 3 else None
    return SignupCommand(email=email, password=password, username=username)


def _parse_login(args: list[str]) -> LoginCommand:
    """Parse 'login <email> <password>' command."""
    if len(args) != 2:
        raise ParseError("login requires exactly 2 arguments: <email> <password>")

    email, password = args
    return LoginCommand(email=email, password=password)


def _parse_join(args: list[str]) -> JoinRoomCommand:
    """Parse 'join <code> <password>' command. Codes are case-insensitive on input."""
    if len(args) != 2:
        raise ParseError("join requires exactly 2 arguments: <code> <password>")

    room_code, room_password = args[0].upper(), args[1]
    if len(room_code) != ROOM_CODE_LENGTH or not room_code.isalnum():
        raise ParseError(f"Room code must be {ROOM_CODE_LENGTH} letters or digits")
    if len(room_password) != ROOM_PASSWORD_LENGTH or not room_password.isalnum():
        raise ParseError(f"Room password must be {ROOM_PASSWORD_LENGTH} letters or digits")

    return JoinRoomCommand(room_code=room_code, room_password=room_password)


def _parse_room(args: list[str]) -> ShowRoomCommand:
    """Parse 'room [room_id]' command."""
    if len(args) > 1:
        raise ParseError("room takes at most 1 argument: [room_id]")

    return ShowRoomCommand(room_id=args[0] if args else None)


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <path> [path ...]' command."""
    if not args:
        raise ParseError("upload requires at least one file")

    return UploadCommand(file_list=tuple(args))


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <locator> [output_path]' command."""
    if not 1 <= len(args) <= 2:
        raise ParseError("download requires 1 or 2 arguments: <locator> [output_path]")

    locator = args[0]
    output_path = args[1] if len(args) > 1 else None

    return DownloadCommand(locator=locator, output_path=output_path)
