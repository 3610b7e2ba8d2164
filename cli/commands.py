"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from cli.models import (
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
from cli.config import Config
from cli.room_client import RoomClient

logger = get_logger(__name__)


_client: Optional[RoomClient] = None


def get_client() -> RoomClient:
    """
    Get or create global RoomClient instance.

    Returns:
        RoomClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new RoomClient instance")
        config = Config(Path.home() / '.skydrop' / 'config.json')
        _client = RoomClient(config)
    return _client


def handle_signup(cmd: SignupCommand, client: Optional[RoomClient] = None) -> str:
    """
    Handle 'signup' command.

    Args:
        cmd: SignupCommand with email, password and optional display name
        client: Optional RoomClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    if client is None:
        client = get_client()
    return client.signup(cmd.email, cmd.password, cmd.username)


def handle_login(cmd: LoginCommand, client: Optional[RoomClient] = None) -> str:
    """
    Handle 'login' command.

    Args:
        cmd: LoginCommand with email and password
        client: Optional RoomClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    if client is None:
        client = get_client()
    return client.login(cmd.email, cmd.password)


def handle_logout(cmd: LogoutCommand, client: Optional[RoomClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.logout()


def handle_whoami(cmd: WhoAmICommand, client: Optional[RoomClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.whoami()


def handle_create_room(cmd: CreateRoomCommand, client: Optional[RoomClient] = None) -> str:
    """
    Handle 'create' command.

    Args:
        cmd: CreateRoomCommand
        client: Optional RoomClient for dependency injection (testing)

    Returns:
        Room code and password, or an error message
    """
    logger.info("Executing create command")
    if client is None:
        client = get_client()
    return client.create_room()


def handle_join_room(cmd: JoinRoomCommand, client: Optional[RoomClient] = None) -> str:
    """
    Handle 'join' command.

    Args:
        cmd: JoinRoomCommand with room code and room password
        client: Optional RoomClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    logger.info(f"Executing join command: code={cmd.room_code}")
    if client is None:
        client = get_client()
    return client.join_room(cmd.room_code, cmd.room_password)


def handle_show_room(cmd: ShowRoomCommand, client: Optional[RoomClient] = None) -> str:
    """
    Handle 'room' command.

    Args:
        cmd: ShowRoomCommand with optional room id (defaults to current room)
        client: Optional RoomClient for dependency injection (testing)

    Returns:
        Formatted room details
    """
    if client is None:
        client = get_client()
    return client.show_room(cmd.room_id)


def handle_upload(cmd: UploadCommand, client: Optional[RoomClient] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with file_list
        client: Optional RoomClient for dependency injection (testing)

    Returns:
        Success or error message with upload results
    """
    logger.info(f"Executing upload command: {len(cmd.file_list)} files")
    if client is None:
        client = get_client()
    result = client.upload_files(list(cmd.file_list))
    logger.debug("Upload command completed")
    return result


def handle_download(cmd: DownloadCommand, client: Optional[RoomClient] = None) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with locator and optional output_path
        client: Optional RoomClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    if client is None:
        client = get_client()
    return client.download(cmd.locator, cmd.output_path)
