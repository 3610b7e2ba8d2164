"""Configuration management for the SkyDrop CLI."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from common.constants import DEFAULT_SERVER_PORT
from common.logging_config import get_logger

logger = get_logger(__name__)

SESSION_KEYS = ("token", "user_id", "email")


class Config:
    """Manages CLI configuration and the saved session, stored in a JSON file."""

    DEFAULT_CONFIG = {
        "server_host": os.environ.get("SKYDROP_SERVER_HOST", "localhost"),
        "server_port": int(os.environ.get("SKYDROP_SERVER_PORT", str(DEFAULT_SERVER_PORT))),
        "timeout": 30,
        "max_retries": 3,
        "retry_backoff_multiplier": 2,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.skydrop/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.skydrop' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Unreadable config file {self.config_path}: {e}, using defaults")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError as copy_error:
                    logger.warning(f"Could not back up config file: {copy_error}")
                return self.DEFAULT_CONFIG.copy()

        config = self.DEFAULT_CONFIG.copy()
        self._write(config)
        return config

    def _write(self, data: dict) -> None:
        try:
            with open(self.config_path, 'w') as f:
                json.dump(data, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not write config file {self.config_path}: {e}")

    def save(self) -> None:
        """Save current configuration to file."""
        self._write(self.data)

    def get_token(self) -> Optional[str]:
        return self.data.get('token')

    def set_session(self, token: str, user_id: str, email: str) -> None:
        """
        Store the session returned by login and save to file.

        Args:
            token: Bearer token
            user_id: Id of the logged-in user
            email: Email used to log in
        """
        self.data['token'] = token
        self.data['user_id'] = user_id
        self.data['email'] = email
        self.save()

    def clear_session(self) -> None:
        """Forget the saved session and current room."""
        for key in SESSION_KEYS + ('room_id',):
            self.data.pop(key, None)
        self.save()

    def get_user_id(self) -> Optional[str]:
        return self.data.get('user_id')

    def get_room_id(self) -> Optional[str]:
        return self.data.get('room_id')

    def set_room_id(self, room_id: str) -> None:
        self.data['room_id'] = room_id
        self.save()

    def get_base_url(self) -> str:
        """
        Get server base URL.

        Returns:
            Base URL string (e.g., "http://localhost:3001")
        """
        host = self.data.get('server_host', 'localhost')
        port = self.data.get('server_port', DEFAULT_SERVER_PORT)
        return f"http://{host}:{port}"

    def get_timeout(self) -> int:
        return self.data.get('timeout', 30)

    def get_retry_config(self) -> dict:
        """
        Get retry configuration.

        Returns:
            Dictionary with 'max_retries' and 'retry_backoff_multiplier'
        """
        return {
            'max_retries': self.data.get('max_retries', 3),
            'retry_backoff_multiplier': self.data.get('retry_backoff_multiplier', 2),
        }
