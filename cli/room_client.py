"""HTTP client for communicating with the room server."""

import mimetypes
import os
import re
import sys
import time
import uuid
from contextlib import ExitStack
from pathlib import Path
from typing import Optional
from urllib.parse import unquote

import httpx

from common.logging_config import get_logger
from cli.config import Config
from cli.constants import DEFAULT_DOWNLOAD_DIR, GREEN, RESET
from cli.utils import format_file_size, format_time_left

logger = get_logger(__name__)

_DISPOSITION_UTF8 = re.compile(r"filename\*=utf-8''([^;]+)", re.IGNORECASE)
_DISPOSITION_PLAIN = re.compile(r'filename="([^"]+)"', re.IGNORECASE)


def filename_from_disposition(header: Optional[str], fallback: str) -> str:
    """
    Pick the download name out of a Content-Disposition header.

    Args:
        header: Header value, may be None
        fallback: Name to use when the header carries none

    Returns:
        Bare file name (directory components are dropped)
    """
    if header:
        match = _DISPOSITION_UTF8.search(header) or _DISPOSITION_PLAIN.search(header)
        if match:
            return os.path.basename(unquote(match.group(1))) or fallback
    return fallback


class RoomClient:
    """HTTP client for the room server API with retry logic and error handling."""

    def __init__(self, config: Config):
        """
        Initialize room client.

        Args:
            config: Configuration instance
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout()
        )
        self.request_id = None
        logger.info(f"Initialized RoomClient [base_url={config.get_base_url()}]")

    def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic on 5xx errors and network failures.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path
            max_retries: Max retry attempts (uses config default if None)
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object

        Raises:
            ConnectionError: If max retries exceeded or connection fails
        """
        retry_config = self.config.get_retry_config()
        max_retries = max_retries if max_retries is not None else retry_config['max_retries']
        backoff = retry_config['retry_backoff_multiplier']

        last_exception = None

        self.request_id = str(uuid.uuid4())
        kwargs.setdefault('headers', {})
        kwargs['headers']['X-Request-ID'] = self.request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(method, endpoint, **kwargs)

                logger.debug(
                    f"Response received: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                )

                if response.status_code >= 500 and attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} status={response.status_code}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue

                if 400 <= response.status_code < 500:
                    logger.warning(
                        f"Client error: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                    )

                return response

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue
                logger.error(
                    f"Network error (max retries exceeded): {method} {endpoint} error={e} [request_id={self.request_id}]"
                )

        if isinstance(last_exception, httpx.TimeoutException):
            raise ConnectionError("Request timed out. Server may be overloaded.")
        raise ConnectionError("Cannot connect to room server. Is it running?")

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map HTTP errors to user-friendly messages.

        Args:
            response: HTTP response object

        Returns:
            User-friendly error message
        """
        try:
            error_data = response.json()
            detail = error_data.get('detail', 'Unknown error')
            code = error_data.get('code', 'UNKNOWN')
        except ValueError:
            detail = response.text if response.text else 'Unknown error'
            code = 'UNKNOWN'

        error_messages = {
            'UNAUTHORIZED': 'Not logged in or session ended. Please run: login <email> <password>',
            'USER_ALREADY_EXISTS': 'Email already registered. Try logging in instead.',
            'INVALID_CREDENTIALS': 'Invalid email or password.',
            'INVALID_ROOM_CREDENTIALS': 'Invalid room code or password (or the room has expired).',
            'ROOM_NOT_FOUND': 'Room not found.',
            'ROOM_EXPIRED': 'The room has expired.',
            'FILE_NOT_FOUND': 'File not found on server.',
            'FILE_TOO_LARGE': 'File too large for the server.',
            'STORAGE_FAILURE': 'Server storage failure. Please try again later.',
        }

        if code in error_messages:
            return error_messages[code]

        status_messages = {
            400: 'Bad request',
            401: 'Not authenticated',
            404: 'Not found',
            409: 'Conflict',
            413: 'File too large',
            500: 'Server error',
            503: 'Service unavailable',
        }

        message = status_messages.get(response.status_code, detail)
        return f"{message} (Code: {code})" if code != 'UNKNOWN' else message

    def _get_auth_header(self) -> dict:
        """
        Get Authorization header with the saved session token.

        Raises:
            ValueError: If no session token is saved
        """
        token = self.config.get_token()
        if not token:
            raise ValueError("Not logged in. Please run: login <email> <password>")
        return {'Authorization': f'Bearer {token}'}

    def signup(self, email: str, password: str, username: Optional[str] = None) -> str:
        logger.info(f"Attempting to sign up: {email}")
        payload = {'email': email, 'password': password}
        if username:
            payload['username'] = username

        try:
            response = self._request_with_retry('POST', '/signup', json=payload)
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code == 201:
            return f"Account created for {email}.\nNow run: login {email} <password>"
        return f"Signup failed: {self._format_error(response)}"

    def login(self, email: str, password: str) -> str:
        logger.info(f"Attempting to login: {email}")
        try:
            response = self._request_with_retry(
                'POST', '/login', json={'email': email, 'password': password}
            )
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Login failed: {self._format_error(response)}"

        data = response.json()
        user = data['user']
        self.config.set_session(data['token'], user['id'], user['email'])
        logger.info(f"Login successful [user_id={user['id']}]")
        return f"Login successful! Welcome, {user['username']}.\nSession saved to config."

    def logout(self) -> str:
        token = self.config.get_token()
        if token:
            try:
                self._request_with_retry(
                    'POST', '/logout', max_retries=0,
                    headers={'Authorization': f'Bearer {token}'}
                )
            except ConnectionError as e:
                logger.warning(f"Logout request failed, clearing local session anyway: {e}")

        self.config.clear_session()
        return "Logged out."

    def whoami(self) -> str:
        try:
            headers = self._get_auth_header()
            response = self._request_with_retry('GET', '/me', headers=headers)
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        user = response.json()
        return f"{user['username']} <{user['email']}> (ID: {user['id']})"

    def create_room(self) -> str:
        try:
            headers = self._get_auth_header()
            response = self._request_with_retry('POST', '/rooms', headers=headers)
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        if response.status_code != 201:
            return f"Could not create room: {self._format_error(response)}"

        room = response.json()
        self.config.set_room_id(room['id'])
        return (
            f"Room created!\n"
            f"  Code:     {room['room_code']}\n"
            f"  Password: {room['room_password']}\n"
            f"  Expires:  in {format_time_left(room['expires_at'])}\n"
            f"Share the code and password with the other participants."
        )

    def join_room(self, room_code: str, room_password: str) -> str:
        try:
            headers = self._get_auth_header()
            response = self._request_with_retry(
                'POST', '/rooms/join', headers=headers,
                json={'room_code': room_code, 'room_password': room_password}
            )
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Could not join room: {self._format_error(response)}"

        room = response.json()
        self.config.set_room_id(room['id'])
        return f"Joined room {room['room_code']} ({len(room['participants'])} participant(s))."

    def show_room(self, room_id: Optional[str] = None) -> str:
        room_id = room_id or self.config.get_room_id()
        if not room_id:
            return "Error: No current room. Create or join one first."

        try:
            headers = self._get_auth_header()
            response = self._request_with_retry('GET', f'/rooms/{room_id}', headers=headers)
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        room = response.json()
        time_left = format_time_left(room['expires_at']) if room['is_active'] else "Expired"

        lines = [
            f"Room {room['room_code']} (password: {room['room_password']})",
            f"Time left: {time_left}",
            f"Participants ({len(room['participants'])}):",
        ]
        for participant in room['participants']:
            host_marker = " [host]" if participant['id'] == room['host_id'] else ""
            lines.append(f"  - {participant['username']}{host_marker}")

        lines.append(f"Files ({len(room['files'])}):")
        if not room['files']:
            lines.append("  (none yet)")
        for record in room['files']:
            lines.append(
                f"  - {record['file_name']} ({format_file_size(record['file_size'])}, "
                f"{record['file_type']}) locator: {record['locator']}"
            )

        return "\n".join(lines)

    def upload_files(self, file_paths: list[str]) -> str:
        room_id = self.config.get_room_id()
        if not room_id:
            return "Error: No current room. Create or join one first."

        try:
            headers = self._get_auth_header()
        except ValueError as e:
            return f"Error: {e}"

        results = []
        valid_paths = []
        for file_path in file_paths:
            path = Path(file_path).expanduser()
            if not path.is_file():
                results.append(f"Error: File not found: {file_path}")
                continue
            valid_paths.append(path)

        if not valid_paths:
            return "\n".join(results)

        with ExitStack() as stack:
            multipart = []
            for path in valid_paths:
                mime_type = mimetypes.guess_type(path.name)[0] or 'application/octet-stream'
                handle = stack.enter_context(open(path, 'rb'))
                multipart.append(('files', (path.name, handle, mime_type)))

            try:
                response = self._request_with_retry(
                    'POST', f'/rooms/{room_id}/upload',
                    max_retries=0, headers=headers, files=multipart
                )
            except ConnectionError as e:
                results.append(f"Error: {e}")
                return "\n".join(results)

        if response.status_code != 201:
            results.append(f"Upload failed: {self._format_error(response)}")
            return "\n".join(results)

        data = response.json()
        for record in data['files']:
            results.append(f"Uploaded: {record['file_name']} ({format_file_size(record['file_size'])})")
        for failure in data.get('failed', []):
            results.append(f"Failed: {failure['file_name']} ({failure['reason']})")

        return "\n".join(results)

    def download(self, locator: str, output_path: Optional[str] = None) -> str:
        try:
            with self.session.stream('GET', f'/download/{locator}') as response:
                if response.status_code != 200:
                    response.read()
                    return f"Download failed: {self._format_error(response)}"

                file_name = filename_from_disposition(
                    response.headers.get('content-disposition'), locator
                )
                output_file = Path(output_path) if output_path else Path(DEFAULT_DOWNLOAD_DIR) / file_name
                if output_file.is_dir():
                    output_file = output_file / file_name
                output_file.parent.mkdir(parents=True, exist_ok=True)

                total_size = int(response.headers.get('Content-Length', 0))
                downloaded = 0
                with open(output_file, 'wb') as f:
                    for chunk in response.iter_bytes(chunk_size=8192):
                        f.write(chunk)
                        downloaded += len(chunk)

                        if total_size > 0:
                            progress = (downloaded / total_size) * 100
                            sys.stdout.write(
                                f"\rDownloading {file_name}: {format_file_size(downloaded)} / "
                                f"{format_file_size(total_size)} ({GREEN}{progress:.1f}%{RESET})"
                            )
                            sys.stdout.flush()

                sys.stdout.write('\n')
                sys.stdout.flush()
        except (httpx.ConnectError, httpx.TimeoutException) as e:
            logger.error(f"Network error downloading {locator}: {e}")
            return "Error: Cannot connect to room server. Is it running?"
        except OSError as e:
            return f"Error: Could not write file: {e}"

        return f"Downloaded: {file_name} ({format_file_size(downloaded)})\nSaved to: {output_file.absolute()}"

    def close(self) -> None:
        self.session.close()
