"""Stores uploaded file bytes on local disk under opaque locators."""

import os
import re
import secrets
import time
from pathlib import Path
from typing import BinaryIO, Optional, Tuple

from common.logging_config import get_logger
from roomserver.config import UPLOAD_DIR
from roomserver.exceptions import BlobNotFoundError, FileTooLargeError, StorageFailureError

logger = get_logger(__name__)

COPY_PIECE_SIZE = 64 * 1024

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_LOCATOR_PATTERN = re.compile(r"^\d+-[0-9a-f]{8}-[A-Za-z0-9._-]+$")


def sanitize_file_name(file_name: str) -> str:
    """
    Reduce a client-supplied file name to a safe single path component.

    Args:
        file_name: Original name from the multipart part

    Returns:
        Name containing only letters, digits, '.', '_' and '-'
    """
    base = os.path.basename(file_name.replace("\\", "/"))
    cleaned = _UNSAFE_NAME_CHARS.sub("_", base).strip("._")
    return cleaned[:120] or "file"


class LocalBlobStore:
    """
    Directory-backed blob store.

    Locators have the form "<epoch-ms>-<8 hex>-<sanitised name>" and are
    the file names inside the root directory.
    """

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root if root is not None else UPLOAD_DIR)

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def new_locator(self, file_name: str) -> str:
        return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}-{sanitize_file_name(file_name)}"

    def put(self, file_name: str, stream: BinaryIO, max_bytes: Optional[int] = None) -> Tuple[str, int]:
        """
        Copy a stream into a new blob.

        Args:
            file_name: Original file name, used as locator suffix
            stream: Readable binary stream positioned at the start of the data
            max_bytes: Reject the blob once it grows past this many bytes

        Returns:
            Tuple of (locator, bytes written)

        Raises:
            FileTooLargeError: If max_bytes is exceeded (the partial blob is removed)
            StorageFailureError: If the disk write fails
        """
        locator = self.new_locator(file_name)
        path = self.root / locator
        written = 0

        try:
            self.ensure_root()
            with open(path, "xb") as out:
                while True:
                    piece = stream.read(COPY_PIECE_SIZE)
                    if not piece:
                        break
                    written += len(piece)
                    if max_bytes is not None and written > max_bytes:
                        raise FileTooLargeError(f"File exceeds the {max_bytes} byte limit")
                    out.write(piece)
        except FileTooLargeError:
            self._remove_quietly(path)
            logger.warning(f"Rejected oversized upload {file_name}: more than {max_bytes} bytes")
            raise
        except OSError as e:
            self._remove_quietly(path)
            logger.error(f"Blob write failed for {file_name}: {e}", exc_info=True)
            raise StorageFailureError("Failed to store file") from e
        except Exception:
            self._remove_quietly(path)
            raise

        logger.debug(f"Stored blob {locator} ({written} bytes)")
        return locator, written

    def resolve(self, locator: str) -> Path:
        """
        Map a locator back to its file.

        Raises:
            BlobNotFoundError: If the locator is malformed, escapes the root, or the blob is gone
        """
        if not _LOCATOR_PATTERN.match(locator):
            raise BlobNotFoundError("File not found")

        root = self.root.resolve()
        path = (root / locator).resolve()
        try:
            path.relative_to(root)
        except ValueError:
            raise BlobNotFoundError("File not found")

        if not path.is_file():
            raise BlobNotFoundError("File not found")
        return path

    def delete(self, locator: str) -> bool:
        try:
            path = self.resolve(locator)
        except BlobNotFoundError:
            return False
        return self._remove_quietly(path)

    def _remove_quietly(self, path: Path) -> bool:
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Could not remove blob {path.name}: {e}")
            return False
