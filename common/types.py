"""Shared data type definitions passed between the HTTP layer and services."""

from dataclasses import dataclass
from typing import BinaryIO, Optional


@dataclass(frozen=True)
class IncomingFile:
    """
    One multipart file part, already separated from the request.
    """
    file_name: str
    mime_type: str
    stream: BinaryIO


@dataclass(frozen=True)
class RejectedFile:
    """
    A file part that was not accepted into the ledger, with the reason.
    """
    file_name: str
    reason: str
    code: Optional[str] = None
