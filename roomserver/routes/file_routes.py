"""File upload and download API routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import FileResponse

from common.types import IncomingFile
from roomserver.auth import get_current_user
from roomserver.repositories.user_repository import User
from roomserver.routes.room_routes import public_base_url
from roomserver.schemas.rooms import FileRecordResponse, RejectedFileResponse, UploadResponse
from roomserver.services.file_service import DEFAULT_MIME_TYPE, FileService

router = APIRouter(tags=["Files"])


@router.post("/rooms/{room_id}/upload", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
def upload_files(
    room_id: str,
    request: Request,
    files: Optional[List[UploadFile]] = File(None),
    user: User = Depends(get_current_user),
):
    """
    Upload one or more files into a room (multipart field 'files').

    Each accepted file gets its own ledger entry; files that fail are listed
    under 'failed' without affecting the others.

    Raises:
        - 400: No files in the request
        - 404: Unknown room
        - 413: Every file exceeded the size limit
        - 500: Storage failure for every file
    """
    incoming = [
        IncomingFile(
            file_name=upload.filename or "file",
            mime_type=upload.content_type or DEFAULT_MIME_TYPE,
            stream=upload.file,
        )
        for upload in (files or [])
    ]

    result = FileService().upload_files(room_id, user.user_id, incoming)
    base_url = public_base_url(request)

    return UploadResponse(
        message="Files uploaded successfully",
        files=[FileRecordResponse.from_record(r, base_url) for r in result.recorded],
        failed=[
            RejectedFileResponse(file_name=r.file_name, reason=r.reason, code=r.code)
            for r in result.rejected
        ],
    )


@router.get("/download/{locator}")
def download_file(locator: str):
    """
    Stream a stored file by its locator. No session is required.

    Raises:
        - 404: Unknown or malformed locator
    """
    path, download_name = FileService().open_download(locator)
    return FileResponse(path, filename=download_name)
