"""Entry point for the room server."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from roomserver.blob_store import LocalBlobStore
from roomserver.config import CORS_ORIGINS, SERVER_HOST, SERVER_PORT
from roomserver.database import init_database
from roomserver.expiry_sweeper import RoomExpirySweeper
from roomserver.routes.auth_routes import router as auth_router
from roomserver.routes.file_routes import router as file_router
from roomserver.routes.room_routes import router as room_router
from roomserver.schemas.common import ErrorResponse
from roomserver.exceptions import (
    SkyDropError,
    ValidationError,
    FileTooLargeError,
    UnauthorizedError,
    ConflictError,
    NotFoundError,
    StorageFailureError,
)

logger = setup_logging('roomserver')

app = FastAPI(
    title="SkyDrop Room Server",
    description="Short-lived password-protected rooms for exchanging files",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

expiry_sweeper = None


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Initialize storage and start the expiry sweeper on application startup.
    """
    global expiry_sweeper

    logger.info("Room server starting up...")

    init_database()
    LocalBlobStore().ensure_root()
    logger.info("Database and upload directory initialized")

    expiry_sweeper = RoomExpirySweeper()
    await expiry_sweeper.start()


@app.on_event("shutdown")
async def shutdown_event():
    """
    Stop background tasks on application shutdown.
    """
    logger.info("Room server shutting down...")

    if expiry_sweeper:
        await expiry_sweeper.stop()


def _error_response(request: Request, exc: SkyDropError, status_code: int, detail: str = None) -> JSONResponse:
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=detail or str(exc), code=exc.code).model_dump()
    )


@app.exception_handler(FileTooLargeError)
async def file_too_large_handler(request: Request, exc: FileTooLargeError):
    return _error_response(request, exc, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST)


@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError):
    return _error_response(request, exc, status.HTTP_401_UNAUTHORIZED)


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return _error_response(request, exc, status.HTTP_409_CONFLICT)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND)


@app.exception_handler(StorageFailureError)
async def storage_failure_handler(request: Request, exc: StorageFailureError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Storage failure: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(detail="Internal server error", code=exc.code).model_dump()
    )


@app.exception_handler(SkyDropError)
async def skydrop_exception_handler(request: Request, exc: SkyDropError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Unhandled room server error: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(detail="Internal server error", code=SkyDropError.code).model_dump()
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Malformed request [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(detail="Malformed request", code=ValidationError.code).model_dump()
    )


app.include_router(auth_router)
app.include_router(room_router)
app.include_router(file_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "SkyDrop Room Server API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Health check endpoint for container healthchecks.
    """
    return {"status": "healthy", "service": "roomserver"}


@app.get("/ready")
def ready_check():
    """
    Readiness check endpoint.
    Verifies the database answers and the upload directory is writable.
    """
    from roomserver.database import get_db_connection

    try:
        with get_db_connection() as conn:
            conn.execute("SELECT 1 FROM rooms LIMIT 1")
        db_status = "ok"
    except Exception as e:
        logger.warning(f"Readiness check: database unavailable: {e}")
        db_status = "error"

    try:
        LocalBlobStore().ensure_root()
        storage_status = "ok"
    except OSError as e:
        logger.warning(f"Readiness check: upload directory unavailable: {e}")
        storage_status = "error"

    ready = db_status == "ok" and storage_status == "ok"
    status_code = status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        status_code=status_code,
        content={
            "ready": ready,
            "database": db_status,
            "storage": storage_status
        }
    )


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "roomserver.main:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
    )


if __name__ == "__main__":
    main()
