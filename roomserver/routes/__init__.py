"""API routes package."""

from roomserver.routes.auth_routes import router as auth_router
from roomserver.routes.room_routes import router as room_router
from roomserver.routes.file_routes import router as file_router

__all__ = ["auth_router", "room_router", "file_router"]
