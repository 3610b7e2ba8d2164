"""Common schemas used across multiple endpoints."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Response model for errors."""
    detail: str
    code: str


class MessageResponse(BaseModel):
    """Response model for endpoints that only acknowledge."""
    message: str
