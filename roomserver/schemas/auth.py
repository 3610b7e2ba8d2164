"""Pydantic schemas for authentication endpoints."""

from typing import Optional

from pydantic import BaseModel

from roomserver.repositories.user_repository import User


class SignupRequest(BaseModel):
    """Request model for user signup. Missing fields are reported as 400 by the service."""
    email: Optional[str] = None
    password: Optional[str] = None
    username: Optional[str] = None


class SignupResponse(BaseModel):
    """Response model for user signup."""
    message: str
    user_id: str


class LoginRequest(BaseModel):
    """Request model for user login."""
    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    """Public view of a user; the credential hash is never returned."""
    id: str
    email: str
    username: str
    created_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.user_id,
            email=user.email,
            username=user.username,
            created_at=user.created_at.isoformat(),
        )


class LoginResponse(BaseModel):
    """Response model for user login."""
    message: str
    token: str
    user: UserResponse
