"""Authentication API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from roomserver.auth import get_bearer_token, get_current_user
from roomserver.repositories.user_repository import User
from roomserver.schemas.auth import (
    SignupRequest,
    SignupResponse,
    LoginRequest,
    LoginResponse,
    UserResponse,
)
from roomserver.schemas.common import MessageResponse
from roomserver.services.auth_service import AuthService
from roomserver.services.session_service import SessionService

router = APIRouter(tags=["Authentication"])


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(request: SignupRequest):
    """
    Register a new user account.

    Parameters:
        - email: Unique email address
        - password: User password (hashed before storage)
        - username: Optional display name, defaults to the email's local part

    Raises:
        - 400: Missing email or password
        - 409: Email already registered
    """
    user = AuthService().create_user(request.email, request.password, request.username)
    return SignupResponse(message="User created successfully", user_id=user.user_id)


@router.post("/login", response_model=LoginResponse)
def login(request: LoginRequest):
    """
    Authenticate a user and open a new session.

    Returns:
        - token: Bearer token for subsequent requests
        - user: Public user record

    Raises:
        - 400: Missing email or password
        - 401: Invalid credentials
    """
    user = AuthService().authenticate(request.email, request.password)
    token = SessionService().open_session(user)
    return LoginResponse(message="Logged in successfully", token=token, user=UserResponse.from_user(user))


@router.post("/logout", response_model=MessageResponse)
def logout(token: Optional[str] = Depends(get_bearer_token)):
    """
    Close the caller's session. Always succeeds, even for unknown tokens.
    """
    SessionService().close_session(token)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
def current_user(user: User = Depends(get_current_user)):
    """
    Return the user owning the bearer token.

    Raises:
        - 401: Missing or invalid token
    """
    return UserResponse.from_user(user)
