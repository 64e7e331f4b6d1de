"""Authentication API endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, status

from src.api.dependencies import get_account_service, get_current_token, get_current_user
from src.models.personal_access_token import PersonalAccessToken
from src.models.user import User
from src.schemas.auth import (
    AuthResponse,
    MessageResponse,
    UserLogin,
    UserResponse,
)
from src.services.auth import AccountService

router = APIRouter(prefix="/v1", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: Annotated[dict[str, Any], Body()],
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Register a new user and issue their first token.

    The body is validated by the service so that format errors and already
    taken email/username values are reported in one response.
    """
    user_data = accounts.validate_registration(payload)
    user, token = accounts.register(
        name=user_data.name,
        email=user_data.email,
        username=user_data.username,
        password=user_data.password,
    )

    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Login with an email address or username and a password."""
    user, token = accounts.login(credentials.identity, credentials.password)

    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.get("/user", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return current_user


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: Annotated[PersonalAccessToken, Depends(get_current_token)],
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Revoke the token used for this request."""
    accounts.logout(token)
    return MessageResponse(message="Logged out")
