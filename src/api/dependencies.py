"""FastAPI dependencies for authentication and database."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.database import get_db
from src.exceptions import AuthenticationError
from src.models.personal_access_token import PersonalAccessToken
from src.models.user import User
from src.services.auth import (
    AccountService,
    BcryptPasswordHasher,
    DatabaseTokenService,
    PasswordHasher,
    TokenService,
)
from src.services.project_service import ProjectService

security = HTTPBearer(auto_error=False)


def get_password_hasher() -> PasswordHasher:
    """Get the password hasher."""
    return BcryptPasswordHasher()


def get_token_service(db: Annotated[Session, Depends(get_db)]) -> TokenService:
    """Get the bearer token service."""
    return DatabaseTokenService(db)


def get_current_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> PersonalAccessToken:
    """Resolve the bearer token presented with the request."""
    if credentials is None:
        raise AuthenticationError()

    token = tokens.resolve(credentials.credentials)
    if token is None:
        raise AuthenticationError()

    return token


def get_current_user(
    token: Annotated[PersonalAccessToken, Depends(get_current_token)],
) -> User:
    """Get the user that owns the current bearer token."""
    return token.user


def get_account_service(
    db: Annotated[Session, Depends(get_db)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AccountService:
    """Get account service with dependencies."""
    return AccountService(db, hasher, tokens)


def get_project_service(
    db: Annotated[Session, Depends(get_db)],
) -> ProjectService:
    """Get project service with dependencies."""
    return ProjectService(db)
