"""Authentication schemas."""

import re
from datetime import datetime
from typing import Annotated

from email_validator import EmailNotValidError, validate_email
from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    ValidationInfo,
    field_validator,
)

USERNAME_PATTERN = r"^[A-Za-z0-9_]{3,20}$"

# bcrypt ignores everything past this many bytes
PASSWORD_MAX_BYTES = 72

_username_re = re.compile(USERNAME_PATTERN)

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
Username = Annotated[str, StringConstraints(strip_whitespace=True, pattern=USERNAME_PATTERN)]


def normalize_email(value: str) -> str | None:
    """Return the normalized address, or None when value is not a valid email."""
    try:
        return validate_email(value, check_deliverability=False).normalized
    except EmailNotValidError:
        return None


def is_username(value: str) -> bool:
    return _username_re.match(value) is not None


class UserRegister(BaseModel):
    """User registration request."""

    name: Name
    email: EmailStr = Field(..., max_length=255)
    username: Username
    password: str = Field(..., min_length=8)
    password_confirmation: str

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode()) > PASSWORD_MAX_BYTES:
            raise ValueError(f"The password must not be greater than {PASSWORD_MAX_BYTES} bytes.")
        return value

    @field_validator("password_confirmation")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        password = info.data.get("password")
        if password is not None and value != password:
            raise ValueError("The password field confirmation does not match.")
        return value


class UserLogin(BaseModel):
    """User login request. ``identity`` is either an email address or a username."""

    identity: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1)

    @field_validator("identity")
    @classmethod
    def identity_is_email_or_username(cls, value: str) -> str:
        value = value.strip()
        if normalize_email(value) is None and not is_username(value):
            raise ValueError("The identity must be a valid email address or username.")
        return value


class UserResponse(BaseModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    username: str
    created_at: datetime
    updated_at: datetime


class AuthResponse(BaseModel):
    """Authentication response with token and user info."""

    token: str
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
