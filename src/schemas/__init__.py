"""Pydantic schemas for API request/response validation."""

from src.schemas.auth import AuthResponse, MessageResponse, UserLogin, UserRegister, UserResponse
from src.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate

__all__ = [
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "AuthResponse",
    "MessageResponse",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectResponse",
]
