"""SQLAlchemy models."""

from src.models.personal_access_token import PersonalAccessToken
from src.models.project import Project
from src.models.user import User

__all__ = [
    "User",
    "PersonalAccessToken",
    "Project",
]
