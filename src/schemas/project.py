"""Project schemas."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, StringConstraints, field_validator

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]

# Opaque structured payload: a JSON object or array
Code = dict[str, Any] | list[Any]


def check_code(value: Any) -> Any:
    """Reject scalars so that ``code`` is always an object, an array or null."""
    if value is not None and not isinstance(value, dict | list):
        raise ValueError("The code field must be an array or object.")
    return value


class ProjectCreate(BaseModel):
    """Create a new project."""

    title: Title
    code: Code | None = None

    @field_validator("code", mode="before")
    @classmethod
    def code_is_structured(cls, value: Any) -> Any:
        return check_code(value)


class ProjectUpdate(BaseModel):
    """Update a project. Fields left out of the request are not touched."""

    title: Title | None = None
    code: Code | None = None

    @field_validator("title", mode="before")
    @classmethod
    def title_not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("The title field is required.")
        return value

    @field_validator("code", mode="before")
    @classmethod
    def code_is_structured(cls, value: Any) -> Any:
        return check_code(value)


class ProjectResponse(BaseModel):
    """Project response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    code: Code | None
    created_at: datetime
    updated_at: datetime
