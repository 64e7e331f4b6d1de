"""Project API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from src.api.dependencies import get_current_user, get_project_service
from src.models.project import Project
from src.models.user import User
from src.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from src.services.project_service import ProjectService

router = APIRouter(prefix="/v1/projects", tags=["projects"])


def get_owned_project(
    project_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    projects: Annotated[ProjectService, Depends(get_project_service)],
) -> Project:
    """Resolve the path id to a project the current user owns.

    Runs before the request body is validated, so a foreign project is
    rejected with 403 regardless of what the caller sent.
    """
    return projects.get_owned(project_id, current_user)


@router.get("", response_model=list[ProjectResponse])
async def get_projects(
    current_user: Annotated[User, Depends(get_current_user)],
    projects: Annotated[ProjectService, Depends(get_project_service)],
):
    """Get all projects owned by the current user, newest first."""
    return projects.list_for_user(current_user)


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    projects: Annotated[ProjectService, Depends(get_project_service)],
):
    """Create a new project."""
    return projects.create(current_user, project_data.title, project_data.code)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project: Annotated[Project, Depends(get_owned_project)],
):
    """Get a specific project."""
    return project


@router.put("/{project_id}", response_model=ProjectResponse)
@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_data: ProjectUpdate,
    project: Annotated[Project, Depends(get_owned_project)],
    projects: Annotated[ProjectService, Depends(get_project_service)],
):
    """Update a project's title and/or code."""
    return projects.update(project, project_data.model_dump(exclude_unset=True))


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project: Annotated[Project, Depends(get_owned_project)],
    projects: Annotated[ProjectService, Depends(get_project_service)],
):
    """Permanently delete a project."""
    projects.delete(project)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
