"""Project service for owner-scoped CRUD."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from src.database import is_row_id
from src.exceptions import AuthorizationError, NotFoundError
from src.models.project import Project
from src.models.user import User

logger = logging.getLogger(__name__)


def authorize_owner(resource_owner_id: int, caller_id: int) -> None:
    """Raise AuthorizationError unless the caller owns the resource."""
    if resource_owner_id != caller_id:
        raise AuthorizationError("Not authorized")


class ProjectService:
    """Service for project operations. Every record-level call goes through get_owned."""

    def __init__(self, db: Session):
        self.db = db

    def list_for_user(self, user: User) -> list[Project]:
        """Projects owned by ``user``, newest first."""
        return (
            self.db.query(Project)
            .filter(Project.user_id == user.id)
            .order_by(Project.created_at.desc(), Project.id.desc())
            .all()
        )

    def create(self, user: User, title: str, code: Any = None) -> Project:
        project = Project(user_id=user.id, title=title, code=code)
        self.db.add(project)
        self.db.commit()
        self.db.refresh(project)
        logger.info(f"User {user.id} created project {project.id}")
        return project

    def get_owned(self, project_id: int, user: User) -> Project:
        """Load a project, checking existence (404) before ownership (403)."""
        project = self.db.get(Project, project_id) if is_row_id(project_id) else None
        if project is None:
            raise NotFoundError("Project not found")
        try:
            authorize_owner(project.user_id, user.id)
        except AuthorizationError:
            logger.warning(f"User {user.id} denied access to project {project_id}")
            raise
        return project

    def update(self, project: Project, changes: dict[str, Any]) -> Project:
        """Apply only the supplied fields. The owner is never reassigned."""
        for field in ("title", "code"):
            if field in changes:
                setattr(project, field, changes[field])
        self.db.commit()
        self.db.refresh(project)
        logger.info(f"Updated project {project.id} ({', '.join(sorted(changes)) or 'no fields'})")
        return project

    def delete(self, project: Project) -> None:
        project_id = project.id
        self.db.delete(project)
        self.db.commit()
        logger.info(f"Deleted project {project_id}")
