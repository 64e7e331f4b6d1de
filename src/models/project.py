"""Project model."""

from sqlalchemy import JSON, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class Project(Base, TimestampMixin):
    """A project owned by a single user."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(255), nullable=False)
    code = Column(JSON(none_as_null=True), nullable=True)  # opaque object or array

    # Relationships
    user = relationship("User", back_populates="projects")

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, user_id={self.user_id}, title={self.title!r})>"
