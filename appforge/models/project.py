"""Project model."""

from enum import Enum
import secrets

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ProjectStatus(str, Enum):
    """Project lifecycle status."""

    DRAFT = "draft"
    BUILDING = "building"
    DEPLOYED = "deployed"
    ERROR = "error"


def new_project_id() -> str:
    return secrets.token_hex(16)


class Project(Base):
    """One tenant application, under construction or deployed.

    `deployed_url`, `database_id` and `worker_name` are set together on a
    successful build and survive later failed builds.
    """

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_project_id)
    owner_id: Mapped[str] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255), default="Untitled Project")
    status: Mapped[str] = mapped_column(String(20), default=ProjectStatus.DRAFT.value)

    deployed_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    database_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    worker_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
