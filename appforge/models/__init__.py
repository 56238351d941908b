"""Database models package."""

from .base import Base
from .chat_message import ChatMessage
from .project import Project, ProjectStatus, new_project_id

__all__ = [
    "Base",
    "ChatMessage",
    "Project",
    "ProjectStatus",
    "new_project_id",
]
