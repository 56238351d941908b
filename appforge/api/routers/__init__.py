"""API routers."""

from . import conversation, health, projects

__all__ = ["conversation", "health", "projects"]
