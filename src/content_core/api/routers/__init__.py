"""API routers for the content service."""

from . import comments, projects, tasks

__all__ = ["comments", "projects", "tasks"]
