"""Entity services for projects, tasks and comments."""

from .comments import CommentService
from .projects import ProjectService
from .tasks import TaskService

__all__ = ["CommentService", "ProjectService", "TaskService"]
