"""Comment lifecycle. Access follows the commented task's project."""
import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from .. import crud, models, permissions
from ..errors import ForbiddenError, NotFoundError
from ..notifications import Notifier, recipients

logger = logging.getLogger("content-core.comments")


class CommentService:
    """Creates, lists and deletes comments on tasks."""

    def __init__(
        self,
        db: Session,
        notifier: Optional[Notifier] = None,
        clock: Callable = models.utcnow,
    ):
        self.db = db
        self.notifier = notifier
        self.clock = clock

    def create_comment(self, task_id: str, author_id: str, body: str) -> models.Comment:
        """
        Comment on a task as a member of its project.

        After the insert, the task's assignee and creator are notified
        (never the author). Notification problems are logged only.

        Raises:
            NotFoundError: If the task does not exist
            ForbiddenError: If the author is not a project member
        """
        task = self._get_task(task_id)
        permissions.require_member(self.db, task.project_id, author_id)

        comment = crud.create_comment(self.db, task_id, author_id, body, now=self.clock())

        notify_user_ids = recipients([task.assignee_id, task.created_by], exclude=author_id)
        if self.notifier is not None and notify_user_ids:
            try:
                self.notifier.notify_comment_added(task.id, task.title, author_id, notify_user_ids)
            except Exception:
                logger.warning(f"Comment notification for task {task.id} failed", exc_info=True)
        return comment

    def list_comments(self, task_id: str, user_id: str) -> list[models.Comment]:
        """Comments on a task, oldest first."""
        task = self._get_task(task_id)
        permissions.require_member(self.db, task.project_id, user_id)
        return crud.get_comments(self.db, task_id)

    def delete_comment(self, comment_id: str, user_id: str, role: str) -> None:
        """
        Delete a comment as its author or as a global admin.

        Raises:
            NotFoundError: If the comment does not exist
            ForbiddenError: If the user is neither author nor admin
        """
        comment = crud.get_comment(self.db, comment_id)
        if not comment:
            raise NotFoundError("Comment not found")
        if not permissions.can_delete_comment(comment, user_id, role):
            raise ForbiddenError("Only the comment author or admin can delete comments")
        crud.delete_comment(self.db, comment)

    def _get_task(self, task_id: str) -> models.Task:
        task = crud.get_task(self.db, task_id)
        if not task:
            raise NotFoundError("Task not found")
        return task
