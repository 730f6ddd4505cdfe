"""Task lifecycle and the task listing pipeline."""
import logging
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from .. import crud, models, permissions, schemas
from ..errors import ForbiddenError, NotFoundError
from ..notifications import Notifier, recipients
from ..pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, Page, PageWindow
from ..task_query import TaskQueryBuilder

logger = logging.getLogger("content-core.tasks")

# Fields where an explicit null clears the stored value
NULLABLE_FIELDS = ("assignee_id", "due_date")


class TaskService:
    """Creates, lists, updates and deletes tasks inside a project."""

    def __init__(
        self,
        db: Session,
        notifier: Optional[Notifier] = None,
        clock: Callable = models.utcnow,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ):
        self.db = db
        self.notifier = notifier
        self.clock = clock
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    def create_task(
        self, project_id: str, created_by: str, data: schemas.TaskCreate
    ) -> models.Task:
        """Create a task as a project member. Status always starts as todo."""
        permissions.require_member(self.db, project_id, created_by)

        task = crud.create_task(
            self.db,
            project_id=project_id,
            created_by=created_by,
            title=data.title,
            description=data.description or "",
            priority=data.priority or models.TaskPriority.MEDIUM,
            assignee_id=data.assignee_id or None,
            due_date=data.due_date,
            tags=data.tags or [],
            now=self.clock(),
        )

        if task.assignee_id and task.assignee_id != created_by:
            self._notify(
                lambda n: n.notify_task_assigned(task.id, task.title, task.assignee_id, created_by)
            )
        return task

    def list_tasks(
        self, project_id: str, user_id: str, filters: schemas.TaskFilters
    ) -> Page[models.Task]:
        """
        List a project's tasks with filtering, sorting and pagination.

        The total is counted with the same predicate as the page, without
        the LIMIT/OFFSET window.

        Raises:
            ForbiddenError: If the user is not a project member
        """
        permissions.require_member(self.db, project_id, user_id)

        window = PageWindow.normalize(
            filters.page, filters.page_size, self.default_page_size, self.max_page_size
        )
        builder = TaskQueryBuilder.from_filters(project_id, filters)
        tasks, total = crud.get_tasks(
            self.db,
            builder,
            window,
            sort_by=filters.sort_by,
            sort_order=filters.sort_order,
        )
        return Page.build(tasks, total, window)

    def get_task_by_id(self, task_id: str) -> models.Task:
        task = crud.get_task(self.db, task_id)
        if not task:
            raise NotFoundError("Task not found")
        return task

    def update_task(
        self, task_id: str, user_id: str, data: schemas.TaskUpdate
    ) -> models.Task:
        """
        Update a task as any project member.

        Absent fields keep their value; an explicit null clears assignee or
        due date. Tags, when given, replace the whole list. Status is a free
        label, so every transition is accepted.
        """
        task = self.get_task_by_id(task_id)
        permissions.require_member(self.db, task.project_id, user_id)

        previous_status = task.status
        previous_assignee = task.assignee_id

        task = crud.update_task(self.db, task, _collect_changes(data), now=self.clock())

        status_recipients = recipients([task.assignee_id, task.created_by], exclude=user_id)
        if task.status != previous_status and status_recipients:
            self._notify(
                lambda n: n.notify_task_status_changed(
                    task.id,
                    task.title,
                    _value(previous_status),
                    _value(task.status),
                    user_id,
                    status_recipients,
                )
            )
        if task.assignee_id and task.assignee_id != previous_assignee and task.assignee_id != user_id:
            self._notify(
                lambda n: n.notify_task_assigned(task.id, task.title, task.assignee_id, user_id)
            )
        return task

    def delete_task(self, task_id: str, user_id: str) -> None:
        """
        Delete a task as its creator or the project owner.

        Raises:
            NotFoundError: If the task does not exist
            ForbiddenError: If the user is neither creator nor project owner
        """
        task = self.get_task_by_id(task_id)
        if not permissions.can_delete_task(self.db, task, user_id):
            raise ForbiddenError("Only the project owner or task creator can delete tasks")
        crud.delete_task(self.db, task)

    def _notify(self, send: Callable[[Notifier], None]) -> None:
        if self.notifier is None:
            return
        try:
            send(self.notifier)
        except Exception:
            logger.warning("Task notification failed", exc_info=True)


def _collect_changes(data: schemas.TaskUpdate) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    for field_name in data.model_fields_set:
        value = getattr(data, field_name)
        if value is None and field_name not in NULLABLE_FIELDS:
            continue
        changes[field_name] = value
    return changes


def _value(enum_or_str) -> str:
    return getattr(enum_or_str, "value", enum_or_str)
