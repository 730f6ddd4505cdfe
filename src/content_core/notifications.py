"""Fire-and-forget client for the notification service.

Sends are handed to a small thread pool and never awaited. Every failure
(connection errors, HTTP errors, a closed pool) is logged and dropped, so
a missed notification cannot fail or slow down the request that caused it.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional, Protocol

import httpx

from .schemas import NotificationRequest

logger = logging.getLogger("content-core.notifications")


class Notifier(Protocol):
    """Outbound notification port used by the entity services."""

    def notify_task_assigned(
        self, task_id: str, task_title: str, assignee_id: str, assigned_by: str
    ) -> None:
        ...

    def notify_task_status_changed(
        self,
        task_id: str,
        task_title: str,
        from_status: str,
        to_status: str,
        changed_by: str,
        notify_user_ids: Iterable[str],
    ) -> None:
        ...

    def notify_comment_added(
        self,
        task_id: str,
        task_title: str,
        comment_author_id: str,
        notify_user_ids: Iterable[str],
    ) -> None:
        ...


def recipients(user_ids: Iterable[Optional[str]], exclude: str) -> list[str]:
    """Deduplicate recipients in order, dropping blanks and the acting user."""
    result: list[str] = []
    for user_id in user_ids:
        if user_id and user_id != exclude and user_id not in result:
            result.append(user_id)
    return result


class NotificationClient:
    """Posts notifications to ``{base_url}/notifications/send``."""

    def __init__(
        self,
        base_url: str,
        service_token: str,
        timeout: float = 5.0,
        max_workers: int = 4,
        enabled: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.enabled = enabled
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {service_token}"},
            timeout=timeout,
            transport=transport,
        )
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="notifications"
        )

    @classmethod
    def from_settings(cls, settings) -> "NotificationClient":
        return cls(
            base_url=settings.notification_service_url,
            service_token=settings.service_token,
            timeout=settings.notification_timeout_seconds,
            max_workers=settings.notification_max_workers,
            enabled=settings.notifications_enabled,
        )

    def send(self, request: NotificationRequest) -> None:
        """Queue a notification without waiting for the outcome."""
        if not self.enabled:
            logger.debug(f"Notifications disabled, dropping {request.type} for {request.user_id}")
            return
        try:
            self._executor.submit(self._post, request)
        except RuntimeError as e:
            # Pool already shut down
            logger.warning(f"Could not queue {request.type} notification: {e}")

    def _post(self, request: NotificationRequest) -> None:
        try:
            response = self._client.post(
                "/notifications/send",
                json=request.model_dump(by_alias=True),
            )
            response.raise_for_status()
            logger.debug(f"Sent {request.type} notification to {request.user_id}")
        except Exception:
            logger.warning(
                f"Failed to send {request.type} notification to {request.user_id}",
                exc_info=True,
            )

    def notify_task_assigned(
        self, task_id: str, task_title: str, assignee_id: str, assigned_by: str
    ) -> None:
        self.send(
            NotificationRequest(
                user_id=assignee_id,
                type="task_assigned",
                title="Task Assigned",
                body=f"You have been assigned to task: {task_title}",
                metadata={"taskId": task_id, "assignedBy": assigned_by},
            )
        )

    def notify_task_status_changed(
        self,
        task_id: str,
        task_title: str,
        from_status: str,
        to_status: str,
        changed_by: str,
        notify_user_ids: Iterable[str],
    ) -> None:
        for user_id in recipients(notify_user_ids, exclude=changed_by):
            self.send(
                NotificationRequest(
                    user_id=user_id,
                    type="task_status_changed",
                    title="Task Status Changed",
                    body=f'Task "{task_title}" changed from {from_status} to {to_status}',
                    metadata={
                        "taskId": task_id,
                        "fromStatus": from_status,
                        "toStatus": to_status,
                        "changedBy": changed_by,
                    },
                )
            )

    def notify_comment_added(
        self,
        task_id: str,
        task_title: str,
        comment_author_id: str,
        notify_user_ids: Iterable[str],
    ) -> None:
        for user_id in recipients(notify_user_ids, exclude=comment_author_id):
            self.send(
                NotificationRequest(
                    user_id=user_id,
                    type="comment_added",
                    title="New Comment",
                    body=f"New comment on task: {task_title}",
                    metadata={"taskId": task_id, "commentAuthorId": comment_author_id},
                )
            )

    def close(self, wait: bool = True) -> None:
        """Stop accepting sends and release the HTTP client."""
        self._executor.shutdown(wait=wait)
        self._client.close()
