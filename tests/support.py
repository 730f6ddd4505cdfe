"""Test doubles, user ids and request helpers shared by the test modules."""
from datetime import datetime, timedelta

OWNER = "user-owner"
MEMBER = "user-member"
VIEWER = "user-viewer"
OUTSIDER = "user-outsider"


def auth_headers(user_id: str, role: str = "user") -> dict:
    """Identity headers as set by the gateway."""
    return {
        "X-User-Id": user_id,
        "X-User-Email": f"{user_id}@example.com",
        "X-User-Role": role,
    }


class TickingClock:
    """Returns strictly increasing timestamps, one second apart."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


class FakeNotifier:
    """Records every notification request instead of sending it."""

    def __init__(self):
        self.calls = []

    def notify_task_assigned(self, task_id, task_title, assignee_id, assigned_by):
        self.calls.append(("task_assigned", task_id, assignee_id, assigned_by))

    def notify_task_status_changed(
        self, task_id, task_title, from_status, to_status, changed_by, notify_user_ids
    ):
        self.calls.append(
            ("task_status_changed", task_id, from_status, to_status, changed_by, list(notify_user_ids))
        )

    def notify_comment_added(self, task_id, task_title, comment_author_id, notify_user_ids):
        self.calls.append(("comment_added", task_id, comment_author_id, list(notify_user_ids)))

    def of_type(self, kind: str) -> list:
        return [call for call in self.calls if call[0] == kind]


class FailingNotifier:
    """Raises on every call, like a broken notification backend."""

    def notify_task_assigned(self, *args, **kwargs):
        raise ConnectionError("notification service down")

    def notify_task_status_changed(self, *args, **kwargs):
        raise ConnectionError("notification service down")

    def notify_comment_added(self, *args, **kwargs):
        raise ConnectionError("notification service down")
