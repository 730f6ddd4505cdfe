"""Pydantic schemas for request/response validation.

JSON payloads use camelCase keys (``assigneeId``, ``dueDate``, ``pageSize``);
Python code uses the snake_case field names.
"""
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from .models import ProjectRole, TaskStatus, TaskPriority


class CamelModel(BaseModel):
    """Base schema accepting both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an offset-aware datetime to naive UTC, the stored form."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class OrmModel(CamelModel):
    """Base schema for responses built from ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


# ============================================================================
# Project Schemas
# ============================================================================

class ProjectCreate(CamelModel):
    """Schema for creating a new project."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=2000)


class ProjectUpdate(CamelModel):
    """Schema for updating a project. Omitted fields keep their value."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)


class ProjectResponse(OrmModel):
    """Schema for project responses."""

    id: str
    name: str
    description: str
    owner_id: str
    created_at: datetime
    updated_at: datetime


class ProjectListResponse(CamelModel):
    """Schema for paginated project list."""

    items: list[ProjectResponse]
    total: int
    page: int
    page_size: int
    has_more: bool


class PaginationQuery(CamelModel):
    """Page selection for list endpoints."""

    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1, le=100)


# ============================================================================
# Project Member Schemas
# ============================================================================

class ProjectMemberCreate(CamelModel):
    """Schema for adding a user to a project.

    Roles other than member/viewer are downgraded to member.
    """

    user_id: str = Field(..., min_length=1)
    role: str = "member"


class ProjectMemberUpdate(CamelModel):
    """Schema for updating a project member's role."""

    role: ProjectRole


class ProjectMemberResponse(OrmModel):
    """Schema for project member responses."""

    project_id: str
    user_id: str
    role: ProjectRole


# ============================================================================
# Task Schemas
# ============================================================================

class TaskCreate(CamelModel):
    """Schema for creating a new task.

    Status is not accepted here: every task starts as ``todo``.
    """

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    priority: TaskPriority = TaskPriority.MEDIUM
    assignee_id: Optional[str] = None
    due_date: Optional[datetime] = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("due_date")
    @classmethod
    def due_date_as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)


class TaskUpdate(CamelModel):
    """Schema for updating an existing task.

    A field that is absent keeps its value. An explicit null on
    ``assignee_id`` or ``due_date`` clears it.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assignee_id: Optional[str] = None
    due_date: Optional[datetime] = None
    tags: Optional[list[str]] = None

    @field_validator("due_date")
    @classmethod
    def due_date_as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)


class TaskFilters(CamelModel):
    """Filter, sort and page selection for task listing."""

    status: Optional[str] = Field(None, description="Comma-separated statuses")
    priority: Optional[str] = Field(None, description="Comma-separated priorities")
    assignee_id: Optional[str] = None
    search: Optional[str] = Field(None, description="Substring of title or description")
    sort_by: Optional[str] = "createdAt"
    sort_order: Optional[str] = "desc"
    page: Optional[int] = 1
    page_size: Optional[int] = 20


class TaskFilterQuery(TaskFilters):
    """Validated task listing query parameters."""

    sort_by: Literal["createdAt", "dueDate", "priority"] = "createdAt"
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1, le=100)


class TaskResponse(OrmModel):
    """Schema for full task response."""

    id: str
    project_id: str
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    assignee_id: Optional[str] = None
    created_by: str
    due_date: Optional[datetime] = None
    tags: list[str]
    created_at: datetime
    updated_at: datetime


class TaskListResponse(CamelModel):
    """Schema for paginated task list."""

    items: list[TaskResponse]
    total: int
    page: int
    page_size: int
    has_more: bool


# ============================================================================
# Comment Schemas
# ============================================================================

class CommentCreate(CamelModel):
    """Schema for creating a comment."""

    body: str = Field(..., min_length=1, max_length=5000)


class CommentResponse(OrmModel):
    """Schema for comment responses."""

    id: str
    task_id: str
    author_id: str
    body: str
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Notification Schemas
# ============================================================================

NotificationType = Literal["task_assigned", "task_status_changed", "comment_added"]


class NotificationRequest(CamelModel):
    """Outbound payload for the notification service."""

    user_id: str
    type: NotificationType
    title: str
    body: str
    metadata: dict[str, str] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Schema for the health endpoint."""

    status: str
    service: str
    timestamp: datetime
