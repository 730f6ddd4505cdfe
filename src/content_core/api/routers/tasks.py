"""Tasks API endpoints."""
import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response

from content_core import schemas
from content_core.services import TaskService

from ..dependencies import CurrentUser, get_current_user, get_task_service

logger = logging.getLogger("content-core.api.tasks")

router = APIRouter(tags=["tasks"])


@router.post("/projects/{project_id}/tasks", response_model=schemas.TaskResponse, status_code=201)
def create_task(
    project_id: str,
    task: schemas.TaskCreate,
    user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """
    Create a new task in a project. New tasks always start as todo.

    - **title**: Task title (1-200 characters)
    - **description**: Optional description
    - **priority**: low, medium, high or critical (default medium)
    - **assigneeId**: Optional user ID of the assignee
    - **dueDate**: Optional due date
    - **tags**: Optional list of tags
    """
    return service.create_task(project_id, user.user_id, task)


@router.get("/projects/{project_id}/tasks", response_model=schemas.TaskListResponse)
def list_tasks(
    project_id: str,
    status: Optional[str] = Query(None, description="Comma-separated statuses"),
    priority: Optional[str] = Query(None, description="Comma-separated priorities"),
    assignee_id: Optional[str] = Query(None, alias="assigneeId"),
    search: Optional[str] = Query(None, description="Search in title or description"),
    sort_by: Literal["createdAt", "dueDate", "priority"] = Query("createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize", description="Items per page"),
    user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """
    List tasks in a project with filtering, sorting and pagination.

    - **status**: Filter by status, comma-separated for several (e.g. todo,in_progress)
    - **priority**: Filter by priority, comma-separated for several
    - **assigneeId**: Filter by assignee
    - **search**: Case-insensitive substring of title or description
    - **sortBy**: createdAt, dueDate or priority
    - **sortOrder**: asc or desc
    - **page** / **pageSize**: Page selection
    """
    filters = schemas.TaskFilterQuery(
        status=status,
        priority=priority,
        assignee_id=assignee_id,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        page_size=page_size,
    )
    result = service.list_tasks(project_id, user.user_id, filters)
    return schemas.TaskListResponse(
        items=result.items,
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        has_more=result.has_more,
    )


@router.get("/tasks/{task_id}", response_model=schemas.TaskResponse)
def get_task(
    task_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """
    Get a specific task by ID.
    """
    return service.get_task_by_id(task_id)


@router.patch("/tasks/{task_id}", response_model=schemas.TaskResponse)
def update_task(
    task_id: str,
    task_update: schemas.TaskUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """
    Update a task (any project member).

    Omitted fields keep their value. Send null for assigneeId or dueDate
    to clear them. A tags list replaces the existing tags.
    """
    return service.update_task(task_id, user.user_id, task_update)


@router.delete("/tasks/{task_id}", status_code=204)
def delete_task(
    task_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """
    Delete a task and its comments (task creator or project owner).
    """
    service.delete_task(task_id, user.user_id)
    logger.info(f"Task {task_id} deleted by {user.user_id}")
    return Response(status_code=204)
