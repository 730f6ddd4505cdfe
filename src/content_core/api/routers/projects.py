"""Projects API endpoints."""
import logging

from fastapi import APIRouter, Depends, Query, Response

from content_core import schemas
from content_core.services import ProjectService

from ..dependencies import CurrentUser, get_current_user, get_project_service

logger = logging.getLogger("content-core.api.projects")

router = APIRouter(tags=["projects"])


@router.post("", response_model=schemas.ProjectResponse, status_code=201)
def create_project(
    project: schemas.ProjectCreate,
    user: CurrentUser = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """
    Create a new project. The caller becomes its owner.

    - **name**: Project name (1-200 characters)
    - **description**: Optional description (up to 2000 characters)
    """
    return service.create_project(project.name, project.description, user.user_id)


@router.get("", response_model=schemas.ProjectListResponse)
def list_projects(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize", description="Items per page"),
    user: CurrentUser = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """
    List the caller's projects, newest first.

    - **page**: Page number (starts at 1)
    - **pageSize**: Number of items per page (1-100)
    """
    result = service.list_user_projects(user.user_id, page, page_size)
    return schemas.ProjectListResponse(
        items=result.items,
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        has_more=result.has_more,
    )


@router.get("/{project_id}", response_model=schemas.ProjectResponse)
def get_project(
    project_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """
    Get a specific project by ID.
    """
    return service.get_project_by_id(project_id)


@router.patch("/{project_id}", response_model=schemas.ProjectResponse)
def update_project(
    project_id: str,
    project_update: schemas.ProjectUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """
    Update a project (owner only).

    - **name**: New project name (optional)
    - **description**: New description (optional)
    """
    return service.update_project(
        project_id,
        user.user_id,
        name=project_update.name,
        description=project_update.description,
    )


@router.delete("/{project_id}", status_code=204)
def delete_project(
    project_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """
    Delete a project with its members, tasks and comments (owner only).

    Use with caution!
    """
    service.delete_project(project_id, user.user_id)
    return Response(status_code=204)


# Project Members endpoints

@router.get("/{project_id}/members", response_model=list[schemas.ProjectMemberResponse])
def list_project_members(
    project_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """
    List the members of a project. The owner is not listed.
    """
    return service.list_members(project_id)


@router.post("/{project_id}/members", response_model=schemas.ProjectMemberResponse, status_code=201)
def add_project_member(
    project_id: str,
    member: schemas.ProjectMemberCreate,
    user: CurrentUser = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """
    Add a user to a project (owner only).

    - **userId**: ID of the user to add
    - **role**: member or viewer (anything else becomes member)
    """
    return service.add_member(project_id, member.user_id, user.user_id, member.role)


@router.patch("/{project_id}/members/{user_id}", response_model=schemas.ProjectMemberResponse)
def update_project_member(
    project_id: str,
    user_id: str,
    member_update: schemas.ProjectMemberUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """
    Update a project member's role (owner only).

    - **role**: New project role (member or viewer)
    """
    return service.update_member_role(project_id, user_id, member_update.role, user.user_id)


@router.delete("/{project_id}/members/{user_id}", status_code=204)
def remove_project_member(
    project_id: str,
    user_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """
    Remove a user from a project (owner only, never the owner themself).
    """
    service.remove_member(project_id, user_id, user.user_id)
    logger.info(f"Removed {user_id} from project {project_id}")
    return Response(status_code=204)
