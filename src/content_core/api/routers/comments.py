"""Comments API endpoints."""
import logging

from fastapi import APIRouter, Depends, Response

from content_core import schemas
from content_core.services import CommentService

from ..dependencies import CurrentUser, get_comment_service, get_current_user

logger = logging.getLogger("content-core.api.comments")

router = APIRouter(tags=["comments"])


@router.post("/tasks/{task_id}/comments", response_model=schemas.CommentResponse, status_code=201)
def create_comment(
    task_id: str,
    comment: schemas.CommentCreate,
    user: CurrentUser = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    """
    Comment on a task.

    - **body**: Comment text (1-5000 characters)
    """
    return service.create_comment(task_id, user.user_id, comment.body)


@router.get("/tasks/{task_id}/comments", response_model=list[schemas.CommentResponse])
def list_comments(
    task_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    """
    List comments on a task, oldest first.
    """
    return service.list_comments(task_id, user.user_id)


@router.delete("/comments/{comment_id}", status_code=204)
def delete_comment(
    comment_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    """
    Delete a comment (its author, or any user with the admin role).
    """
    service.delete_comment(comment_id, user.user_id, user.role)
    logger.info(f"Comment {comment_id} deleted by {user.user_id}")
    return Response(status_code=204)
