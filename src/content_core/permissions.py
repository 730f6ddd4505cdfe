"""Authorization checks shared by the project, task and comment services.

Project roles (owner/member/viewer) live in ``project_members``. The
``admin`` role is different: it is a global capability asserted by the
caller's identity context and is never stored per project.
"""
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from . import models
from .errors import ForbiddenError

logger = logging.getLogger("content-core.permissions")

ADMIN_ROLE = "admin"


def is_member(db: Session, project_id: str, user_id: str) -> bool:
    """Return True if the user holds any membership row in the project."""
    row = db.execute(
        select(models.ProjectMember.user_id).where(
            models.ProjectMember.project_id == project_id,
            models.ProjectMember.user_id == user_id,
        )
    ).first()
    return row is not None


def is_owner(db: Session, project_id: str, user_id: str) -> bool:
    """Return True if the user is the project's owner."""
    row = db.execute(
        select(models.Project.id).where(
            models.Project.id == project_id,
            models.Project.owner_id == user_id,
        )
    ).first()
    return row is not None


def require_member(db: Session, project_id: str, user_id: str) -> None:
    """
    Fail unless the user is a member of the project.

    Raises:
        ForbiddenError: If no membership row exists
    """
    if not is_member(db, project_id, user_id):
        logger.debug(f"User {user_id} is not a member of project {project_id}")
        raise ForbiddenError("You must be a project member to perform this action")


def require_owner(db: Session, project_id: str, user_id: str) -> None:
    """
    Fail unless the user owns the project.

    Raises:
        ForbiddenError: If the project's owner is someone else
    """
    if not is_owner(db, project_id, user_id):
        logger.debug(f"User {user_id} is not the owner of project {project_id}")
        raise ForbiddenError("Only the project owner can perform this action")


def can_delete_task(db: Session, task: models.Task, user_id: str) -> bool:
    """The task's creator or the project owner may delete a task."""
    return task.created_by == user_id or is_owner(db, task.project_id, user_id)


def can_delete_comment(comment: models.Comment, user_id: str, role: str) -> bool:
    """The comment's author or a global admin may delete a comment."""
    return comment.author_id == user_id or role == ADMIN_ROLE
