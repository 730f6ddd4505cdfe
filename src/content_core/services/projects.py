"""Project and membership lifecycle."""
import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from .. import crud, models, permissions
from ..errors import ForbiddenError, NotFoundError, ValidationError
from ..pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, Page, PageWindow

logger = logging.getLogger("content-core.projects")

# Roles an owner may hand out; the owner role itself is never granted
ASSIGNABLE_ROLES = (models.ProjectRole.MEMBER, models.ProjectRole.VIEWER)


class ProjectService:
    """Creates projects, manages their membership, and answers ownership questions."""

    def __init__(
        self,
        db: Session,
        clock: Callable = models.utcnow,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ):
        self.db = db
        self.clock = clock
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    def create_project(self, name: str, description: str, owner_id: str) -> models.Project:
        """Create a project; the creator becomes its owner in the same transaction."""
        project = crud.create_project(
            self.db,
            name=name,
            description=description or "",
            owner_id=owner_id,
            now=self.clock(),
        )
        logger.info(f"Created project '{project.name}' (ID: {project.id}) for {owner_id}")
        return project

    def list_user_projects(
        self,
        user_id: str,
        page: Optional[int] = 1,
        page_size: Optional[int] = None,
    ) -> Page[models.Project]:
        """Projects the user is a member of, newest first."""
        window = PageWindow.normalize(page, page_size, self.default_page_size, self.max_page_size)
        projects, total = crud.get_user_projects(
            self.db, user_id, skip=window.offset, limit=window.page_size
        )
        return Page.build(projects, total, window)

    def get_project_by_id(self, project_id: str) -> models.Project:
        project = crud.get_project(self.db, project_id)
        if not project:
            raise NotFoundError("Project not found")
        return project

    def update_project(
        self,
        project_id: str,
        user_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> models.Project:
        """Owner-only partial update."""
        project = self.get_project_by_id(project_id)
        permissions.require_owner(self.db, project_id, user_id)
        return crud.update_project(
            self.db, project, name=name, description=description, now=self.clock()
        )

    def delete_project(self, project_id: str, user_id: str) -> None:
        """Owner-only delete; memberships, tasks and comments go with it."""
        project = self.get_project_by_id(project_id)
        permissions.require_owner(self.db, project_id, user_id)
        crud.delete_project(self.db, project)
        logger.info(f"Deleted project {project_id}")

    def list_members(self, project_id: str) -> list[models.ProjectMember]:
        """Non-owner memberships of a project."""
        self.get_project_by_id(project_id)
        return crud.get_project_members(self.db, project_id)

    def add_member(
        self,
        project_id: str,
        user_id: str,
        requester_id: str,
        role: str = "member",
    ) -> models.ProjectMember:
        """
        Add a member to a project (owner only).

        Roles other than member/viewer are downgraded to member.

        Raises:
            NotFoundError: If the project does not exist
            ForbiddenError: If the requester is not the owner, or the user
                is already a member
        """
        self.get_project_by_id(project_id)
        permissions.require_owner(self.db, project_id, requester_id)

        if crud.get_project_member(self.db, project_id, user_id):
            raise ForbiddenError("User is already a member of this project")

        valid_role = _assignable_role(role) or models.ProjectRole.MEMBER
        member = crud.add_project_member(self.db, project_id, user_id, valid_role)
        logger.info(f"Added {user_id} to project {project_id} as {valid_role.value}")
        return member

    def update_member_role(
        self,
        project_id: str,
        user_id: str,
        role: str,
        requester_id: str,
    ) -> models.ProjectMember:
        """
        Change a member's role (owner only).

        Raises:
            NotFoundError: If the project or the membership does not exist
            ForbiddenError: If the requester is not the owner, or the target
                is the owner's own membership
            ValidationError: If the role is not member or viewer
        """
        self.get_project_by_id(project_id)
        permissions.require_owner(self.db, project_id, requester_id)

        member = crud.get_project_member(self.db, project_id, user_id)
        if not member:
            raise NotFoundError("Member not found")
        if member.role == models.ProjectRole.OWNER:
            raise ForbiddenError("The owner's role cannot be changed")

        new_role = _assignable_role(role)
        if new_role is None:
            raise ValidationError(
                "Invalid role",
                details=[{"path": "role", "message": "Role must be one of: member, viewer"}],
            )
        return crud.update_project_member_role(self.db, member, new_role)

    def remove_member(self, project_id: str, user_id: str, requester_id: str) -> None:
        """
        Remove a member (owner only). The owner can never remove themself.

        Raises:
            NotFoundError: If the project or the membership does not exist
            ForbiddenError: If the requester is not the owner or targets themself
        """
        self.get_project_by_id(project_id)
        permissions.require_owner(self.db, project_id, requester_id)

        if user_id == requester_id:
            raise ForbiddenError("Cannot remove yourself as owner")

        if not crud.remove_project_member(self.db, project_id, user_id):
            raise NotFoundError("Member not found")

    def is_member(self, project_id: str, user_id: str) -> bool:
        return permissions.is_member(self.db, project_id, user_id)

    def is_owner(self, project_id: str, user_id: str) -> bool:
        return permissions.is_owner(self.db, project_id, user_id)


def _assignable_role(role) -> Optional[models.ProjectRole]:
    try:
        parsed = models.ProjectRole(role)
    except ValueError:
        return None
    return parsed if parsed in ASSIGNABLE_ROLES else None
