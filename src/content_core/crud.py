"""CRUD operations for projects, memberships, tasks and comments.

These functions touch persistence only. Authorization and business rules
live in the services, which call in here after their checks pass.
"""
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from . import models
from .database import transaction
from .pagination import PageWindow
from .task_query import TaskQueryBuilder

logger = logging.getLogger("content-core.crud")


# ============================================================================
# Project CRUD Operations
# ============================================================================

def create_project(
    db: Session,
    name: str,
    description: str,
    owner_id: str,
    now: Optional[datetime] = None,
) -> models.Project:
    """
    Create a project together with its owner membership.

    Both rows are written in one transaction; a project without its owner
    row is never visible.

    Args:
        db: Database session
        name: Project name
        description: Project description
        owner_id: Creating user, recorded as owner
        now: Creation timestamp (defaults to the current UTC time)

    Returns:
        Created project instance
    """
    now = now or models.utcnow()
    with transaction(db):
        db_project = models.Project(
            name=name,
            description=description,
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
        )
        db.add(db_project)
        db.flush()
        db.add(
            models.ProjectMember(
                project_id=db_project.id,
                user_id=owner_id,
                role=models.ProjectRole.OWNER,
            )
        )
    db.refresh(db_project)
    logger.debug(f"Created project {db_project.id} owned by {owner_id}")
    return db_project


def get_project(db: Session, project_id: str) -> Optional[models.Project]:
    """
    Get a project by ID.

    Args:
        db: Database session
        project_id: Project ID

    Returns:
        Project instance or None if not found
    """
    return db.get(models.Project, project_id)


def get_user_projects(
    db: Session,
    user_id: str,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[models.Project], int]:
    """
    Get the projects a user holds any membership in, newest first.

    Args:
        db: Database session
        user_id: Member user ID
        skip: Number of records to skip
        limit: Maximum number of records to return

    Returns:
        Tuple of (projects list, total count)
    """
    membership = select(models.ProjectMember.project_id).where(
        models.ProjectMember.user_id == user_id
    )
    predicate = models.Project.id.in_(membership)

    total = db.execute(
        select(func.count()).select_from(models.Project).where(predicate)
    ).scalar_one()
    projects = (
        db.execute(
            select(models.Project)
            .where(predicate)
            .order_by(models.Project.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        .scalars()
        .all()
    )
    return list(projects), total


def update_project(
    db: Session,
    db_project: models.Project,
    name: Optional[str] = None,
    description: Optional[str] = None,
    now: Optional[datetime] = None,
) -> models.Project:
    """
    Update a project. Fields left as None keep their value.

    Args:
        db: Database session
        db_project: Project to update
        name: Optional new name
        description: Optional new description
        now: Update timestamp

    Returns:
        Updated project
    """
    if name is not None:
        db_project.name = name
    if description is not None:
        db_project.description = description
    db_project.updated_at = now or models.utcnow()

    db.commit()
    db.refresh(db_project)
    logger.debug(f"Updated project {db_project.id}")
    return db_project


def delete_project(db: Session, db_project: models.Project) -> None:
    """
    Delete a project with its memberships, tasks and comments (cascading delete).

    Args:
        db: Database session
        db_project: Project to delete
    """
    project_id = db_project.id
    db.delete(db_project)
    db.commit()
    # Rows removed by ON DELETE CASCADE are still in the identity map
    db.expire_all()
    logger.debug(f"Deleted project {project_id}")


# ============================================================================
# Project Member CRUD Operations
# ============================================================================

def get_project_member(
    db: Session,
    project_id: str,
    user_id: str,
) -> Optional[models.ProjectMember]:
    """
    Get one membership row.

    Args:
        db: Database session
        project_id: Project ID
        user_id: User ID

    Returns:
        Project member or None if not found
    """
    return db.get(models.ProjectMember, (project_id, user_id))


def get_project_members(
    db: Session,
    project_id: str,
    include_owner: bool = False,
) -> list[models.ProjectMember]:
    """
    Get the members of a project.

    Args:
        db: Database session
        project_id: Project ID
        include_owner: Also return the owner's membership row

    Returns:
        List of project members
    """
    query = select(models.ProjectMember).where(models.ProjectMember.project_id == project_id)
    if not include_owner:
        query = query.where(models.ProjectMember.role != models.ProjectRole.OWNER)
    return list(db.execute(query.order_by(models.ProjectMember.user_id)).scalars().all())


def add_project_member(
    db: Session,
    project_id: str,
    user_id: str,
    role: models.ProjectRole = models.ProjectRole.MEMBER,
) -> models.ProjectMember:
    """
    Add a user to a project with a specific role.

    Args:
        db: Database session
        project_id: Project ID
        user_id: User ID
        role: Project role

    Returns:
        Created project member instance
    """
    db_member = models.ProjectMember(
        project_id=project_id,
        user_id=user_id,
        role=role,
    )
    db.add(db_member)
    db.commit()
    db.refresh(db_member)
    logger.debug(f"Added user {user_id} to project {project_id} with role {role.value}")
    return db_member


def update_project_member_role(
    db: Session,
    db_member: models.ProjectMember,
    role: models.ProjectRole,
) -> models.ProjectMember:
    """
    Update a project member's role.

    Args:
        db: Database session
        db_member: Membership to update
        role: New project role

    Returns:
        Updated project member
    """
    db_member.role = role
    db.commit()
    db.refresh(db_member)
    logger.debug(f"Updated user {db_member.user_id} role in project {db_member.project_id} to {role.value}")
    return db_member


def remove_project_member(
    db: Session,
    project_id: str,
    user_id: str,
) -> bool:
    """
    Remove a user from a project.

    Args:
        db: Database session
        project_id: Project ID
        user_id: User ID

    Returns:
        True if removed, False if not found
    """
    db_member = get_project_member(db, project_id, user_id)
    if not db_member:
        return False

    db.delete(db_member)
    db.commit()
    logger.debug(f"Removed user {user_id} from project {project_id}")
    return True


# ============================================================================
# Task CRUD Operations
# ============================================================================

def create_task(
    db: Session,
    project_id: str,
    created_by: str,
    title: str,
    description: str = "",
    priority: models.TaskPriority = models.TaskPriority.MEDIUM,
    assignee_id: Optional[str] = None,
    due_date: Optional[datetime] = None,
    tags: Optional[list[str]] = None,
    now: Optional[datetime] = None,
) -> models.Task:
    """
    Create a new task. New tasks always start as ``todo``.

    Args:
        db: Database session
        project_id: Owning project ID
        created_by: Creating user ID
        title: Task title
        description: Task description
        priority: Task priority
        assignee_id: Optional assignee user ID
        due_date: Optional due date
        tags: Ordered tags (defaults to empty)
        now: Creation timestamp

    Returns:
        Created Task object
    """
    now = now or models.utcnow()
    task = models.Task(
        project_id=project_id,
        title=title,
        description=description,
        status=models.TaskStatus.TODO,
        priority=priority,
        assignee_id=assignee_id,
        created_by=created_by,
        due_date=due_date,
        tags=list(tags or []),
        created_at=now,
        updated_at=now,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info(f"Created task {task.id} in project {project_id}: {task.title}")
    return task


def get_task(db: Session, task_id: str) -> Optional[models.Task]:
    """
    Get a task by ID.

    Args:
        db: Database session
        task_id: Task ID

    Returns:
        Task or None if not found
    """
    return db.get(models.Task, task_id)


def get_tasks(
    db: Session,
    builder: TaskQueryBuilder,
    window: PageWindow,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
) -> tuple[list[models.Task], int]:
    """
    Run a task listing: total count, then the ordered page.

    Both queries use the identical predicate from the builder.

    Args:
        db: Database session
        builder: Accumulated predicate clauses
        window: Normalized page selection
        sort_by: Sort field
        sort_order: ``asc`` or ``desc``

    Returns:
        Tuple of (tasks, total_count)
    """
    total = db.execute(builder.count_statement()).scalar_one()
    tasks = db.execute(builder.page_statement(window, sort_by, sort_order)).scalars().all()
    return list(tasks), total


def update_task(
    db: Session,
    task: models.Task,
    changes: dict[str, Any],
    now: Optional[datetime] = None,
) -> models.Task:
    """
    Apply field changes to a task.

    Every key in ``changes`` is written, including None values, so callers
    decide which fields are kept and which are cleared.

    Args:
        db: Database session
        task: Task to update
        changes: Column name -> new value
        now: Update timestamp

    Returns:
        Updated Task
    """
    for field_name, value in changes.items():
        if field_name == "tags":
            value = list(value)
        setattr(task, field_name, value)
    task.updated_at = now or models.utcnow()

    db.commit()
    db.refresh(task)
    logger.info(f"Updated task {task.id} ({', '.join(sorted(changes)) or 'no fields'})")
    return task


def delete_task(db: Session, task: models.Task) -> None:
    """
    Delete a task and its comments.

    Args:
        db: Database session
        task: Task to delete
    """
    task_id = task.id
    db.delete(task)
    db.commit()
    db.expire_all()
    logger.info(f"Deleted task {task_id}")


# ============================================================================
# Comment CRUD Operations
# ============================================================================

def create_comment(
    db: Session,
    task_id: str,
    author_id: str,
    body: str,
    now: Optional[datetime] = None,
) -> models.Comment:
    """
    Create a comment on a task.

    Args:
        db: Database session
        task_id: Task ID
        author_id: Author user ID
        body: Comment text
        now: Creation timestamp

    Returns:
        Created Comment
    """
    now = now or models.utcnow()
    comment = models.Comment(
        task_id=task_id,
        author_id=author_id,
        body=body,
        created_at=now,
        updated_at=now,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    logger.debug(f"Created comment {comment.id} on task {task_id}")
    return comment


def get_comment(db: Session, comment_id: str) -> Optional[models.Comment]:
    """Get a comment by ID, or None if not found."""
    return db.get(models.Comment, comment_id)


def get_comments(db: Session, task_id: str) -> list[models.Comment]:
    """
    Get the comments of a task, oldest first.

    Args:
        db: Database session
        task_id: Task ID

    Returns:
        List of comments
    """
    return list(
        db.execute(
            select(models.Comment)
            .where(models.Comment.task_id == task_id)
            .order_by(models.Comment.created_at.asc())
        )
        .scalars()
        .all()
    )


def delete_comment(db: Session, comment: models.Comment) -> None:
    """Delete a comment."""
    comment_id = comment.id
    db.delete(comment)
    db.commit()
    logger.debug(f"Deleted comment {comment_id}")
