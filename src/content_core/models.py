"""SQLAlchemy database models."""
from datetime import datetime, timezone
from uuid import uuid4
import enum

from sqlalchemy import (
    Column,
    String,
    Text,
    DateTime,
    ForeignKey,
    Enum,
    CheckConstraint,
    Index,
    JSON,
)
from sqlalchemy.orm import declarative_base, relationship

# Base class for all models
Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    """Generate an opaque entity identifier."""
    return str(uuid4())


class ProjectRole(str, enum.Enum):
    """Project member role enum."""

    OWNER = "owner"
    MEMBER = "member"
    VIEWER = "viewer"


class TaskStatus(str, enum.Enum):
    """Task status label. Any transition between values is allowed."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    DONE = "done"


class TaskPriority(str, enum.Enum):
    """Task priority enum."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Total order used for priority sorting
PRIORITY_RANK: dict[TaskPriority, int] = {
    TaskPriority.LOW: 0,
    TaskPriority.MEDIUM: 1,
    TaskPriority.HIGH: 2,
    TaskPriority.CRITICAL: 3,
}


def _enum_values(enum_cls) -> str:
    return ", ".join(f"'{e.value}'" for e in enum_cls)


class Project(Base):
    """
    Project model, the scope boundary for memberships and tasks.

    The owner is fixed at creation and always holds the single
    owner-role membership row.
    """

    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    owner_id = Column(String(255), nullable=False, index=True)

    # Audit fields
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    members = relationship(
        "ProjectMember",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    tasks = relationship(
        "Task",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Project {self.id}: {self.name}>"


class ProjectMember(Base):
    """
    Junction table linking users to projects with roles.

    Membership existence gates every task and comment operation.
    """

    __tablename__ = "project_members"

    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(255), primary_key=True, index=True)
    role = Column(
        Enum(ProjectRole, values_callable=lambda x: [e.value for e in x], native_enum=False, length=20),
        nullable=False,
        default=ProjectRole.MEMBER,
    )

    # Relationships
    project = relationship("Project", back_populates="members")

    # Constraints
    __table_args__ = (
        CheckConstraint(f"role IN ({_enum_values(ProjectRole)})", name="valid_member_role"),
    )

    def __repr__(self) -> str:
        return f"<ProjectMember {self.user_id} {self.role.value}>"


class Task(Base):
    """Task within a project."""

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(
        String(36),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Core task fields
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    # Use values_callable to store enum values (lowercase) instead of names (UPPERCASE)
    status = Column(
        Enum(TaskStatus, values_callable=lambda obj: [e.value for e in obj], native_enum=False, length=20),
        nullable=False,
        default=TaskStatus.TODO,
    )
    priority = Column(
        Enum(TaskPriority, values_callable=lambda obj: [e.value for e in obj], native_enum=False, length=20),
        nullable=False,
        default=TaskPriority.MEDIUM,
    )
    assignee_id = Column(String(255), nullable=True)
    created_by = Column(String(255), nullable=False)
    due_date = Column(DateTime, nullable=True)
    tags = Column(JSON, nullable=False, default=list)

    # Audit fields
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    project = relationship("Project", back_populates="tasks")
    comments = relationship(
        "Comment",
        back_populates="task",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint(f"status IN ({_enum_values(TaskStatus)})", name="valid_task_status"),
        CheckConstraint(f"priority IN ({_enum_values(TaskPriority)})", name="valid_task_priority"),
        Index("idx_tasks_project", "project_id"),
        Index("idx_tasks_assignee", "assignee_id"),
        Index("idx_tasks_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.title[:30]}>"


class Comment(Base):
    """Comment on a task."""

    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=new_id)
    task_id = Column(String(36), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    author_id = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)

    # Audit fields
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    task = relationship("Task", back_populates="comments")

    __table_args__ = (
        Index("idx_comments_task", "task_id"),
    )

    def __repr__(self) -> str:
        return f"<Comment {self.id} on {self.task_id}>"
