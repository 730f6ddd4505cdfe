"""Composable filter, sort and paginate pipeline for task listings.

A listing is described by a list of predicate clauses. Each clause is a
small parameterized object that renders one SQLAlchemy boolean expression;
the builder ANDs them together and uses the same predicate for the count
query and for the page query.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from sqlalchemy import ColumnElement, Select, and_, case, func, or_, select

from . import models
from .pagination import PageWindow

logger = logging.getLogger("content-core.task_query")

DEFAULT_SORT_FIELD = "createdAt"

# sortBy value -> column
SORT_COLUMNS = {
    "createdAt": models.Task.created_at,
    "dueDate": models.Task.due_date,
}


class TaskClause(Protocol):
    """One optional, independently composable filter condition."""

    def to_expression(self) -> ColumnElement:
        ...


@dataclass(frozen=True)
class ProjectClause:
    """Restrict to tasks of one project. Always present."""

    project_id: str

    def to_expression(self) -> ColumnElement:
        return models.Task.project_id == self.project_id


@dataclass(frozen=True)
class StatusInClause:
    """Status is any of the listed values."""

    statuses: tuple[str, ...]

    def to_expression(self) -> ColumnElement:
        return models.Task.status.in_(self.statuses)


@dataclass(frozen=True)
class PriorityInClause:
    """Priority is any of the listed values."""

    priorities: tuple[str, ...]

    def to_expression(self) -> ColumnElement:
        return models.Task.priority.in_(self.priorities)


@dataclass(frozen=True)
class AssigneeClause:
    """Assignee equals the given user."""

    assignee_id: str

    def to_expression(self) -> ColumnElement:
        return models.Task.assignee_id == self.assignee_id


@dataclass(frozen=True)
class SearchClause:
    """Case-insensitive literal substring of the title or the description."""

    text: str

    def to_expression(self) -> ColumnElement:
        return or_(
            models.Task.title.icontains(self.text, autoescape=True),
            models.Task.description.icontains(self.text, autoescape=True),
        )


def split_csv(value: Optional[str]) -> tuple[str, ...]:
    """Split a comma-separated filter value, dropping blank entries."""
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def priority_rank_expression():
    """CASE expression mapping priority to its rank (low=0 .. critical=3)."""
    return case(
        {priority: rank for priority, rank in models.PRIORITY_RANK.items()},
        value=models.Task.priority,
    )


def resolve_ordering(sort_by: Optional[str], sort_order: Optional[str]) -> list:
    """
    Build ORDER BY expressions for a listing.

    Unknown sort fields fall back to newest first without raising.

    Args:
        sort_by: ``priority``, ``createdAt`` or ``dueDate``
        sort_order: ``asc``; anything else sorts descending

    Returns:
        List of order_by expressions
    """
    ascending = sort_order == "asc"

    if sort_by == "priority":
        rank = priority_rank_expression()
        return [rank.asc() if ascending else rank.desc(), models.Task.created_at.desc()]

    column = SORT_COLUMNS.get(sort_by or "")
    if column is None:
        if sort_by and sort_by != DEFAULT_SORT_FIELD:
            logger.debug(f"Unknown sort field '{sort_by}', using createdAt desc")
        return [models.Task.created_at.desc()]

    return [column.asc() if ascending else column.desc()]


class TaskQueryBuilder:
    """Accumulates predicate clauses for one project's task listing."""

    def __init__(self, project_id: str):
        self._clauses: list[TaskClause] = [ProjectClause(project_id)]

    @classmethod
    def from_filters(cls, project_id: str, filters) -> "TaskQueryBuilder":
        """
        Build the clause list from a set of filters.

        Args:
            project_id: Project UUID
            filters: Object with status, priority, assignee_id and search attributes

        Returns:
            Builder holding one clause per provided filter
        """
        return (
            cls(project_id)
            .with_statuses(filters.status)
            .with_priorities(filters.priority)
            .with_assignee(filters.assignee_id)
            .with_search(filters.search)
        )

    def add(self, clause: TaskClause) -> "TaskQueryBuilder":
        self._clauses.append(clause)
        return self

    def with_statuses(self, value: Optional[str]) -> "TaskQueryBuilder":
        statuses = split_csv(value)
        if statuses:
            self.add(StatusInClause(statuses))
        return self

    def with_priorities(self, value: Optional[str]) -> "TaskQueryBuilder":
        priorities = split_csv(value)
        if priorities:
            self.add(PriorityInClause(priorities))
        return self

    def with_assignee(self, assignee_id: Optional[str]) -> "TaskQueryBuilder":
        if assignee_id:
            self.add(AssigneeClause(assignee_id))
        return self

    def with_search(self, text: Optional[str]) -> "TaskQueryBuilder":
        if text:
            self.add(SearchClause(text))
        return self

    @property
    def clauses(self) -> tuple[TaskClause, ...]:
        return tuple(self._clauses)

    def predicate(self) -> ColumnElement:
        return and_(*(clause.to_expression() for clause in self._clauses))

    def count_statement(self) -> Select:
        """COUNT over the full predicate, without any window."""
        return select(func.count()).select_from(models.Task).where(self.predicate())

    def page_statement(
        self,
        window: PageWindow,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> Select:
        """Ordered, windowed SELECT over the same predicate."""
        return (
            select(models.Task)
            .where(self.predicate())
            .order_by(*resolve_ordering(sort_by, sort_order))
            .offset(window.offset)
            .limit(window.page_size)
        )
