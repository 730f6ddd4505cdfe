"""FastAPI dependencies: caller identity, sessions and service wiring.

Everything is read from ``app.state``, which ``create_app`` fills in; there
is no module-level engine or session factory.
"""
import logging
from dataclasses import dataclass
from typing import Generator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from ..database import session_scope
from ..errors import AuthError
from ..services import CommentService, ProjectService, TaskService

logger = logging.getLogger("content-core.api.dependencies")


@dataclass(frozen=True)
class CurrentUser:
    """Caller identity asserted by the upstream gateway.

    ``role`` is a global role (for example ``admin``), unrelated to the
    caller's role inside any particular project.
    """

    user_id: str
    email: str
    role: str


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> CurrentUser:
    """
    Resolve the caller from the X-User-* headers.

    Raises:
        AuthError: If any identity header is missing
    """
    if not x_user_id or not x_user_email or not x_user_role:
        raise AuthError("Missing authentication headers")
    return CurrentUser(user_id=x_user_id, email=x_user_email, role=x_user_role)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency function to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    yield from session_scope(request.app.state.session_factory)


def get_project_service(request: Request, db: Session = Depends(get_db)) -> ProjectService:
    settings = request.app.state.settings
    return ProjectService(
        db,
        clock=request.app.state.clock,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )


def get_task_service(request: Request, db: Session = Depends(get_db)) -> TaskService:
    settings = request.app.state.settings
    return TaskService(
        db,
        notifier=request.app.state.notifier,
        clock=request.app.state.clock,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )


def get_comment_service(request: Request, db: Session = Depends(get_db)) -> CommentService:
    return CommentService(
        db,
        notifier=request.app.state.notifier,
        clock=request.app.state.clock,
    )
