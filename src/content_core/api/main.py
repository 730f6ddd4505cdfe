"""Content service FastAPI application factory."""
import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker

from .. import models, schemas
from ..config import Settings, get_settings
from ..database import create_db_engine, create_session_factory, init_db
from ..errors import AuthError, ContentServiceError, ForbiddenError, NotFoundError, ValidationError
from ..notifications import NotificationClient, Notifier
from .routers import comments, projects, tasks

logger = logging.getLogger("content-core")

SERVICE_NAME = "content-service"

ERROR_STATUS = {
    NotFoundError: 404,
    ForbiddenError: 403,
    ValidationError: 400,
    AuthError: 401,
}


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def _error_body(exc: ContentServiceError) -> dict:
    body = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, ValidationError):
        body["details"] = exc.details
    return body


async def content_service_error_handler(request: Request, exc: ContentServiceError) -> JSONResponse:
    status_code = ERROR_STATUS.get(type(exc), 500)
    if status_code >= 500:
        logger.error(f"Unhandled service error on {request.url.path}: {exc!r}")
    return JSONResponse(status_code=status_code, content=_error_body(exc))


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "path": ".".join(str(part) for part in error["loc"] if part not in ("body", "query")),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    error = ValidationError("Validation failed", details=details)
    return JSONResponse(status_code=400, content=_error_body(error))


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[sessionmaker] = None,
    notifier: Optional[Notifier] = None,
    clock: Optional[Callable] = None,
) -> FastAPI:
    """
    Build the application and its collaborators.

    Args:
        settings: Settings (defaults to environment settings)
        session_factory: Session factory (defaults to one built from settings.database_url)
        notifier: Notification sender (defaults to an HTTP NotificationClient)
        clock: Timestamp source for created_at/updated_at

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    if session_factory is None:
        engine = create_db_engine(settings.database_url)
        init_db(engine)
        session_factory = create_session_factory(engine)

    owns_notifier = notifier is None
    if owns_notifier:
        notifier = NotificationClient.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {SERVICE_NAME}")
        yield
        if owns_notifier:
            notifier.close(wait=False)

    app = FastAPI(
        title="Content Service",
        description="Projects, tasks and comments with role-based membership",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.notifier = notifier
    app.state.clock = clock or models.utcnow

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ContentServiceError, content_service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    app.include_router(projects.router, prefix="/projects")
    app.include_router(tasks.router)
    app.include_router(comments.router)

    @app.get("/health", response_model=schemas.HealthResponse)
    def health_check():
        """Health check endpoint."""
        return schemas.HealthResponse(
            status="ok",
            service=SERVICE_NAME,
            timestamp=models.utcnow(),
        )

    return app
