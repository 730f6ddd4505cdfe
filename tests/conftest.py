"""Shared fixtures: in-memory database, services and an HTTP test client."""
import pytest
from fastapi.testclient import TestClient

from content_core.api.main import create_app
from content_core.config import Settings
from content_core.database import create_db_engine, create_session_factory, init_db
from content_core.services import CommentService, ProjectService, TaskService

from .support import MEMBER, OWNER, VIEWER, FakeNotifier, TickingClock


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def project_service(db, clock):
    return ProjectService(db, clock=clock)


@pytest.fixture
def task_service(db, notifier, clock):
    return TaskService(db, notifier=notifier, clock=clock)


@pytest.fixture
def comment_service(db, notifier, clock):
    return CommentService(db, notifier=notifier, clock=clock)


@pytest.fixture
def project(project_service):
    """A project owned by OWNER with MEMBER and VIEWER added."""
    project = project_service.create_project("Website", "Relaunch", OWNER)
    project_service.add_member(project.id, MEMBER, OWNER, "member")
    project_service.add_member(project.id, VIEWER, OWNER, "viewer")
    return project


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", notifications_enabled=False)


@pytest.fixture
def client(settings, session_factory, notifier, clock):
    app = create_app(settings, session_factory=session_factory, notifier=notifier, clock=clock)
    with TestClient(app) as test_client:
        yield test_client

