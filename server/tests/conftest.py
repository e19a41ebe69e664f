"""Shared test configuration and fixtures for Church RSVP tests"""

import logging
import os

from tests.config import test_config

# church_rsvp reads its configuration at import time
os.environ["DATABASE_URL"] = test_config["database_url"]
os.environ["MAILGUN_API_KEY"] = test_config["mailgun_api_key"]
os.environ["MAILGUN_DOMAIN"] = test_config["mailgun_domain"]
os.environ["SENDER_EMAIL"] = test_config["sender_email"]

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import church_rsvp.models  # noqa: F401
from church_rsvp.domains import EVENTS
from church_rsvp.main import app
from church_rsvp.models.database import get_db
from church_rsvp.models.registration import RegistrationKind
from church_rsvp.models.subject import Subject
from church_rsvp.services.notification_service import get_dispatcher
from church_rsvp.services.registration_store import SqlRegistrationStore
from church_rsvp.services.registration_workflow import RegistrationWorkflow
from church_rsvp.services.subject_service import SubjectService
from tests.fakes import RecordingDispatcher

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@pytest.fixture
def _engine():
    """Fresh in-memory database per test"""
    engine = create_engine(
        test_config["database_url"],
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    yield engine

    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def _db_session(_engine):
    """Private DB session for fixtures only.

    Do not use this fixture directly in tests. Prefer higher-level fixtures
    like `subject_factory`, `event_store` or `make_workflow` to avoid
    coupling tests to the session internals.
    """
    session = Session(_engine)

    yield session

    # Cleanup
    session.close()


@pytest.fixture
def subject_service(_db_session):
    """Create a SubjectService instance for testing"""
    return SubjectService(_db_session)


@pytest.fixture
def subject_factory(_db_session):
    """Insert a subject, optionally with a fixed id"""

    def _create(
        kind: RegistrationKind = RegistrationKind.EVENT,
        title: str = "Sunday Potluck",
        subject_id=None,
        **fields,
    ) -> Subject:
        subject = Subject(id=subject_id, kind=kind, title=title, **fields)
        _db_session.add(subject)
        _db_session.commit()
        _db_session.refresh(subject)
        return subject

    return _create


@pytest.fixture
def store_for(_db_session):
    """Build a SqlRegistrationStore for any domain"""

    def _store(domain=EVENTS) -> SqlRegistrationStore:
        return SqlRegistrationStore(_db_session, domain)

    return _store


@pytest.fixture
def event_store(store_for):
    return store_for(EVENTS)


@pytest.fixture
def break_commits(_db_session, monkeypatch):
    """Make every commit fail the way a dropped database connection does"""
    from sqlalchemy.exc import OperationalError

    def _break():
        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("server closed the connection"))

        monkeypatch.setattr(_db_session, "commit", failing_commit)

    return _break


@pytest.fixture
def break_reads(_db_session, monkeypatch):
    """Make every query fail the way an unreachable database does"""
    from sqlalchemy.exc import OperationalError

    def _break():
        def failing_exec(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("could not connect to server"))

        monkeypatch.setattr(_db_session, "exec", failing_exec)

    return _break


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def make_workflow(store_for, dispatcher):
    """Build a RegistrationWorkflow; the recording dispatcher is the default"""

    def _make(domain=EVENTS, notifier=None) -> RegistrationWorkflow:
        return RegistrationWorkflow(
            domain, store_for(domain), notifier if notifier is not None else dispatcher
        )

    return _make


@pytest.fixture
def client(_db_session, dispatcher):
    """Test client wired to the test database and the recording dispatcher"""

    # Store original overrides to restore them later
    original_overrides = app.dependency_overrides.copy()

    def get_test_db():
        return _db_session

    app.dependency_overrides.clear()
    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher

    yield TestClient(app)

    # Completely restore original state
    app.dependency_overrides.clear()
    app.dependency_overrides.update(original_overrides)
