import pytest
import os
from datetime import date
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["OPENROUTER_API_KEY"] = "test-key"
os.environ["AI_MODEL_NAME"] = "test/model"
os.environ["AI_MAX_ATTEMPTS"] = "1"

from app.database import Base, get_db
from app.main import app
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    # Use sessionmaker with the active connection
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()

@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class CompletionStub:
    """
    Stands in for the external completion service.

    ``handler`` receives (content, kwargs) and returns the reply text or
    raises; every call is recorded in ``calls``.
    """

    def __init__(self):
        self.calls = []
        self.handler = lambda content, kwargs: ""

    def __call__(self, content, **kwargs):
        self.calls.append((content, kwargs))
        return self.handler(content, kwargs)

    @property
    def synthesis_calls(self):
        return [c for c in self.calls if isinstance(c[0], str)]

    @property
    def vision_calls(self):
        return [c for c in self.calls if isinstance(c[0], list)]


@pytest.fixture(scope="function")
def completion(monkeypatch):
    """Replace every outbound completion call with a scripted stub."""
    stub = CompletionStub()
    monkeypatch.setattr("app.services.synthesis.call_completion", stub)
    monkeypatch.setattr("app.services.extraction.call_completion", stub)
    return stub


@pytest.fixture(scope="function")
def manager(db_session):
    from app.models.user import User, UserRole
    user = User(email="manager@example.com", name="Morgan Manager", role=UserRole.MANAGER)
    db_session.add(user)
    db_session.commit()
    return user

@pytest.fixture(scope="function")
def employee(db_session, manager):
    from app.models.employee import Employee
    emp = Employee(
        name="Jordan Employee", email="jordan@example.com",
        position="Senior Developer", manager_id=manager.id
    )
    db_session.add(emp)
    db_session.commit()
    return emp

@pytest.fixture(scope="function")
def cycle(db_session, manager):
    from app.models.review_cycle import ReviewCycle
    rc = ReviewCycle(
        name="2024 Annual Review", year=2024,
        start_date=date(2024, 1, 1), end_date=date(2024, 12, 31),
        status="active", created_by=manager.id
    )
    db_session.add(rc)
    db_session.commit()
    return rc

@pytest.fixture(autouse=True)
def no_network(monkeypatch):
    """Any completion call that is not stubbed fails like an unreachable service."""
    import requests

    def _refuse(*args, **kwargs):
        raise requests.exceptions.ConnectionError("network disabled in tests")

    monkeypatch.setattr("app.services.completion_client.requests.post", _refuse)
