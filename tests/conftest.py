# ABOUTME: Pytest fixtures and configuration
# ABOUTME: Provides test database, fake clock, classroom with workbook documents, and API client fixtures

import pytest
from datetime import datetime, timedelta
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from classlog.config import Settings
from classlog.dependencies import get_classroom
from classlog.main import app
from classlog.models.database import Base
from classlog.services.classroom import Classroom


# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeClock:
    """Settable local clock handed to the classroom in place of datetime.now."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(scope="function", autouse=True)
def setup_database():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provides a database session for tests."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 4, 10, 0, 0))


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=TEST_DATABASE_URL,
        documents_dir=str(tmp_path / "documents"),
        active_document_id=None,
        lock_timeout_ms=200,
        batch_lock_timeout_ms=200,
        bathroom_limit_default=3,
    )


@pytest.fixture
def classroom(settings, clock):
    """Classroom with no document attached yet."""
    return Classroom(TestingSessionLocal, settings, clock=clock)


@pytest.fixture
def attached(classroom):
    """Classroom with an attached class log holding empty sheets."""
    result = classroom.writes.build_sheets(seed=False, name="Test Log")
    assert result["ok"], result["message"]
    return classroom


@pytest.fixture
def sample_class(attached):
    """
    Roster A, B in P1 and C in P2 with ids 1-3; issues X and Y.
    """
    assert attached.writes.import_roster([
        {"name": "A", "period": "P1", "student_id": "1"},
        {"name": "B", "period": "P1", "student_id": "2"},
        {"name": "C", "period": "P2", "student_id": "3"},
    ])["ok"]
    assert attached.writes.add_issue("X")["ok"]
    assert attached.writes.add_issue("Y")["ok"]
    return attached


@pytest.fixture
def client(classroom):
    """Provides a FastAPI test client bound to the test classroom."""
    app.dependency_overrides[get_classroom] = lambda: classroom
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def session_factory():
    """Session factory bound to the test database."""
    return TestingSessionLocal
