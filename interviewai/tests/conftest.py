"""
Pytest fixtures for InterviewAI API and client tests.
Uses in-memory SQLite, provides a test user, auth token and an ASGI-bound API client.
"""
import os

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Use in-memory SQLite for tests - set before config/session load
# Must override any .env DATABASE_URL
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["OPENROUTER_API_KEY"] = ""

from interviewai.app.db.base import Base
from interviewai.main import app
from interviewai.app.core.dependencies import get_db
from interviewai.app.core.security import create_access_token, get_password_hash
from interviewai.app.models.user import User
from interviewai.client.api import InterviewAPI

# In-memory SQLite for tests - StaticPool ensures all sessions share same DB
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Patch the session module so app uses our test engine
import interviewai.app.db.session as session_module
session_module.engine = engine
session_module.SessionLocal = TestingSessionLocal
# main.py imports engine directly; patch so startup uses our engine
import interviewai.main as main_module
main_module.engine = engine


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db

TEST_PASSWORD = "testpass123"


@pytest.fixture(scope="function")
def db_session():
    """Create tables and a fresh DB session per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_user(db_session):
    """Create a test user in the DB."""
    user = User(
        id=1,
        name="Test User",
        email="test@example.com",
        hashed_password=get_password_hash(TEST_PASSWORD),
        credits=5,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def other_user(db_session):
    """A second account, for ownership checks."""
    user = User(
        id=2,
        name="Other User",
        email="other@example.com",
        hashed_password=get_password_hash(TEST_PASSWORD),
        credits=5,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def token_for(user) -> str:
    return create_access_token(data={"sub": str(user.id), "email": user.email})


@pytest.fixture
def auth_headers(test_user):
    """Bearer token for test user."""
    return {"Authorization": f"Bearer {token_for(test_user)}"}


@pytest.fixture
def other_headers(other_user):
    return {"Authorization": f"Bearer {token_for(other_user)}"}


@pytest.fixture
def client(db_session, test_user):
    """TestClient with DB and test user pre-seeded."""
    return TestClient(app)


@pytest.fixture
def resume_payload():
    return {
        "title": "Backend Resume",
        "personalDetails": {"name": "Test User", "email": "test@example.com", "phone": "555-0100"},
        "introduction": "Backend engineer with 6 years of experience building APIs.",
        "experience": [
            {
                "company": "Acme",
                "position": "Senior Engineer",
                "timeStart": "2020",
                "timeEnd": "2024",
                "description": "Owned the billing platform.",
                "achievements": ["Reduced latency by 40%"],
            }
        ],
        "skills": ["Python", "PostgreSQL"],
    }


@pytest.fixture
def make_api(db_session, test_user):
    """Build an InterviewAPI bound to the ASGI app (call inside a running event loop)."""

    def _make(user=None) -> InterviewAPI:
        http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver/api")
        return InterviewAPI(token=token_for(user or test_user), client=http)

    return _make
