"""
Shared fixtures: in-memory SQLite database, API client with the database
dependency overridden, and an authenticated user.
"""
import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")

from app.main import app  # noqa: E402
from app.db.base import Base
from app.db.init_db import seed_default_plans
from app.db.models.user import User
from app.db.models.subscription import Subscription
from app.core.auth_dependency import get_db
from app.core.security import hash_password, create_access_token


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override get_db dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def db():
    """Create a fresh database (with the default plans) for each test."""
    Base.metadata.create_all(bind=test_engine)
    db = TestSessionLocal()
    seed_default_plans(db)
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def test_user(db):
    user = User(
        full_name="Asha Rao",
        email="asha@example.com",
        password_hash=hash_password("testpass123"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def auth_headers(test_user):
    token = create_access_token({"sub": test_user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def subscribe(db):
    """Factory: give a user an active subscription on a plan."""
    def _subscribe(user, plan_id="plan_mock_monthly", status="active", **fields):
        sub = Subscription(user_id=user.id, plan_id=plan_id, status=status, **fields)
        db.add(sub)
        db.commit()
        db.refresh(sub)
        return sub
    return _subscribe


@pytest.fixture
def interview_config():
    return {
        "candidateName": "Asha Rao",
        "jobRole": "Backend Engineer",
        "jobDescription": "Build APIs in Python",
        "experienceLevel": "Mid",
        "interviewType": "technical",
        "duration": 30,
    }
