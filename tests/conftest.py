"""Shared fixtures: an in-memory SQLite database per test and a wired TestClient."""

import os

# Must be set before the application modules build their engine
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dropout_monitor.core.config import RiskConfig
from dropout_monitor.core.database import Base, get_db
from dropout_monitor.main import create_app
from dropout_monitor.models import risk_evaluation, student  # noqa: F401


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def risk_config():
    return RiskConfig()


@pytest.fixture
def client(session_factory, risk_config):
    app = create_app(risk_config=risk_config)

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


def make_student(
    student_id,
    name=None,
    attendance=None,
    assignments=None,
    contacts=None,
):
    """Build a raw student document as it would arrive in a batch."""
    document = {
        "student_id": student_id,
        "student_name": name or f"Student {student_id}",
    }
    if attendance is not None:
        document["attendance"] = attendance
    if assignments is not None:
        document["assignments"] = assignments
    if contacts is not None:
        document["contacts"] = contacts
    return document


LOW_RISK = {
    "attendance": [{"date": f"2024-03-0{day}", "status": "ATTEND"} for day in (1, 2, 3)],
    "assignments": [
        {"date": "2024-03-04", "name": "Essay", "submitted": True},
        {"date": "2024-03-11", "name": "Quiz", "submitted": True},
    ],
    "contacts": [],
}

MEDIUM_RISK = {
    "attendance": [
        {"date": "2024-03-01", "status": "ABSENT"},
        {"date": "2024-03-02", "status": "ATTEND"},
    ],
    "assignments": [{"date": "2024-03-04", "name": "Essay", "submitted": False}],
    "contacts": [],
}

HIGH_RISK = {
    "attendance": [
        {"date": "2024-03-01", "status": "ABSENT"},
        {"date": "2024-03-02", "status": "ABSENT"},
        {"date": "2024-03-03", "status": "ATTEND"},
    ],
    "assignments": [{"date": "2024-03-04", "name": "Essay", "submitted": False}],
    "contacts": [
        {"date": "2024-03-05", "status": "FAILED"},
        {"date": "2024-03-06", "status": "FAILED"},
    ],
}
