"""Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import os
import tempfile
from datetime import datetime, timezone
from typing import Generator

import pytest
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Set required environment variables for tests BEFORE importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ADMIN_API_TOKEN", "test_admin_token")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("PUBLIC_BASE_URL", "https://forms.example.com")
os.environ.setdefault("ASSET_DIR", os.path.join(tempfile.gettempdir(), f"surveykit-test-assets-{os.getpid()}"))

from surveykit.models.database import Base, build_engine
from surveykit.schemas.survey import Survey
from surveykit.services.survey_store import SqlSurveyStore


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine with SQLite in-memory database.

    Note:
        StaticPool keeps a single connection so the TestClient threadpool
        sees the same in-memory database as the test body.
    """
    engine = build_engine("sqlite:///:memory:", poolclass=StaticPool)

    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session.

    Yields:
        Session: SQLAlchemy session for testing
    """
    TestSessionLocal = sessionmaker(
        bind=db_engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )

    session = TestSessionLocal()

    yield session

    session.rollback()
    session.close()


@pytest.fixture
def sql_store(db_session) -> SqlSurveyStore:
    return SqlSurveyStore(db_session)


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_survey_data() -> dict:
    """A survey exercising every question type, with one section header."""
    return {
        "title": "Customer Feedback",
        "description": "<p>Tell us about your visit</p>",
        "questions": [
            {"id": "name", "type": "short-text", "title": "Your name", "required": True},
            {"id": "comments", "type": "long-text", "title": "Comments"},
            {"id": "about", "type": "section-header", "title": "About the visit"},
            {
                "id": "color",
                "type": "single-choice",
                "title": "Favorite color",
                "options": [
                    {"label": "Rojo", "value": "red"},
                    {"label": "Azul", "value": "blue"},
                ],
            },
            {
                "id": "hobbies",
                "type": "multi-choice",
                "title": "Hobbies",
                "options": [
                    {"label": "Reading", "value": "reading"},
                    {"label": "Running", "value": "running"},
                ],
            },
            {
                "id": "city",
                "type": "dropdown",
                "title": "City",
                "options": [
                    {"label": "Lima", "value": "lima"},
                    {"label": "Quito", "value": "quito"},
                ],
            },
            {"id": "visit_date", "type": "date", "title": "Visit date"},
            {"id": "stars", "type": "star-rating", "title": "Rate us"},
            {"id": "nps", "type": "numeric-scale", "title": "Would you recommend us?"},
        ],
        "thank_you_message": "<b>Thanks!</b>",
    }


@pytest.fixture
def sample_survey(sample_survey_data) -> Survey:
    return Survey(id="feedback", **sample_survey_data)


@pytest.fixture
def private_survey() -> Survey:
    return Survey(
        id="staff",
        title="Staff survey",
        privacy="private",
        allowed_emails=["Ana@Example.com", " bob@example.com "],
        limit_one_response=True,
        questions=[
            {"id": "mood", "type": "short-text", "title": "How are you?", "required": True},
        ],
    )
