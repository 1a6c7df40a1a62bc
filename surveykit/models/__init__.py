"""Database models and session management.

This package contains all SQLAlchemy ORM models and database utilities.
"""

from surveykit.models.database import Base, engine, SessionLocal, get_db
from surveykit.models.survey import SurveyDocument
from surveykit.models.response import SurveyResponse
from surveykit.models.theme import ThemePreset

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "get_db",
    "SurveyDocument",
    "SurveyResponse",
    "ThemePreset",
]
