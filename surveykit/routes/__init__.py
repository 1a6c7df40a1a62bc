"""Routes package for FastAPI endpoints.

This package contains all API route modules for SurveyKit.
"""

from surveykit.routes import admin, health, respondent

__all__ = ["admin", "health", "respondent"]
