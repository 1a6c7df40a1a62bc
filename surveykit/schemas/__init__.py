"""Pydantic schemas for data validation.

This package contains all Pydantic models for survey definitions,
responses, form views and API payloads.
"""

from surveykit.schemas.survey import (
    QuestionType,
    InputType,
    IconStyle,
    Privacy,
    ChoiceOption,
    InputValidation,
    TextStyle,
    ThemeConfig,
    Question,
    Survey,
    SavedTheme,
)
from surveykit.schemas.response import AnswerMap, AnswerValue, ResponseRecord

__all__ = [
    "QuestionType",
    "InputType",
    "IconStyle",
    "Privacy",
    "ChoiceOption",
    "InputValidation",
    "TextStyle",
    "ThemeConfig",
    "Question",
    "Survey",
    "SavedTheme",
    "AnswerMap",
    "AnswerValue",
    "ResponseRecord",
]
