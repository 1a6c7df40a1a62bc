"""Pydantic schemas for HTTP request and response bodies."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from surveykit.schemas.form import FormView
from surveykit.schemas.survey import Privacy, ThemeConfig


class AccessRequest(BaseModel):
    email: str = Field(..., max_length=320, description="Email typed by the respondent")


class SubmitResponseRequest(BaseModel):
    """Answers posted by the respondent.

    Attributes:
        answers: Question id to raw value (string, number or list of strings)
        email: Email that unlocked a private survey
    """
    answers: dict[str, Any] = Field(default_factory=dict)
    email: Optional[str] = Field(None, max_length=320)


class SubmitResponseResult(BaseModel):
    response_id: str
    state: str
    thank_you_message: Optional[str] = None


class SurveyAccessView(BaseModel):
    """Respondent landing payload: the form only when access is open."""
    survey_id: str
    title: str
    privacy: Privacy
    state: str
    message: Optional[str] = None
    form: Optional[FormView] = None


class SurveySummaryView(BaseModel):
    id: str
    title: str
    privacy: Privacy
    question_count: int
    created_at: Optional[datetime] = None
    share_url: str


class ShareLinksView(BaseModel):
    survey_id: str
    share_url: str
    results_url: str
    embed_code: str


class ImportQuestionsRequest(BaseModel):
    text: str = Field(..., description="One question per line: title | type | options")


class CreateThemeRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    config: ThemeConfig


class CreatedView(BaseModel):
    id: str


class AssetUploadView(BaseModel):
    url: str
