"""Pydantic schemas for the admin results dashboard."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ResultRow(BaseModel):
    """One response projected onto the survey's answerable questions."""
    response_id: str
    submitted_at: datetime
    respondent_email: Optional[str] = None
    cells: list[str] = Field(default_factory=list)


class ResultsSummary(BaseModel):
    """Simple counts shown above the results table.

    Attributes:
        total: Number of responses
        latest_submitted_at: Most recent submission, None without responses
        recent_count: Responses submitted within the trailing window
        window_days: Length of the trailing window
    """
    total: int
    latest_submitted_at: Optional[datetime] = None
    recent_count: int
    window_days: int


class ResultsView(BaseModel):
    survey_id: str
    title: str
    columns: list[str]
    rows: list[ResultRow]
    summary: ResultsSummary
