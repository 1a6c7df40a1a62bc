"""Pydantic schemas for stored responses.

An answer value is a string (text, single choice, dropdown, date), an
integer (ratings) or a list of strings (multi choice). Booleans may appear
in records imported from older clients and are displayed as yes/no.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field

AnswerValue = Union[bool, int, str, list[str]]

AnswerMap = dict[str, AnswerValue]


class ResponseRecord(BaseModel):
    """One respondent's submitted answers.

    Attributes:
        id: Store-generated identifier
        survey_id: Owning survey
        answers: Question id to answer value
        submitted_at: Submission time (UTC)
        respondent_email: Normalized email captured by the access gate
    """
    id: str
    survey_id: str
    answers: AnswerMap = Field(default_factory=dict)
    submitted_at: datetime
    respondent_email: Optional[str] = None
