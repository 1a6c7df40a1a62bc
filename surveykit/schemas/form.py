"""Pydantic schemas for the respondent-facing form contract.

These models describe what a client needs to render a survey: grouped and
numbered questions, the widget for each question and the limits the
server will enforce on submission.
"""

from typing import Optional

from pydantic import BaseModel, Field

from surveykit.schemas.survey import ChoiceOption, IconStyle, InputType, QuestionType, ThemeConfig


class ScalePositionView(BaseModel):
    """One selectable position of a star rating or numeric scale."""
    value: int
    color: str
    tier: str = Field(..., description="low/mid/high for stars, NPS band for scales")
    icon: Optional[str] = None


class FormQuestionView(BaseModel):
    id: str
    number: int
    title: str
    type: QuestionType
    widget: str
    required: bool
    options: Optional[list[ChoiceOption]] = None
    placeholder: Optional[str] = None
    input_type: Optional[InputType] = None
    max_length: Optional[int] = None
    icon_style: Optional[IconStyle] = None
    scale: Optional[list[ScalePositionView]] = None


class FormGroupView(BaseModel):
    title: Optional[str] = None
    questions: list[FormQuestionView] = Field(default_factory=list)


class FormView(BaseModel):
    """Renderable survey form.

    Attributes:
        survey_id: Survey identifier
        title: Survey title
        description: Rich text description (escape before rendering as HTML)
        footer_message: Rich text footer
        theme: Cosmetic configuration
        groups: Question groups in survey order
    """
    survey_id: str
    title: str
    description: str = ""
    footer_message: Optional[str] = None
    theme: Optional[ThemeConfig] = None
    groups: list[FormGroupView] = Field(default_factory=list)
