"""Pydantic schemas for survey definitions.

A survey is a document: metadata, an optional theme, access rules and an
ordered list of questions. Section headers live in the same list as the
questions and only mark where a new group starts.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class QuestionType(str, Enum):
    """Valid question types in survey definitions."""
    SHORT_TEXT = "short-text"
    LONG_TEXT = "long-text"
    SINGLE_CHOICE = "single-choice"
    MULTI_CHOICE = "multi-choice"
    DROPDOWN = "dropdown"
    DATE = "date"
    STAR_RATING = "star-rating"
    NUMERIC_SCALE = "numeric-scale"
    SECTION_HEADER = "section-header"


CHOICE_TYPES = frozenset({
    QuestionType.SINGLE_CHOICE,
    QuestionType.MULTI_CHOICE,
    QuestionType.DROPDOWN,
})

DEFAULT_STAR_MAX = 5
DEFAULT_SCALE_MAX = 10


class InputType(str, Enum):
    """Character class accepted by a free-text question."""
    ANY = "any"
    LETTERS_ONLY = "letters-only"
    DIGITS_ONLY = "digits-only"


class IconStyle(str, Enum):
    """Visual variant of a star-rating question."""
    STAR = "star"
    HEART = "heart"
    USER = "user"
    SMILE = "smile"


class Privacy(str, Enum):
    """Who may open a survey."""
    PUBLIC = "public"
    PRIVATE = "private"


class ChoiceOption(BaseModel):
    """A single option of a choice-like question.

    Attributes:
        id: Optional stable identifier used by editors
        label: Text shown to the respondent (e.g., "Rojo")
        value: Value stored in the answer map (e.g., "red")
    """
    id: Optional[str] = Field(None, description="Editor identifier")
    label: str = Field(..., min_length=1, description="Display text for option")
    value: str = Field(..., min_length=1, description="Value stored in answers")


class InputValidation(BaseModel):
    """Live-input rules for free-text questions."""
    input_type: InputType = Field(default=InputType.ANY, description="Accepted character class")
    max_length: Optional[int] = Field(None, ge=1, description="Maximum text length")


class TextStyle(BaseModel):
    text_align: Optional[str] = Field(None, pattern=r"^(left|center|right)$")
    is_bold: Optional[bool] = None
    is_italic: Optional[bool] = None
    color: Optional[str] = None
    font_size: Optional[int] = Field(None, ge=1)
    font_family: Optional[str] = None


class ThemeConfig(BaseModel):
    """Cosmetic attributes of a survey.

    Only ``active_color`` affects behavior: when set it overrides the
    tiered colors of rating widgets.
    """
    background_color: str = Field(default="#ffffff")
    banner_url: Optional[str] = None
    active_color: Optional[str] = None
    section_background: Optional[str] = None
    title_style: Optional[TextStyle] = None
    description_style: Optional[TextStyle] = None
    question_title_style: Optional[TextStyle] = None
    section_title_style: Optional[TextStyle] = None
    answer_style: Optional[TextStyle] = None


class Question(BaseModel):
    """A single survey item.

    Attributes:
        id: Unique identifier within the survey
        type: Question type
        title: Prompt text (or section title for section headers)
        required: Whether an answer is needed before submission
        options: Options for choice-like types
        validation: Live-input rules for text types
        icon_style: Visual variant for star ratings
        max_rating: Upper bound for star ratings and numeric scales
    """
    id: str = Field(..., min_length=1, description="Unique question identifier")
    type: QuestionType = Field(..., description="Question type")
    title: str = Field(default="", description="Prompt or section title")
    required: bool = Field(default=False, description="Answer required")
    options: Optional[list[ChoiceOption]] = Field(None, description="Choice options")
    validation: Optional[InputValidation] = Field(None, description="Text input rules")
    icon_style: Optional[IconStyle] = Field(None, description="Star rating variant")
    max_rating: Optional[int] = Field(None, ge=2, le=10, description="Rating upper bound")

    @model_validator(mode="before")
    @classmethod
    def normalize_type_specific_fields(cls, data):
        """Drop fields that have no meaning for the declared type."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("type") == QuestionType.SECTION_HEADER:
            data["required"] = False
        if data.get("options") == []:
            data["options"] = None
        return data

    @model_validator(mode="after")
    def validate_question_requirements(self):
        """Validate option rules for the declared type."""
        if self.options and self.type not in CHOICE_TYPES:
            raise ValueError(f"Question '{self.id}' of type '{self.type.value}' cannot have options")

        if self.options:
            values = self.option_values()
            if len(values) != len(set(values)):
                duplicates = sorted({v for v in values if values.count(v) > 1})
                raise ValueError(f"Duplicate option values in question '{self.id}': {duplicates}")

        return self

    @property
    def is_section_header(self) -> bool:
        return self.type == QuestionType.SECTION_HEADER

    @property
    def is_choice(self) -> bool:
        return self.type in CHOICE_TYPES

    @property
    def scale_max(self) -> int:
        """Highest selectable position for rating types."""
        if self.max_rating is not None:
            return self.max_rating
        if self.type == QuestionType.STAR_RATING:
            return DEFAULT_STAR_MAX
        return DEFAULT_SCALE_MAX

    def option_values(self) -> list[str]:
        return [option.value for option in self.options or []]

    def find_option(self, value: str) -> Optional[ChoiceOption]:
        for option in self.options or []:
            if option.value == value:
                return option
        return None


class Survey(BaseModel):
    """Complete survey definition.

    Attributes:
        id: Store-assigned identifier, never changed after creation
        title: Survey title
        description: Rich text shown above the questions
        questions: Ordered questions and section headers
        theme: Optional cosmetic configuration
        privacy: Public or private
        allowed_emails: Allow-list for private surveys (normalized)
        limit_one_response: Whether a respondent may answer only once
        thank_you_message: Rich text shown after submission
        footer_message: Rich text shown below the form
    """
    id: Optional[str] = Field(None, description="Survey identifier")
    title: str = Field(default="", description="Survey title")
    description: str = Field(default="", description="Rich text description")
    questions: list[Question] = Field(default_factory=list)
    theme: Optional[ThemeConfig] = None
    privacy: Privacy = Field(default=Privacy.PUBLIC)
    allowed_emails: Optional[list[str]] = Field(None, description="Private access allow-list")
    limit_one_response: bool = Field(default=False)
    thank_you_message: Optional[str] = None
    footer_message: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("allowed_emails")
    @classmethod
    def normalize_allowed_emails(cls, v):
        """Trim, lower-case and de-duplicate allow-list entries."""
        if v is None:
            return v
        normalized = []
        for email in v:
            email = email.strip().lower()
            if email and email not in normalized:
                normalized.append(email)
        return normalized

    @model_validator(mode="after")
    def validate_survey_structure(self):
        """Validate question identifiers are unique."""
        question_ids = [question.id for question in self.questions]
        if len(question_ids) != len(set(question_ids)):
            duplicates = sorted({qid for qid in question_ids if question_ids.count(qid) > 1})
            raise ValueError(f"Duplicate question IDs found: {duplicates}")
        return self

    @property
    def is_private(self) -> bool:
        return self.privacy == Privacy.PRIVATE

    def get_question(self, question_id: str) -> Optional[Question]:
        """Get question by ID.

        Args:
            question_id: Question identifier

        Returns:
            Question if found, None otherwise
        """
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def answerable_questions(self) -> list[Question]:
        """Questions that collect answers, in survey order."""
        return [question for question in self.questions if not question.is_section_header]


class SavedTheme(BaseModel):
    """A named theme preset that can be applied to any survey."""
    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=200)
    config: ThemeConfig
    created_at: Optional[datetime] = None
