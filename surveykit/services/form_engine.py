"""Form rendering and answer validation engine.

This module maps every question type to its editing contract: how raw
input is filtered and coerced into a stored answer value, which widget
renders it, and what the submission gate requires. Every consumer
dispatches over ``QuestionType`` exhaustively, so a new type fails loudly
until each site handles it.
"""

import re
from datetime import date
from enum import Enum
from typing import Any, Optional

from surveykit.schemas.form import FormGroupView, FormQuestionView, FormView, ScalePositionView
from surveykit.schemas.response import AnswerMap, AnswerValue
from surveykit.schemas.survey import (
    IconStyle,
    InputType,
    Question,
    QuestionType,
    Survey,
)
from surveykit.services.sections import group_questions
from surveykit.logging_config import get_logger

logger = get_logger(__name__)

_NON_DIGITS = re.compile(r"[^0-9]")
_DIGITS = re.compile(r"[0-9]")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class AnswerValidationError(Exception):
    """Raised when a value does not fit its question's contract."""

    def __init__(self, question_id: str, message: str):
        super().__init__(f"{question_id}: {message}")
        self.question_id = question_id
        self.message = message


class InvalidAnswerKeysError(Exception):
    """Raised when answers reference unknown questions or section headers."""

    def __init__(self, question_ids: list[str]):
        super().__init__(f"Answers reference unknown or non-answerable questions: {question_ids}")
        self.question_ids = question_ids


class RequiredAnswersMissingError(Exception):
    """Raised when required questions are unanswered at submission."""

    def __init__(self, question_ids: list[str]):
        super().__init__(f"Required questions without an answer: {question_ids}")
        self.question_ids = question_ids


# Text input


def filter_text_input(question: Question, raw: str) -> str:
    """Apply the live-input filter of a text question.

    digits-only strips every non-digit, letters-only strips digits, and
    the result is truncated to ``max_length``.

    Example:
        >>> filter_text_input(digits_question_max_5, "a1b2c3d4e5f6")
        '12345'
    """
    validation = question.validation
    if validation is None:
        return raw

    value = raw
    if validation.input_type == InputType.DIGITS_ONLY:
        value = _NON_DIGITS.sub("", value)
    elif validation.input_type == InputType.LETTERS_ONLY:
        value = _DIGITS.sub("", value)

    if validation.max_length is not None and len(value) > validation.max_length:
        value = value[:validation.max_length]
    return value


# Coercion


def _require_str(question: Question, raw: Any) -> str:
    if not isinstance(raw, str):
        raise AnswerValidationError(question.id, "Expected a text value.")
    return raw


def _coerce_choice(question: Question, raw: Any) -> str:
    value = _require_str(question, raw)
    if value == "":
        return value
    if question.find_option(value) is None:
        raise AnswerValidationError(question.id, f"'{value}' is not one of the options.")
    return value


def _coerce_multi_choice(question: Question, raw: Any) -> list[str]:
    if not isinstance(raw, list):
        raise AnswerValidationError(question.id, "Expected a list of options.")
    selected: list[str] = []
    for item in raw:
        value = _require_str(question, item)
        if question.find_option(value) is None:
            raise AnswerValidationError(question.id, f"'{value}' is not one of the options.")
        if value not in selected:
            selected.append(value)
    return selected


def _coerce_date(question: Question, raw: Any) -> str:
    value = _require_str(question, raw).strip()
    if value == "":
        return value
    if not _ISO_DATE.match(value):
        raise AnswerValidationError(question.id, "Expected a date as YYYY-MM-DD.")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise AnswerValidationError(question.id, f"'{value}' is not a valid date.")
    return value


def _coerce_rating(question: Question, raw: Any) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise AnswerValidationError(question.id, "Expected a whole number.")
    if not 1 <= raw <= question.scale_max:
        raise AnswerValidationError(
            question.id, f"Please choose a value between 1 and {question.scale_max}."
        )
    return raw


def coerce_answer(question: Question, raw: Any) -> Optional[AnswerValue]:
    """Validate and normalize a raw value for a question.

    Args:
        question: Question being answered
        raw: Value received from the client; None means "no answer"

    Returns:
        The value to store, or None when there is no answer

    Raises:
        AnswerValidationError: If the value does not fit the question type
    """
    if question.type == QuestionType.SECTION_HEADER:
        raise AnswerValidationError(question.id, "Section headers do not collect answers.")
    if raw is None:
        return None

    if question.type in (QuestionType.SHORT_TEXT, QuestionType.LONG_TEXT):
        return filter_text_input(question, _require_str(question, raw))
    elif question.type in (QuestionType.SINGLE_CHOICE, QuestionType.DROPDOWN):
        return _coerce_choice(question, raw)
    elif question.type == QuestionType.MULTI_CHOICE:
        return _coerce_multi_choice(question, raw)
    elif question.type == QuestionType.DATE:
        return _coerce_date(question, raw)
    elif question.type in (QuestionType.STAR_RATING, QuestionType.NUMERIC_SCALE):
        return _coerce_rating(question, raw)
    else:
        logger.error(f"Unknown question type: {question.type}")
        raise AnswerValidationError(question.id, f"Unsupported question type '{question.type}'.")


def is_empty_answer(value: Optional[AnswerValue]) -> bool:
    """Whether a stored value counts as "no answer" for the required check."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, list):
        return len(value) == 0
    return False


# Answer map


class AnswerForm:
    """In-memory answer map for one respondent filling one survey.

    Each change only updates this object; nothing is persisted until the
    submission pipeline receives ``answers``.
    """

    def __init__(self, survey: Survey):
        self.survey = survey
        self._answers: AnswerMap = {}

    @classmethod
    def from_payload(cls, survey: Survey, payload: dict[str, Any]) -> "AnswerForm":
        """Build a form from a client-submitted answer map.

        Raises:
            InvalidAnswerKeysError: If a key is unknown or a section header
            AnswerValidationError: If a value does not fit its question
        """
        form = cls(survey)
        invalid = [qid for qid in payload if form._find_answerable(qid) is None]
        if invalid:
            raise InvalidAnswerKeysError(invalid)
        for question_id, raw in payload.items():
            form.set_answer(question_id, raw)
        return form

    @property
    def answers(self) -> AnswerMap:
        """Copy of the current answer map."""
        return {
            qid: list(value) if isinstance(value, list) else value
            for qid, value in self._answers.items()
        }

    def get_answer(self, question_id: str) -> Optional[AnswerValue]:
        return self._answers.get(question_id)

    def set_answer(self, question_id: str, raw: Any) -> Optional[AnswerValue]:
        """Coerce and store an answer; None clears it."""
        question = self._get_answerable(question_id)
        value = coerce_answer(question, raw)
        if value is None:
            self._answers.pop(question_id, None)
        else:
            self._answers[question_id] = value
        return value

    def toggle_option(self, question_id: str, option_value: str) -> list[str]:
        """Add or remove an option of a multi-choice question."""
        question = self._get_answerable(question_id)
        if question.type != QuestionType.MULTI_CHOICE:
            raise AnswerValidationError(question_id, "Only multi-choice questions can toggle options.")

        current = list(self._answers.get(question_id) or [])
        if option_value in current:
            current.remove(option_value)
        else:
            current.append(option_value)
        return self.set_answer(question_id, current)

    def clear_answer(self, question_id: str) -> None:
        self.set_answer(question_id, None)

    def missing_required(self) -> list[Question]:
        """Required questions without a non-empty answer, in survey order."""
        return [
            question
            for question in self.survey.answerable_questions()
            if question.required and is_empty_answer(self._answers.get(question.id))
        ]

    def validate_for_submission(self) -> AnswerMap:
        """Run the submission gate and return the answers to persist.

        Raises:
            RequiredAnswersMissingError: If a required question is unanswered
        """
        missing = self.missing_required()
        if missing:
            raise RequiredAnswersMissingError([question.id for question in missing])
        return self.answers

    def _find_answerable(self, question_id: str) -> Optional[Question]:
        question = self.survey.get_question(question_id)
        if question is None or question.is_section_header:
            return None
        return question

    def _get_answerable(self, question_id: str) -> Question:
        question = self._find_answerable(question_id)
        if question is None:
            raise InvalidAnswerKeysError([question_id])
        return question


# Rating presentation


class RatingTier(str, Enum):
    LOW = "low"
    MID = "mid"
    HIGH = "high"


class NpsBand(str, Enum):
    DETRACTOR = "detractor"
    NEUTRAL = "neutral"
    PROMOTER = "promoter"


TIER_COLORS = {
    RatingTier.LOW: "#ef4444",
    RatingTier.MID: "#facc15",
    RatingTier.HIGH: "#22c55e",
}

SMILE_ICONS = {
    RatingTier.LOW: "frown",
    RatingTier.MID: "meh",
    RatingTier.HIGH: "smile",
}


def rating_tier(position: int, maximum: int) -> RatingTier:
    """Tier of a rating position: bottom 40% low, next 30% mid, rest high.

    Example:
        >>> [rating_tier(p, 5).value for p in range(1, 6)]
        ['low', 'low', 'mid', 'high', 'high']
    """
    if not 1 <= position <= maximum:
        raise ValueError(f"Position {position} outside 1..{maximum}")
    if position * 10 <= maximum * 4:
        return RatingTier.LOW
    if position * 10 <= maximum * 7:
        return RatingTier.MID
    return RatingTier.HIGH


def rating_color(position: int, maximum: int, active_color: Optional[str] = None) -> str:
    """Color of a selected star; an explicit accent color wins over tiers."""
    if active_color:
        return active_color
    return TIER_COLORS[rating_tier(position, maximum)]


def rating_icon(icon_style: Optional[IconStyle], position: int, maximum: int) -> str:
    """Icon name for a star position; the smile style varies by tier."""
    style = icon_style or IconStyle.STAR
    if style == IconStyle.SMILE:
        return SMILE_ICONS[rating_tier(position, maximum)]
    return style.value


def scale_segment_color(index: int, total: int, active_color: Optional[str] = None) -> str:
    """Red to green hue ramp over the segments of a numeric scale.

    Args:
        index: 0-based segment index
        total: Number of segments
        active_color: Accent color that replaces the ramp when set
    """
    if active_color:
        return active_color
    hue = 0 if total <= 1 else round(index / (total - 1) * 120)
    return f"hsl({hue}, 80%, 60%)"


def nps_band(score: int, maximum: int = 10) -> NpsBand:
    """NPS-style band of a scale score: last two promoter, two before neutral.

    Example:
        >>> [nps_band(s).value for s in (6, 7, 8, 9)]
        ['detractor', 'neutral', 'neutral', 'promoter']
    """
    if not 1 <= score <= maximum:
        raise ValueError(f"Score {score} outside 1..{maximum}")
    if score <= maximum - 4:
        return NpsBand.DETRACTOR
    if score <= maximum - 2:
        return NpsBand.NEUTRAL
    return NpsBand.PROMOTER


# Form view


def _widget_for(question: Question) -> str:
    if question.type == QuestionType.SHORT_TEXT:
        return "text"
    elif question.type == QuestionType.LONG_TEXT:
        return "textarea"
    elif question.type == QuestionType.SINGLE_CHOICE:
        return "radio"
    elif question.type == QuestionType.MULTI_CHOICE:
        return "checkbox"
    elif question.type == QuestionType.DROPDOWN:
        return "select"
    elif question.type == QuestionType.DATE:
        return "date"
    elif question.type == QuestionType.STAR_RATING:
        return "stars"
    elif question.type == QuestionType.NUMERIC_SCALE:
        return "scale"
    raise ValueError(f"No widget for question type '{question.type}'")


def _scale_positions(question: Question, active_color: Optional[str]) -> Optional[list[ScalePositionView]]:
    maximum = question.scale_max
    if question.type == QuestionType.STAR_RATING:
        return [
            ScalePositionView(
                value=position,
                color=rating_color(position, maximum, active_color),
                tier=rating_tier(position, maximum).value,
                icon=rating_icon(question.icon_style, position, maximum),
            )
            for position in range(1, maximum + 1)
        ]
    if question.type == QuestionType.NUMERIC_SCALE:
        return [
            ScalePositionView(
                value=position,
                color=scale_segment_color(position - 1, maximum, active_color),
                tier=nps_band(position, maximum).value,
            )
            for position in range(1, maximum + 1)
        ]
    return None


def _question_view(number: int, question: Question, active_color: Optional[str]) -> FormQuestionView:
    view = FormQuestionView(
        id=question.id,
        number=number,
        title=question.title,
        type=question.type,
        widget=_widget_for(question),
        required=question.required,
        options=question.options if question.is_choice else None,
        icon_style=question.icon_style,
        scale=_scale_positions(question, active_color),
    )

    if question.type in (QuestionType.SHORT_TEXT, QuestionType.LONG_TEXT):
        validation = question.validation
        view.input_type = validation.input_type if validation else InputType.ANY
        view.max_length = validation.max_length if validation else None
        view.placeholder = (
            "Enter a number..." if view.input_type == InputType.DIGITS_ONLY else "Your answer..."
        )
    elif question.type == QuestionType.DROPDOWN:
        view.placeholder = "Select an option"

    return view


def build_form_view(survey: Survey) -> FormView:
    """Build the renderable form for a survey.

    Callers must only hand this out once the access gate is unlocked.
    """
    active_color = survey.theme.active_color if survey.theme else None
    groups = [
        FormGroupView(
            title=group.title,
            questions=[
                _question_view(numbered.number, numbered.question, active_color)
                for numbered in group.questions
            ],
        )
        for group in group_questions(survey.questions)
    ]
    return FormView(
        survey_id=survey.id,
        title=survey.title,
        description=survey.description,
        footer_message=survey.footer_message,
        theme=survey.theme,
        groups=groups,
    )
