"""Bulk question import from plain text.

One question per line, fields separated by ``|``:

    What is your name?
    Favorite color? | single-choice | Red, Blue, Green
    Birth date? | date
    Hobbies? | multi-choice | Reading, Running, Movies

Type names from older exports (``radio``, ``checkbox``, ``select``, ...)
are accepted as aliases; unknown types fall back to short text.
"""

import uuid

from surveykit.schemas.survey import ChoiceOption, Question, QuestionType
from surveykit.logging_config import get_logger

logger = get_logger(__name__)

TYPE_ALIASES = {
    "text": QuestionType.SHORT_TEXT,
    "textarea": QuestionType.LONG_TEXT,
    "radio": QuestionType.SINGLE_CHOICE,
    "checkbox": QuestionType.MULTI_CHOICE,
    "select": QuestionType.DROPDOWN,
    "rating-stars": QuestionType.STAR_RATING,
    "rating-scale": QuestionType.NUMERIC_SCALE,
    "section": QuestionType.SECTION_HEADER,
}


class QuestionImportError(Exception):
    """Raised when no question can be parsed from the input text."""
    pass


def _parse_type(raw: str) -> QuestionType:
    name = raw.strip().lower()
    if name in TYPE_ALIASES:
        return TYPE_ALIASES[name]
    try:
        return QuestionType(name)
    except ValueError:
        logger.debug(f"Unknown question type '{raw}', using short text")
        return QuestionType.SHORT_TEXT


def parse_question_line(line: str) -> Question:
    """Parse a single ``title | type | options`` line."""
    parts = [part.strip() for part in line.split("|")]
    title = parts[0]
    question_type = _parse_type(parts[1]) if len(parts) > 1 else QuestionType.SHORT_TEXT

    labels: list[str] = []
    if len(parts) > 2 and question_type in (
        QuestionType.SINGLE_CHOICE, QuestionType.MULTI_CHOICE, QuestionType.DROPDOWN
    ):
        for label in parts[2].split(","):
            label = label.strip()
            if label and label not in labels:
                labels.append(label)

    return Question(
        id=uuid.uuid4().hex,
        type=question_type,
        title=title,
        required=False,
        options=[
            ChoiceOption(id=uuid.uuid4().hex, label=label, value=label)
            for label in labels
        ] or None,
    )


def parse_questions(text: str) -> list[Question]:
    """Parse every non-empty line of ``text`` into a question.

    Raises:
        QuestionImportError: If the text is blank or yields no question
    """
    if not text or not text.strip():
        raise QuestionImportError("Please enter some text to import.")

    questions = [
        parse_question_line(line)
        for line in text.splitlines()
        if line.strip() and line.split("|")[0].strip()
    ]
    if not questions:
        raise QuestionImportError("No valid questions were found.")

    logger.info(f"Parsed {len(questions)} questions from bulk import")
    return questions
