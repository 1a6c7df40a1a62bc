"""Results aggregation and delimited export.

Turns raw response records plus the survey structure into display rows,
summary metrics and a CSV payload that spreadsheet tools open correctly.
"""

import csv
import io
import re
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from surveykit.schemas.response import AnswerValue, ResponseRecord
from surveykit.schemas.results import ResultRow, ResultsSummary, ResultsView
from surveykit.schemas.survey import Question, QuestionType, Survey
from surveykit.logging_config import get_logger

logger = get_logger(__name__)

NO_ANSWER = "-"
# Must differ from the CSV field delimiter
LIST_SEPARATOR = " - "
YES_LABEL = "Yes"
NO_LABEL = "No"
TIMESTAMP_COLUMN = "Submitted at"
UTF8_BOM = "\ufeff"
CSV_MEDIA_TYPE = "text/csv; charset=utf-8"
DEFAULT_TIMESTAMP_FORMAT = "%d/%m/%Y, %H:%M:%S"

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def _label_for(question: Question, value: str) -> str:
    option = question.find_option(value)
    return option.label if option is not None else value


def display_value(question: Question, value: Optional[AnswerValue]) -> str:
    """Render one stored answer as display/export text.

    Choice values resolve to option labels (raw value when no option
    matches), lists are joined with ``LIST_SEPARATOR``, booleans become
    yes/no and empty answers become ``NO_ANSWER``.

    Example:
        >>> display_value(color_question, "red")
        'Rojo'
    """
    if value is None:
        return NO_ANSWER
    if isinstance(value, bool):
        return YES_LABEL if value else NO_LABEL
    if isinstance(value, list):
        if not value:
            return NO_ANSWER
        parts = [_label_for(question, str(item)) if question.is_choice else str(item) for item in value]
        return LIST_SEPARATOR.join(parts)
    if isinstance(value, str):
        if value == "":
            return NO_ANSWER
        if question.type in (QuestionType.SINGLE_CHOICE, QuestionType.DROPDOWN, QuestionType.MULTI_CHOICE):
            return _label_for(question, value)
        return value
    return str(value)


def project_rows(survey: Survey, responses: Iterable[ResponseRecord]) -> list[ResultRow]:
    """Project each response onto the survey's answerable questions."""
    questions = survey.answerable_questions()
    return [
        ResultRow(
            response_id=response.id,
            submitted_at=response.submitted_at,
            respondent_email=response.respondent_email,
            cells=[display_value(question, response.answers.get(question.id)) for question in questions],
        )
        for response in responses
    ]


def summarize(
    responses: Iterable[ResponseRecord],
    now: Optional[datetime] = None,
    window_days: int = 7,
) -> ResultsSummary:
    """Total, most recent submission and trailing-window activity.

    A response counts as recent when ``submitted_at > now - window``.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=window_days)
    timestamps = [response.submitted_at for response in responses]
    return ResultsSummary(
        total=len(timestamps),
        latest_submitted_at=max(timestamps) if timestamps else None,
        recent_count=sum(1 for submitted_at in timestamps if submitted_at > cutoff),
        window_days=window_days,
    )


def build_results_view(
    survey: Survey,
    responses: list[ResponseRecord],
    now: Optional[datetime] = None,
    window_days: int = 7,
) -> ResultsView:
    return ResultsView(
        survey_id=survey.id,
        title=survey.title,
        columns=[question.title for question in survey.answerable_questions()],
        rows=project_rows(survey, responses),
        summary=summarize(responses, now=now, window_days=window_days),
    )


def format_timestamp(
    value: datetime,
    tz_name: str = "UTC",
    fmt: str = DEFAULT_TIMESTAMP_FORMAT,
) -> str:
    """Format a submission time for export.

    Commas are removed from the formatted text so a timestamp never
    carries the export delimiter inside its field.

    Example:
        >>> format_timestamp(datetime(2026, 10, 19, 14, 3, tzinfo=timezone.utc))
        '19/10/2026 14:03:00'
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(ZoneInfo(tz_name)).strftime(fmt)
    return text.replace(", ", " ").replace(",", " ")


def export_csv(
    survey: Survey,
    responses: Iterable[ResponseRecord],
    tz_name: str = "UTC",
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
) -> str:
    """Export responses as a UTF-8 CSV document with a byte-order mark.

    The header holds the timestamp column then each question title in
    survey order. Every field is quoted and inner quotes are doubled, so
    free text with commas, quotes or newlines survives a round trip.
    """
    questions = survey.answerable_questions()
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\r\n")

    writer.writerow([TIMESTAMP_COLUMN] + [question.title for question in questions])
    count = 0
    for row in project_rows(survey, responses):
        writer.writerow([format_timestamp(row.submitted_at, tz_name, timestamp_format)] + row.cells)
        count += 1

    logger.info(f"Exported {count} responses to CSV", extra={"survey_id": survey.id})
    return UTF8_BOM + buffer.getvalue()


def export_filename(title: str) -> str:
    """Download filename derived from the survey title.

    Example:
        >>> export_filename("Encuesta de Satisfacción 2026")
        'encuesta_de_satisfacci_n_2026_responses.csv'
    """
    stem = _NON_ALNUM.sub("_", title.lower()) or "survey"
    return f"{stem}_responses.csv"
