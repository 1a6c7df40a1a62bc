"""Response submission pipeline.

Packages a validated answer map with its metadata and commits it as a new
response record under the owning survey. Submitting twice creates two
records: the one-response policy belongs to the access gate, not here.
"""

from typing import Optional

from surveykit.schemas.response import AnswerMap
from surveykit.services.form_engine import InvalidAnswerKeysError
from surveykit.services.survey_store import StorageError, SurveyNotFoundError, SurveyStore
from surveykit.logging_config import get_logger, mask_email

logger = get_logger(__name__)

SUBMISSION_FAILED_MESSAGE = "We could not save your response. Please try again."


class SubmissionError(Exception):
    """Raised when the storage layer fails to persist a response."""
    pass


class SubmissionPipeline:
    """Persists respondent answers through the storage collaborator."""

    def __init__(self, store: SurveyStore):
        """Initialize pipeline.

        Args:
            store: Storage collaborator
        """
        self.store = store

    def submit(
        self,
        survey_id: str,
        answers: AnswerMap,
        respondent_email: Optional[str] = None,
    ) -> str:
        """Create one response record for a survey.

        Args:
            survey_id: Survey the response belongs to
            answers: Answer map keyed by non-header question ids
            respondent_email: Normalized email captured by the access gate

        Returns:
            Id of the new response record

        Raises:
            SurveyNotFoundError: If the survey does not exist
            InvalidAnswerKeysError: If answers reference unknown or header questions
            SubmissionError: If the storage layer fails (nothing is written)

        Example:
            >>> pipeline = SubmissionPipeline(store)
            >>> response_id = pipeline.submit(survey.id, {"q1": "Blue"})
        """
        try:
            survey = self.store.get_survey(survey_id)
        except StorageError as e:
            logger.error(f"Could not load survey {survey_id} for submission: {e}")
            raise SubmissionError(SUBMISSION_FAILED_MESSAGE) from e

        if survey is None:
            raise SurveyNotFoundError(f"Survey '{survey_id}' not found")

        answerable_ids = {question.id for question in survey.answerable_questions()}
        invalid = [question_id for question_id in answers if question_id not in answerable_ids]
        if invalid:
            raise InvalidAnswerKeysError(invalid)

        try:
            response_id = self.store.submit_response(survey_id, answers, respondent_email)
        except StorageError as e:
            logger.error(
                f"Submission failed for {mask_email(respondent_email)}: {e}",
                extra={"survey_id": survey_id},
            )
            raise SubmissionError(SUBMISSION_FAILED_MESSAGE) from e

        logger.info(
            f"Response submitted with {len(answers)} answers",
            extra={"survey_id": survey_id, "response_id": response_id},
        )
        return response_id
