"""Storage collaborator for surveys, responses and saved themes.

The core services never talk to the database directly: they receive a
``SurveyStore`` and call it through this narrow interface. ``SqlSurveyStore``
is the production implementation on top of SQLAlchemy; tests may pass any
other implementation (for example an in-memory fake).
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from surveykit.models.survey import SurveyDocument, generate_id
from surveykit.models.response import SurveyResponse
from surveykit.models.theme import ThemePreset
from surveykit.schemas.response import AnswerMap, ResponseRecord
from surveykit.schemas.survey import SavedTheme, Survey, ThemeConfig
from surveykit.logging_config import get_logger, mask_email

logger = get_logger(__name__)

# Fields that belong to the row, not to the stored document
_ROW_FIELDS = {"id", "created_at", "updated_at"}

# Driver messages that mean the backend refused the write for authorization
_PERMISSION_MARKERS = (
    "permission denied",
    "insufficient privilege",
    "readonly database",
    "read-only",
    "access denied",
)


class StorageError(Exception):
    """Raised when the storage backend fails."""
    pass


class StoragePermissionError(StorageError):
    """Raised when the storage backend rejects an operation as unauthorized."""
    pass


class SurveyNotFoundError(Exception):
    """Raised when a survey id does not resolve to a stored survey."""
    pass


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from the database."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def translate_storage_error(exc: Exception, action: str) -> StorageError:
    """Map a backend exception onto the storage error taxonomy.

    Args:
        exc: Exception raised by the backend
        action: Short description of the failed operation, for the message

    Returns:
        StoragePermissionError for authorization rejections, StorageError otherwise
    """
    message = str(exc).lower()
    if isinstance(exc, PermissionError) or any(marker in message for marker in _PERMISSION_MARKERS):
        return StoragePermissionError(f"Permission denied while trying to {action}")
    return StorageError(f"Storage failure while trying to {action}")


class SurveyStore(ABC):
    """Interface of the document store the core services depend on."""

    @abstractmethod
    def get_survey(self, survey_id: str) -> Optional[Survey]:
        """Return the survey, or None if it does not exist."""

    @abstractmethod
    def create_survey(self, survey: Survey) -> str:
        """Persist a new survey and return its generated id."""

    @abstractmethod
    def update_survey(self, survey: Survey) -> str:
        """Merge-upsert a survey keyed by its id."""

    @abstractmethod
    def delete_survey(self, survey_id: str) -> bool:
        """Delete a survey and its responses. Returns False if it did not exist."""

    @abstractmethod
    def list_surveys(self) -> list[Survey]:
        """All surveys, newest first."""

    @abstractmethod
    def submit_response(
        self,
        survey_id: str,
        answers: AnswerMap,
        respondent_email: Optional[str] = None,
    ) -> str:
        """Append a response record under the survey and return its id."""

    @abstractmethod
    def list_responses(self, survey_id: str) -> list[ResponseRecord]:
        """All responses of a survey, oldest first."""

    @abstractmethod
    def find_response_by_email(self, survey_id: str, email: str) -> bool:
        """Whether a response from this email exists for the survey."""

    @abstractmethod
    def list_themes(self) -> list[SavedTheme]:
        """Saved theme presets, newest first."""

    @abstractmethod
    def create_theme(self, name: str, config: ThemeConfig) -> str:
        """Save a theme preset and return its id."""

    @abstractmethod
    def delete_theme(self, theme_id: str) -> bool:
        """Delete a theme preset. Returns False if it did not exist."""


class SqlSurveyStore(SurveyStore):
    """SurveyStore backed by a SQLAlchemy session.

    Every write commits immediately; on failure the session is rolled back
    and the error is translated with ``translate_storage_error``.
    """

    def __init__(self, db: Session):
        """Initialize store.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    # Surveys

    def get_survey(self, survey_id: str) -> Optional[Survey]:
        try:
            row = self.db.get(SurveyDocument, survey_id)
        except SQLAlchemyError as e:
            logger.error(f"Error loading survey {survey_id}: {e}")
            raise translate_storage_error(e, "load the survey")

        if row is None:
            logger.info(f"Survey not found: {survey_id}")
            return None
        return self._to_survey(row)

    def create_survey(self, survey: Survey) -> str:
        row = SurveyDocument(
            id=generate_id(),
            title=survey.title,
            privacy=survey.privacy.value,
            document=self._to_document(survey),
        )
        self._commit_new(row, "create the survey")
        logger.info(f"Created survey {row.id}", extra={"survey_id": row.id})
        return row.id

    def update_survey(self, survey: Survey) -> str:
        if not survey.id:
            raise ValueError("Cannot update survey without ID")

        try:
            row = self.db.get(SurveyDocument, survey.id)
            if row is None:
                row = SurveyDocument(
                    id=survey.id,
                    title=survey.title,
                    privacy=survey.privacy.value,
                    document=self._to_document(survey),
                )
                self.db.add(row)
                logger.info(f"Upserted new survey {survey.id}", extra={"survey_id": survey.id})
            else:
                # Merge at the top level; a new dict triggers change tracking
                merged = dict(row.document)
                merged.update(self._to_document(survey, exclude_unset=True))
                row.document = merged
                row.title = merged.get("title", "")
                row.privacy = merged.get("privacy", "public")
                row.updated_at = datetime.now(timezone.utc)
                logger.info(f"Updated survey {survey.id}", extra={"survey_id": survey.id})
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating survey {survey.id}: {e}")
            raise translate_storage_error(e, "save the survey")
        return survey.id

    def delete_survey(self, survey_id: str) -> bool:
        try:
            row = self.db.get(SurveyDocument, survey_id)
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting survey {survey_id}: {e}")
            raise translate_storage_error(e, "delete the survey")

        logger.info(f"Deleted survey {survey_id}", extra={"survey_id": survey_id})
        return True

    def list_surveys(self) -> list[Survey]:
        try:
            rows = self.db.execute(
                select(SurveyDocument).order_by(
                    SurveyDocument.created_at.desc(),
                    SurveyDocument.id.desc(),
                )
            ).scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Error listing surveys: {e}")
            raise translate_storage_error(e, "list surveys")
        return [self._to_survey(row) for row in rows]

    # Responses

    def submit_response(
        self,
        survey_id: str,
        answers: AnswerMap,
        respondent_email: Optional[str] = None,
    ) -> str:
        row = SurveyResponse(
            id=generate_id(),
            survey_id=survey_id,
            answers=dict(answers),
            respondent_email=respondent_email,
            submitted_at=datetime.now(timezone.utc),
        )
        self._commit_new(row, "submit the response")
        logger.debug(
            f"Stored response {row.id} from {mask_email(respondent_email)}",
            extra={"survey_id": survey_id, "response_id": row.id},
        )
        return row.id

    def list_responses(self, survey_id: str) -> list[ResponseRecord]:
        try:
            rows = self.db.execute(
                select(SurveyResponse)
                .where(SurveyResponse.survey_id == survey_id)
                .order_by(SurveyResponse.submitted_at.asc(), SurveyResponse.id.asc())
            ).scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Error listing responses for {survey_id}: {e}")
            raise translate_storage_error(e, "load responses")

        return [
            ResponseRecord(
                id=row.id,
                survey_id=row.survey_id,
                answers=row.answers or {},
                submitted_at=as_utc(row.submitted_at),
                respondent_email=row.respondent_email,
            )
            for row in rows
        ]

    def find_response_by_email(self, survey_id: str, email: str) -> bool:
        try:
            count = self.db.execute(
                select(func.count(SurveyResponse.id)).where(
                    SurveyResponse.survey_id == survey_id,
                    SurveyResponse.respondent_email == email,
                )
            ).scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Error looking up responses for {survey_id}: {e}")
            raise translate_storage_error(e, "check previous responses")
        return count > 0

    # Themes

    def list_themes(self) -> list[SavedTheme]:
        try:
            rows = self.db.execute(
                select(ThemePreset).order_by(ThemePreset.created_at.desc(), ThemePreset.id.desc())
            ).scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Error listing themes: {e}")
            raise translate_storage_error(e, "list themes")
        return [
            SavedTheme(
                id=row.id,
                name=row.name,
                config=ThemeConfig.model_validate(row.config),
                created_at=as_utc(row.created_at),
            )
            for row in rows
        ]

    def create_theme(self, name: str, config: ThemeConfig) -> str:
        row = ThemePreset(
            id=generate_id(),
            name=name,
            config=config.model_dump(mode="json", exclude_none=True),
        )
        self._commit_new(row, "save the theme")
        logger.info(f"Saved theme {row.id} ({name})")
        return row.id

    def delete_theme(self, theme_id: str) -> bool:
        try:
            row = self.db.get(ThemePreset, theme_id)
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting theme {theme_id}: {e}")
            raise translate_storage_error(e, "delete the theme")
        return True

    # Helpers

    def _commit_new(self, row, action: str) -> None:
        try:
            self.db.add(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error while trying to {action}: {e}")
            raise translate_storage_error(e, action)

    @staticmethod
    def _to_document(survey: Survey, exclude_unset: bool = False) -> dict:
        return survey.model_dump(
            mode="json",
            exclude=_ROW_FIELDS,
            exclude_unset=exclude_unset,
        )

    @staticmethod
    def _to_survey(row: SurveyDocument) -> Survey:
        # Row id wins over anything stored inside the document
        return Survey.model_validate({
            **(row.document or {}),
            "id": row.id,
            "created_at": as_utc(row.created_at),
            "updated_at": as_utc(row.updated_at),
        })
