"""Access control for private and one-response-only surveys.

The gate is a small state machine evaluated per respondent:

    locked --(email on allow-list)--> unlocked --(already answered)--> already-responded

Private surveys start locked, public ones unlocked. ``already-responded``
is terminal: the form must not be reachable from it.

Duplicate detection depends on privacy. Private surveys know the
respondent's email, so the check queries stored responses by email.
Public surveys have no identity and rely on a marker the client carries
(a cookie), which is weak and can be cleared; that is accepted.
"""

from enum import Enum
from typing import Optional

from surveykit.schemas.survey import Survey
from surveykit.services.survey_store import SurveyStore
from surveykit.logging_config import get_logger, mask_email

logger = get_logger(__name__)

ACCESS_DENIED_MESSAGE = "Access denied: this email is not authorized to answer this survey."
EMAIL_REQUIRED_MESSAGE = "Please enter your email."
ALREADY_RESPONDED_MESSAGE = "You have already answered this survey."
LOCKED_MESSAGE = "This survey is private. Enter your email to verify your access."


class AccessState(str, Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    ALREADY_RESPONDED = "already-responded"


class AccessDeniedError(Exception):
    """Raised when an email does not unlock a private survey."""
    pass


class AccessLockedError(Exception):
    """Raised when the form is requested while the gate is still locked."""
    pass


class AlreadyRespondedError(Exception):
    """Raised when the respondent already answered a one-response survey."""
    pass


def normalize_email(email: Optional[str]) -> str:
    """Trim whitespace and lower-case an email address.

    Example:
        >>> normalize_email("  Ana@Example.COM ")
        'ana@example.com'
    """
    return (email or "").strip().lower()


class AccessGate:
    """Decides whether a respondent may reach the answer form.

    Args:
        survey: Survey being opened (must have an id)
        store: Storage collaborator used for the by-email duplicate lookup
        responded_marker: Client-held "already answered" marker, consulted
            only for public surveys
    """

    def __init__(self, survey: Survey, store: SurveyStore, responded_marker: bool = False):
        self.survey = survey
        self.store = store
        self.responded_marker = responded_marker
        self.email: Optional[str] = None
        self.state = AccessState.LOCKED if survey.is_private else AccessState.UNLOCKED

    def unlock(self, email: Optional[str]) -> AccessState:
        """Try to unlock a private survey with an email address.

        The allow-list is compared after normalizing both sides. A private
        survey without an allow-list cannot be unlocked by anyone.

        Args:
            email: Email typed by the respondent

        Returns:
            The new state (unlocked, or already-responded when the
            duplicate check fires right away)

        Raises:
            AccessDeniedError: If the email is empty or not allowed
            AlreadyRespondedError: If the gate is already terminal
        """
        if self.state == AccessState.ALREADY_RESPONDED:
            raise AlreadyRespondedError(ALREADY_RESPONDED_MESSAGE)
        if self.state == AccessState.UNLOCKED:
            return self.check_already_responded()

        normalized = normalize_email(email)
        if not normalized:
            raise AccessDeniedError(EMAIL_REQUIRED_MESSAGE)

        allowed = self.survey.allowed_emails or []
        if not any(normalize_email(entry) == normalized for entry in allowed):
            logger.info(
                f"Access denied for {mask_email(normalized)}",
                extra={"survey_id": self.survey.id},
            )
            raise AccessDeniedError(ACCESS_DENIED_MESSAGE)

        self.email = normalized
        self.state = AccessState.UNLOCKED
        logger.info(
            f"Access granted for {mask_email(normalized)}",
            extra={"survey_id": self.survey.id},
        )
        return self.check_already_responded()

    def check_already_responded(self) -> AccessState:
        """Move to already-responded if this respondent answered before.

        Only runs for unlocked gates on surveys limited to one response.
        """
        if self.state != AccessState.UNLOCKED or not self.survey.limit_one_response:
            return self.state

        if self.survey.is_private:
            responded = self.email is not None and self.store.find_response_by_email(
                self.survey.id, self.email
            )
        else:
            responded = self.responded_marker

        if responded:
            self.state = AccessState.ALREADY_RESPONDED
            logger.info(
                "Respondent already answered this survey",
                extra={"survey_id": self.survey.id},
            )
        return self.state

    def ensure_form_access(self) -> None:
        """Raise unless the respondent may enter answers now.

        Raises:
            AccessLockedError: If the survey is private and still locked
            AlreadyRespondedError: If the respondent already answered
        """
        state = self.check_already_responded()
        if state == AccessState.LOCKED:
            raise AccessLockedError(LOCKED_MESSAGE)
        if state == AccessState.ALREADY_RESPONDED:
            raise AlreadyRespondedError(ALREADY_RESPONDED_MESSAGE)

    def record_submission(self) -> AccessState:
        """Close the gate after a successful submission on a one-response survey."""
        if self.survey.limit_one_response:
            self.responded_marker = True
            self.state = AccessState.ALREADY_RESPONDED
        return self.state
