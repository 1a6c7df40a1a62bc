"""SurveyResponse model for storing submitted answer maps.

Each row is one respondent's complete submission. Rows are append-only:
they are created once and only disappear when the owning survey is deleted.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Index,
    String,
    DateTime,
    ForeignKey,
    JSON,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from surveykit.models.database import Base
from surveykit.models.survey import generate_id, utcnow


class SurveyResponse(Base):
    """Model for storing one submitted response.

    Attributes:
        id: Primary key
        survey_id: Foreign key to surveys table
        answers: Question id to answer value
        respondent_email: Normalized email captured by the access gate
        submitted_at: When the response was submitted
        survey: Relationship to parent SurveyDocument
    """

    __tablename__ = "survey_responses"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=generate_id,
        comment="Opaque response identifier"
    )

    survey_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("surveys.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Foreign key to surveys table"
    )

    answers: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Answer map keyed by question id"
    )
    respondent_email: Mapped[Optional[str]] = mapped_column(
        String(320),
        nullable=True,
        comment="Normalized respondent email (private surveys only)"
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        comment="When the response was submitted"
    )

    survey: Mapped["SurveyDocument"] = relationship(
        "SurveyDocument",
        back_populates="responses",
    )

    __table_args__ = (
        # Duplicate-response lookups by (survey, email)
        Index("idx_survey_respondent_email", "survey_id", "respondent_email"),
    )

    def __repr__(self) -> str:
        return (
            f"<SurveyResponse(id={self.id}, "
            f"survey_id={self.survey_id}, "
            f"submitted_at={self.submitted_at})>"
        )
