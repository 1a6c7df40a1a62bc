"""SurveyDocument model for persisted survey definitions.

A survey is stored as a JSON document keyed by an opaque id. A few
fields are copied out of the document into columns so listings can be
ordered and filtered without decoding every document.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Index,
    String,
    DateTime,
    JSON,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from surveykit.models.database import Base


def generate_id() -> str:
    """Opaque, URL-safe identifier for documents."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SurveyDocument(Base):
    """Model for a stored survey.

    Responses live in the child ``survey_responses`` table and are deleted
    together with their survey (CASCADE).

    Attributes:
        id: Primary key, assigned once at creation
        title: Copy of the document title for listings
        privacy: Copy of the document privacy for listings
        document: Survey definition without id/timestamps
        created_at: Creation time, drives newest-first listing
        updated_at: Last update time
        responses: Relationship to SurveyResponse rows
    """

    __tablename__ = "surveys"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=generate_id,
        comment="Opaque survey identifier"
    )
    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        default="",
        comment="Survey title (denormalized from document)"
    )
    privacy: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="public",
        comment="public or private (denormalized from document)"
    )
    document: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Survey definition document"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        comment="When the survey was created"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        comment="Last update timestamp"
    )

    responses: Mapped[list["SurveyResponse"]] = relationship(
        "SurveyResponse",
        back_populates="survey",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_surveys_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<SurveyDocument(id={self.id}, "
            f"title={self.title!r}, "
            f"privacy={self.privacy})>"
        )
