"""ThemePreset model for named, reusable theme configurations."""

from datetime import datetime

from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from surveykit.models.database import Base
from surveykit.models.survey import generate_id, utcnow


class ThemePreset(Base):
    """A saved theme that admins can apply to any survey.

    Attributes:
        id: Primary key
        name: Display name of the preset
        config: ThemeConfig document
        created_at: When the preset was saved
    """

    __tablename__ = "saved_themes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=generate_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    config: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    def __repr__(self) -> str:
        return f"<ThemePreset(id={self.id}, name={self.name!r})>"
