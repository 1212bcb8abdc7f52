"""ORM model for the `courses` table. Many courses per bootcamp."""

import enum
import uuid

from sqlalchemy import Boolean, CheckConstraint, Float, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devcamper.database import Base
from devcamper.models.base import CreatedAtMixin, IdMixin


class SkillLevel(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Course(IdMixin, CreatedAtMixin, Base):
    __tablename__ = "courses"

    # Query-string names matching the response keys
    FILTER_ALIASES = {"user": "user_id", "bootcamp": "bootcamp_id"}

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    # Free-form duration, e.g. "8"
    weeks: Mapped[str] = mapped_column(String(20), nullable=False)
    tuition: Mapped[float] = mapped_column(Float, nullable=False)
    minimum_skill: Mapped[str] = mapped_column(String(20), nullable=False)
    scholarship_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    bootcamp_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bootcamps.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    bootcamp = relationship("Bootcamp", lazy="raise")

    __table_args__ = (
        CheckConstraint("tuition >= 0", name="ck_courses_tuition_positive"),
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title='{self.title}')>"
