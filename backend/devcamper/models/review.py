"""
ORM model for the `reviews` table.

One review per user per bootcamp (uq_reviews_bootcamp_user); a second
attempt surfaces as a unique IntegrityError and is reported as a duplicate.
"""

import uuid

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devcamper.database import Base
from devcamper.models.base import CreatedAtMixin, IdMixin


class Review(IdMixin, CreatedAtMixin, Base):
    __tablename__ = "reviews"

    # Query-string names matching the response keys
    FILTER_ALIASES = {"user": "user_id", "bootcamp": "bootcamp_id"}

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)

    bootcamp_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bootcamps.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    bootcamp = relationship("Bootcamp", lazy="raise")

    __table_args__ = (
        UniqueConstraint("bootcamp_id", "user_id", name="uq_reviews_bootcamp_user"),
        CheckConstraint("rating >= 1 AND rating <= 10", name="ck_reviews_rating_range"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, rating={self.rating})>"
