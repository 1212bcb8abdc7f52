"""
DevCamper Backend — Bootcamp SQLAlchemy Model
===============================================

What:  ORM model for the `bootcamps` table.
Who:   Bootcamp service (CRUD, radius search, photo upload), the generic
       query helper, and the course/review aggregate hooks.

Table Design:
    - Location is flattened into columns (longitude, latitude plus the
      geocoder's address parts); the API nests them back into a GeoJSON-like
      `location` object.
    - careers is a JSON list of strings drawn from CAREERS.
    - average_cost / average_rating are maintained by hooks in
      devcamper.models.hooks; clients never write them.
    - user_id is the owner. Non-admin users may own at most one bootcamp
      (enforced in the service layer, not by a constraint: admins can own many).

Indexes:
    - (latitude, longitude) for the bounding-box prefilter of radius search
"""

import uuid
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devcamper.database import Base
from devcamper.models.base import CreatedAtMixin, IdMixin

CAREERS = (
    "Web Development",
    "Mobile Development",
    "UI/UX",
    "Data Science",
    "Business",
    "Other",
)

DEFAULT_PHOTO = "no-photo.jpg"


class Bootcamp(IdMixin, CreatedAtMixin, Base):
    __tablename__ = "bootcamps"

    # Query-string names that map onto flattened columns
    FILTER_ALIASES = {
        "user": "user_id",
        "location.city": "city",
        "location.state": "state",
        "location.zipcode": "zipcode",
        "location.country": "country",
    }

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(60), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # ── Address / Location ────────────────────────────────────────────────
    address: Mapped[str] = mapped_column(Text, nullable=False)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    formatted_address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    street: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    zipcode: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    careers: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # ── Aggregates (hook-maintained) ──────────────────────────────────────
    average_rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    average_cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    photo: Mapped[str] = mapped_column(String(255), nullable=False, default=DEFAULT_PHOTO)

    housing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    job_assistance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    job_guarantee: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    accept_gi: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # viewonly: deletes never walk this collection, the before_delete hook
    # removes children with a single statement instead
    courses = relationship(
        "Course",
        primaryjoin="Bootcamp.id == Course.bootcamp_id",
        viewonly=True,
        lazy="raise",
        order_by="Course.created_at",
    )

    __table_args__ = (
        CheckConstraint(
            "average_rating IS NULL OR (average_rating >= 1 AND average_rating <= 10)",
            name="ck_bootcamps_average_rating_range",
        ),
        Index("idx_bootcamps_lat_lng", "latitude", "longitude"),
    )

    def __repr__(self) -> str:
        return f"<Bootcamp(id={self.id}, name='{self.name}')>"
