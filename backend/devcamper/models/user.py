"""
DevCamper Backend — User SQLAlchemy Model
===========================================

What:  ORM model for the `users` table.
Who:   Auth service (register, login, password reset), user admin service,
       and the owner reference of bootcamps, courses and reviews.

Column notes:
    - email is unique; duplicates surface as IntegrityError → 400
    - password_hash holds a bcrypt hash and is never serialized
    - reset_password_token holds the sha256 hex digest of the emailed token,
      valid until reset_password_expire
"""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from devcamper.database import Base
from devcamper.models.base import CreatedAtMixin, IdMixin


class UserRole(str, enum.Enum):
    USER = "user"
    PUBLISHER = "publisher"
    ADMIN = "admin"


class User(IdMixin, CreatedAtMixin, Base):
    __tablename__ = "users"

    # never filterable or sortable through query strings
    PRIVATE_COLUMNS = ("password_hash", "reset_password_token", "reset_password_expire")

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # Stored as the enum value; admin is only assignable through /users
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.USER.value,
    )

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    reset_password_token: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, index=True
    )
    reset_password_expire: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
