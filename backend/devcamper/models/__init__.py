"""
ORM models. Importing this package registers every mapped class and the
model-layer hooks (slugs, cascades, aggregates) with SQLAlchemy.
"""

from devcamper.models.user import User, UserRole
from devcamper.models.bootcamp import Bootcamp, CAREERS
from devcamper.models.course import Course, SkillLevel
from devcamper.models.review import Review
from devcamper.models import hooks  # noqa: F401

__all__ = [
    "Bootcamp",
    "CAREERS",
    "Course",
    "Review",
    "SkillLevel",
    "User",
    "UserRole",
]
