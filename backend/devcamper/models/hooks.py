"""
DevCamper Backend — Model-Layer Hooks
=======================================

What:  SQLAlchemy mapper events that keep derived data consistent.
How:   Each listener runs inside the flush, on the same connection and
       transaction as the write that triggered it.

Hooks:
    Bootcamp before_insert / before_update → slug regenerated from name
    Bootcamp before_delete                  → its courses and reviews deleted
    Course   after_insert/update/delete     → bootcamp.average_cost recomputed
    Review   after_insert/update/delete     → bootcamp.average_rating recomputed

The child deletes are Core statements, so Course/Review after_delete hooks
do not fire for them; the bootcamp row they would update is going away.
"""

import logging
import math
import re

from sqlalchemy import delete, event, func, select, update

from devcamper.models.bootcamp import Bootcamp
from devcamper.models.course import Course
from devcamper.models.review import Review

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """'Devworks Bootcamp!' → 'devworks-bootcamp'"""
    return _NON_ALNUM.sub("-", value.lower()).strip("-")


def round_up_to_ten(value):
    if value is None:
        return None
    return float(math.ceil(value / 10) * 10)


# ── Bootcamp ──────────────────────────────────────────────────────────────

@event.listens_for(Bootcamp, "before_insert")
@event.listens_for(Bootcamp, "before_update")
def _set_slug(mapper, connection, target: Bootcamp) -> None:
    target.slug = slugify(target.name)


@event.listens_for(Bootcamp, "before_delete")
def _cascade_bootcamp_children(mapper, connection, target: Bootcamp) -> None:
    courses = connection.execute(delete(Course).where(Course.bootcamp_id == target.id))
    reviews = connection.execute(delete(Review).where(Review.bootcamp_id == target.id))
    logger.info(
        "Bootcamp %s removed: cascaded %d courses and %d reviews",
        target.id,
        courses.rowcount,
        reviews.rowcount,
    )


# ── Course → average_cost ─────────────────────────────────────────────────

def update_average_cost(connection, bootcamp_id) -> None:
    mean = connection.execute(
        select(func.avg(Course.tuition)).where(Course.bootcamp_id == bootcamp_id)
    ).scalar()
    connection.execute(
        update(Bootcamp)
        .where(Bootcamp.id == bootcamp_id)
        .values(average_cost=round_up_to_ten(mean))
    )


@event.listens_for(Course, "after_insert")
@event.listens_for(Course, "after_update")
@event.listens_for(Course, "after_delete")
def _course_changed(mapper, connection, target: Course) -> None:
    update_average_cost(connection, target.bootcamp_id)


# ── Review → average_rating ───────────────────────────────────────────────

def update_average_rating(connection, bootcamp_id) -> None:
    mean = connection.execute(
        select(func.avg(Review.rating)).where(Review.bootcamp_id == bootcamp_id)
    ).scalar()
    connection.execute(
        update(Bootcamp)
        .where(Bootcamp.id == bootcamp_id)
        .values(average_rating=float(mean) if mean is not None else None)
    )


@event.listens_for(Review, "after_insert")
@event.listens_for(Review, "after_update")
@event.listens_for(Review, "after_delete")
def _review_changed(mapper, connection, target: Review) -> None:
    update_average_rating(connection, target.bootcamp_id)
