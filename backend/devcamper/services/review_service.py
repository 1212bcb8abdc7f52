"""
Review service: nested list/create under a bootcamp, get/update/delete by id.

A user may review a bootcamp once. The service checks for an existing review
first; the unique constraint on (bootcamp_id, user_id) still backs it up for
concurrent requests. The bootcamp's average_rating follows from the Review
mapper hooks.
"""

import logging
from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devcamper.exceptions import DuplicateKeyError, ForbiddenError, NotFoundError
from devcamper.models.bootcamp import Bootcamp
from devcamper.models.review import Review
from devcamper.models.user import User
from devcamper.policies import can_modify
from devcamper.result import Err, Ok, Result
from devcamper.schemas.review import ReviewCreate, ReviewUpdate, review_to_dict
from devcamper.services import parse_id, reject_nulls
from devcamper.services.course_service import bootcamp_summary

logger = logging.getLogger(__name__)


class ReviewService:

    async def list_for_bootcamp(self, db: AsyncSession, raw_bootcamp_id) -> Result[Dict[str, Any]]:
        parsed = parse_id(raw_bootcamp_id)
        if not parsed.ok:
            return parsed
        reviews = (
            await db.execute(
                select(Review).where(Review.bootcamp_id == parsed.value).order_by(Review.created_at)
            )
        ).scalars().all()
        return Ok({"count": len(reviews), "data": [review_to_dict(r) for r in reviews]})

    async def _load(self, db: AsyncSession, raw_id) -> Result[Review]:
        parsed = parse_id(raw_id)
        if not parsed.ok:
            return parsed
        review = (
            await db.execute(
                select(Review).where(Review.id == parsed.value).options(selectinload(Review.bootcamp))
            )
        ).scalar_one_or_none()
        if review is None:
            return Err(NotFoundError(f"No review found with the id of {raw_id}"))
        return Ok(review)

    async def get(self, db: AsyncSession, raw_id) -> Result[Dict[str, Any]]:
        loaded = await self._load(db, raw_id)
        if not loaded.ok:
            return loaded
        data = review_to_dict(loaded.value)
        data["bootcamp"] = bootcamp_summary(loaded.value.bootcamp)
        return Ok(data)

    async def create(
        self, db: AsyncSession, user: User, raw_bootcamp_id, payload: ReviewCreate
    ) -> Result[Dict[str, Any]]:
        parsed = parse_id(raw_bootcamp_id)
        if not parsed.ok:
            return parsed
        bootcamp = await db.get(Bootcamp, parsed.value)
        if bootcamp is None:
            return Err(NotFoundError(f"No bootcamp with the id of {raw_bootcamp_id}"))

        existing = (
            await db.execute(
                select(Review.id).where(Review.bootcamp_id == bootcamp.id, Review.user_id == user.id)
            )
        ).scalar_one_or_none()
        if existing is not None:
            return Err(
                DuplicateKeyError(context={"bootcamp_id": str(bootcamp.id), "user_id": str(user.id)})
            )

        review = Review(**payload.model_dump(), bootcamp_id=bootcamp.id, user_id=user.id)
        db.add(review)
        await db.flush()

        logger.info("Review %s added to bootcamp %s by user %s", review.id, bootcamp.id, user.id)
        return Ok(review_to_dict(review))

    async def update(
        self, db: AsyncSession, user: User, raw_id, payload: ReviewUpdate
    ) -> Result[Dict[str, Any]]:
        loaded = await self._load(db, raw_id)
        if not loaded.ok:
            return loaded
        review = loaded.value

        if not can_modify(user.role, user.id, review.user_id):
            return Err(ForbiddenError("Not authorized to update review"))

        changes = payload.model_dump(exclude_unset=True)
        nulled = reject_nulls(changes, ("title", "text", "rating"))
        if nulled:
            return nulled

        for name, value in changes.items():
            setattr(review, name, value)
        await db.flush()
        return Ok(review_to_dict(review))

    async def delete(self, db: AsyncSession, user: User, raw_id) -> Result[Dict[str, Any]]:
        loaded = await self._load(db, raw_id)
        if not loaded.ok:
            return loaded
        review = loaded.value

        if not can_modify(user.role, user.id, review.user_id):
            return Err(ForbiddenError("Not authorized to delete review"))

        await db.delete(review)
        await db.flush()
        return Ok({})
