"""
DevCamper Backend — Course Service
====================================

What:  Courses belonging to a bootcamp: nested list/create plus
       get/update/delete by id.
How:   Authorization goes through devcamper.policies.can_modify: adding a
       course requires owning the bootcamp; changing a course requires
       owning the course. Admins pass both.

The bootcamp's average_cost is kept current by the Course mapper hooks.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devcamper.exceptions import ForbiddenError, NotFoundError
from devcamper.models.bootcamp import Bootcamp
from devcamper.models.course import Course
from devcamper.models.user import User
from devcamper.policies import can_modify
from devcamper.result import Err, Ok, Result
from devcamper.schemas.course import CourseCreate, CourseUpdate, course_to_dict
from devcamper.services import parse_id, reject_nulls

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("title", "description", "weeks", "tuition", "minimum_skill")


def bootcamp_summary(bootcamp) -> Optional[Dict[str, Any]]:
    """Populated form of a bootcamp reference: id, name, description."""
    if bootcamp is None:
        return None
    return {"id": str(bootcamp.id), "name": bootcamp.name, "description": bootcamp.description}


class CourseService:

    async def list_for_bootcamp(self, db: AsyncSession, raw_bootcamp_id) -> Result[Dict[str, Any]]:
        parsed = parse_id(raw_bootcamp_id)
        if not parsed.ok:
            return parsed
        courses: List[Course] = (
            await db.execute(
                select(Course).where(Course.bootcamp_id == parsed.value).order_by(Course.created_at)
            )
        ).scalars().all()
        return Ok({"count": len(courses), "data": [course_to_dict(c) for c in courses]})

    async def _load(self, db: AsyncSession, raw_id) -> Result[Course]:
        parsed = parse_id(raw_id)
        if not parsed.ok:
            return parsed
        course = (
            await db.execute(
                select(Course).where(Course.id == parsed.value).options(selectinload(Course.bootcamp))
            )
        ).scalar_one_or_none()
        if course is None:
            return Err(NotFoundError(f"No course with the id of {raw_id}"))
        return Ok(course)

    async def get(self, db: AsyncSession, raw_id) -> Result[Dict[str, Any]]:
        loaded = await self._load(db, raw_id)
        if not loaded.ok:
            return loaded
        data = course_to_dict(loaded.value)
        data["bootcamp"] = bootcamp_summary(loaded.value.bootcamp)
        return Ok(data)

    async def create(
        self, db: AsyncSession, user: User, raw_bootcamp_id, payload: CourseCreate
    ) -> Result[Dict[str, Any]]:
        parsed = parse_id(raw_bootcamp_id)
        if not parsed.ok:
            return parsed
        bootcamp = await db.get(Bootcamp, parsed.value)
        if bootcamp is None:
            return Err(NotFoundError(f"No bootcamp with the id of {raw_bootcamp_id}"))

        if not can_modify(user.role, user.id, bootcamp.user_id):
            return Err(
                ForbiddenError(
                    f"User {user.id} is not authorized to add a course to bootcamp {bootcamp.id}"
                )
            )

        course = Course(
            **payload.model_dump(mode="json"),
            bootcamp_id=bootcamp.id,
            user_id=user.id,
        )
        db.add(course)
        await db.flush()

        logger.info("Course %s added to bootcamp %s", course.id, bootcamp.id)
        return Ok(course_to_dict(course))

    async def update(
        self, db: AsyncSession, user: User, raw_id, payload: CourseUpdate
    ) -> Result[Dict[str, Any]]:
        loaded = await self._load(db, raw_id)
        if not loaded.ok:
            return loaded
        course = loaded.value

        if not can_modify(user.role, user.id, course.user_id):
            return Err(ForbiddenError(f"User {user.id} is not authorized to update course {course.id}"))

        changes = payload.model_dump(exclude_unset=True, mode="json")
        nulled = reject_nulls(changes, _REQUIRED_FIELDS)
        if nulled:
            return nulled

        for name, value in changes.items():
            setattr(course, name, value)
        await db.flush()
        return Ok(course_to_dict(course))

    async def delete(self, db: AsyncSession, user: User, raw_id) -> Result[Dict[str, Any]]:
        loaded = await self._load(db, raw_id)
        if not loaded.ok:
            return loaded
        course = loaded.value

        if not can_modify(user.role, user.id, course.user_id):
            return Err(ForbiddenError(f"User {user.id} is not authorized to delete course {course.id}"))

        await db.delete(course)
        await db.flush()
        return Ok({})
