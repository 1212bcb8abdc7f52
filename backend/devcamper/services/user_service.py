"""
Admin user management. Every route in front of this service requires the
admin role, so there are no ownership checks here.

Deleting a user removes what they own row by row through the ORM, so the
mapper hooks run: their bootcamps take their courses, reviews and photo
with them, and their courses and reviews on other bootcamps are deleted
with the average cost and rating of those bootcamps recomputed.
"""

import logging
from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.exceptions import NotFoundError
from devcamper.models.bootcamp import Bootcamp
from devcamper.models.course import Course
from devcamper.models.review import Review
from devcamper.models.user import User
from devcamper.result import Err, Ok, Result
from devcamper.schemas.user import UserCreate, UserUpdate, user_to_dict
from devcamper.security import hash_password
from devcamper.services import parse_id, reject_nulls
from devcamper.services.bootcamp_service import BootcampService

logger = logging.getLogger(__name__)


class UserService:

    def __init__(self, bootcamps: BootcampService):
        self.bootcamps = bootcamps

    async def _load(self, db: AsyncSession, raw_id) -> Result[User]:
        parsed = parse_id(raw_id)
        if not parsed.ok:
            return parsed
        user = await db.get(User, parsed.value)
        if user is None:
            return Err(NotFoundError(f"No user with id of {raw_id}"))
        return Ok(user)

    async def get(self, db: AsyncSession, raw_id) -> Result[Dict[str, Any]]:
        loaded = await self._load(db, raw_id)
        if not loaded.ok:
            return loaded
        return Ok(user_to_dict(loaded.value))

    async def create(self, db: AsyncSession, payload: UserCreate) -> Result[Dict[str, Any]]:
        user = User(
            name=payload.name,
            email=payload.email.lower(),
            role=payload.role.value,
            password_hash=hash_password(payload.password),
        )
        db.add(user)
        await db.flush()
        logger.info("User %s created with role %s", user.id, user.role)
        return Ok(user_to_dict(user))

    async def update(self, db: AsyncSession, raw_id, payload: UserUpdate) -> Result[Dict[str, Any]]:
        loaded = await self._load(db, raw_id)
        if not loaded.ok:
            return loaded
        user = loaded.value

        changes = payload.model_dump(exclude_unset=True, mode="json")
        nulled = reject_nulls(changes, ("name", "email", "role"))
        if nulled:
            return nulled
        if "email" in changes:
            changes["email"] = changes["email"].lower()

        for name, value in changes.items():
            setattr(user, name, value)
        await db.flush()
        return Ok(user_to_dict(user))

    async def delete(self, db: AsyncSession, raw_id) -> Result[Dict[str, Any]]:
        loaded = await self._load(db, raw_id)
        if not loaded.ok:
            return loaded
        user = loaded.value

        owned = (await db.execute(select(Bootcamp).where(Bootcamp.user_id == user.id))).scalars().all()
        for bootcamp in owned:
            await self.bootcamps.remove(db, bootcamp)

        # Whatever is left sits on other users' bootcamps
        for model in (Review, Course):
            rows = (await db.execute(select(model).where(model.user_id == user.id))).scalars().all()
            for row in rows:
                await db.delete(row)
        await db.flush()

        await db.delete(user)
        await db.flush()
        logger.info("User %s deleted with %d bootcamps", user.id, len(owned))
        return Ok({})
