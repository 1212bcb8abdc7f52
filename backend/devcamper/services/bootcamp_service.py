"""
DevCamper Backend — Bootcamp Service
======================================

What:  Bootcamp CRUD, radius search and photo upload.
How:   Each operation loads what it needs, asks devcamper.policies for an
       allow/deny, delegates persistence to the session, and returns a
       Result holding the serialized bootcamp (or an ApiError).
Who:   devcamper.routes.bootcamps.

Failure policy:
    missing bootcamp      → NotFoundError   "Bootcamp not found with id of {id}"
    not owner nor admin   → ForbiddenError  "User {uid} is not authorized to ... this bootcamp"
    second bootcamp       → 400             "The user with ID {uid} has already published a bootcamp"
    bad photo upload      → BadUploadError  (record left unchanged)

Radius Search:
    distance is in miles; radius (radians) = distance / 3963, the earth's
    radius in miles. A latitude/longitude bounding box narrows the rows in
    SQL, then the exact great-circle angle filters them. Widening the
    distance only widens both tests, so results grow monotonically.
"""

import logging
import math
from typing import Any, Dict, List, Optional

from fastapi import UploadFile
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.exceptions import CastError, ForbiddenError, NotFoundError, ValidationFailedError
from devcamper.models.bootcamp import DEFAULT_PHOTO, Bootcamp
from devcamper.models.user import User
from devcamper.policies import can_modify, may_publish
from devcamper.result import Err, Ok, Result
from devcamper.schemas.bootcamp import BootcampCreate, BootcampUpdate, bootcamp_to_dict
from devcamper.services import parse_id, reject_nulls
from devcamper.services.file_service import PhotoStorage
from devcamper.services.geocoder import Geocoder

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES = 3963.0

_REQUIRED_FIELDS = ("name", "description", "address", "careers")


def central_angle(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle angle in radians between two points (haversine)."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * math.asin(min(1.0, math.sqrt(a)))


def bounding_box(lat: float, lng: float, radius: float) -> List[Any]:
    """SQL predicates for the lat/lng box enclosing a spherical cap of `radius` radians."""
    d_lat = math.degrees(radius)
    predicates = [
        Bootcamp.latitude.is_not(None),
        Bootcamp.longitude.is_not(None),
        Bootcamp.latitude.between(lat - d_lat, lat + d_lat),
    ]
    cos_lat = math.cos(math.radians(lat))
    # a cap that reaches a pole, or a box crossing the antimeridian, spans every longitude
    if radius < math.pi / 2 and math.sin(radius) < cos_lat:
        d_lng = math.degrees(math.asin(math.sin(radius) / cos_lat))
        if -180.0 <= lng - d_lng and lng + d_lng <= 180.0:
            predicates.append(Bootcamp.longitude.between(lng - d_lng, lng + d_lng))
    return predicates


class BootcampService:
    """
    Args:
        geocoder: resolves addresses and zipcodes
        photos:   photo validation and storage
    """

    def __init__(self, geocoder: Geocoder, photos: PhotoStorage):
        self.geocoder = geocoder
        self.photos = photos

    async def _load(self, db: AsyncSession, raw_id) -> Result[Bootcamp]:
        parsed = parse_id(raw_id)
        if not parsed.ok:
            return parsed
        bootcamp = await db.get(Bootcamp, parsed.value)
        if bootcamp is None:
            return Err(NotFoundError(f"Bootcamp not found with id of {raw_id}"))
        return Ok(bootcamp)

    async def _load_for_change(self, db: AsyncSession, user: User, raw_id, action: str) -> Result[Bootcamp]:
        loaded = await self._load(db, raw_id)
        if not loaded.ok:
            return loaded
        if not can_modify(user.role, user.id, loaded.value.user_id):
            return Err(ForbiddenError(f"User {user.id} is not authorized to {action} this bootcamp"))
        return loaded

    # ── Read ──────────────────────────────────────────────────────────────

    async def get(self, db: AsyncSession, raw_id) -> Result[Dict[str, Any]]:
        loaded = await self._load(db, raw_id)
        if not loaded.ok:
            return loaded
        return Ok(bootcamp_to_dict(loaded.value))

    # ── Create ────────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, user: User, payload: BootcampCreate) -> Result[Dict[str, Any]]:
        owned = (
            await db.execute(select(func.count()).select_from(Bootcamp).where(Bootcamp.user_id == user.id))
        ).scalar_one()

        if not may_publish(user.role, owned):
            return Err(
                ValidationFailedError(
                    message=f"The user with ID {user.id} has already published a bootcamp"
                )
            )

        location = await self.geocoder.geocode(payload.address)
        if not location.ok:
            return location

        bootcamp = Bootcamp(**payload.model_dump(), **location.value.as_columns(), user_id=user.id)
        db.add(bootcamp)
        await db.flush()

        logger.info("Bootcamp %s created by user %s", bootcamp.id, user.id)
        return Ok(bootcamp_to_dict(bootcamp))

    # ── Update ────────────────────────────────────────────────────────────

    async def update(
        self, db: AsyncSession, user: User, raw_id, payload: BootcampUpdate
    ) -> Result[Dict[str, Any]]:
        loaded = await self._load_for_change(db, user, raw_id, "update")
        if not loaded.ok:
            return loaded
        bootcamp = loaded.value

        changes = payload.model_dump(exclude_unset=True)
        nulled = reject_nulls(changes, _REQUIRED_FIELDS)
        if nulled:
            return nulled

        if "address" in changes and changes["address"] != bootcamp.address:
            location = await self.geocoder.geocode(changes["address"])
            if not location.ok:
                return location
            changes.update(location.value.as_columns())

        for name, value in changes.items():
            setattr(bootcamp, name, value)
        await db.flush()

        logger.info("Bootcamp %s updated by user %s: %s", bootcamp.id, user.id, sorted(changes))
        return Ok(bootcamp_to_dict(bootcamp))

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete(self, db: AsyncSession, user: User, raw_id) -> Result[Dict[str, Any]]:
        loaded = await self._load_for_change(db, user, raw_id, "delete")
        if not loaded.ok:
            return loaded
        bootcamp = loaded.value

        await self.remove(db, bootcamp)
        logger.info("Bootcamp %s deleted by user %s", bootcamp.id, user.id)
        return Ok({})

    async def remove(self, db: AsyncSession, bootcamp: Bootcamp) -> None:
        """
        Delete through the ORM so the before_delete hook takes the courses
        and reviews with it, then drop the stored photo.
        """
        photo = bootcamp.photo
        await db.delete(bootcamp)
        await db.flush()

        if photo and photo != DEFAULT_PHOTO:
            await self.photos.remove(photo)

    # ── Radius Search ─────────────────────────────────────────────────────

    async def within_radius(self, db: AsyncSession, zipcode: str, raw_distance: str) -> Result[Dict[str, Any]]:
        try:
            distance = float(raw_distance)
        except ValueError:
            return Err(CastError(raw_distance, message=f"Invalid distance '{raw_distance}'"))
        if distance < 0 or math.isnan(distance) or math.isinf(distance):
            return Err(ValidationFailedError(message="Distance must be a non-negative number of miles"))

        center = await self.geocoder.geocode(zipcode)
        if not center.ok:
            return center
        lat, lng = center.value.latitude, center.value.longitude

        radius = distance / EARTH_RADIUS_MILES
        rows = (
            await db.execute(select(Bootcamp).where(*bounding_box(lat, lng, radius)))
        ).scalars().all()

        matches = [
            bootcamp
            for bootcamp in rows
            if central_angle(lat, lng, bootcamp.latitude, bootcamp.longitude) <= radius
        ]
        logger.debug("Radius search %s/%s mi: %d of %d candidates", zipcode, distance, len(matches), len(rows))
        return Ok({"count": len(matches), "data": [bootcamp_to_dict(b) for b in matches]})

    # ── Photo Upload ──────────────────────────────────────────────────────

    async def upload_photo(
        self, db: AsyncSession, user: User, raw_id, upload: Optional[UploadFile]
    ) -> Result[str]:
        loaded = await self._load_for_change(db, user, raw_id, "update")
        if not loaded.ok:
            return loaded
        bootcamp = loaded.value

        if upload is None:
            return Err(self.photos.validate(None, None, 0))

        # Reject on the declared size before reading; otherwise read one byte
        # past the limit so an oversized body is detected without buffering it
        size = upload.size or 0
        problem = self.photos.validate(upload.filename, upload.content_type, size)
        if problem:
            return Err(problem)
        content = await upload.read(self.photos.max_size + 1)
        problem = self.photos.validate(upload.filename, upload.content_type, len(content))
        if problem:
            return Err(problem)

        previous = bootcamp.photo
        filename = self.photos.photo_filename(bootcamp.id, upload.filename)
        stored = await self.photos.save(filename, content)
        if not stored.ok:
            return stored

        bootcamp.photo = filename
        await db.flush()

        if previous and previous not in (DEFAULT_PHOTO, filename):
            await self.photos.remove(previous)
        return Ok(filename)
