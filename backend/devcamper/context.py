"""
DevCamper Backend — Application Context
=========================================

What:  The one object holding everything that lives as long as the app:
       settings, the database engine and session factory, the external
       collaborators (geocoder, photo storage, mailer) and the services
       built on top of them.
How:   create_app() builds (or receives) an AppContext and stores it on
       app.state.context. Dependencies reach it through the request, so
       nothing reads module-level globals at request time.
Who:   Tests build their own context with a fake geocoder and a SQLite URL.

Lifecycle:
    connect()  → SELECT 1 against the database; failure aborts startup
    close()    → closes the geocoder HTTP client and disposes the engine
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from devcamper.config import Settings
from devcamper.database import build_engine, build_session_factory, ping
from devcamper.services.auth_service import AuthService
from devcamper.services.bootcamp_service import BootcampService
from devcamper.services.course_service import CourseService
from devcamper.services.file_service import PhotoStorage
from devcamper.services.geocoder import Geocoder
from devcamper.services.mail_service import Mailer
from devcamper.services.review_service import ReviewService
from devcamper.services.user_service import UserService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    geocoder: Geocoder
    photos: PhotoStorage
    mailer: Mailer
    bootcamps: BootcampService
    courses: CourseService
    reviews: ReviewService
    users: UserService
    auth: AuthService

    @classmethod
    def build(
        cls,
        settings: Settings,
        geocoder: Optional[Geocoder] = None,
        mailer: Optional[Mailer] = None,
    ) -> "AppContext":
        """Wire the default collaborators; callers may substitute the external ones."""
        engine = build_engine(settings)
        geocoder = geocoder or Geocoder(settings)
        mailer = mailer or Mailer(settings)
        photos = PhotoStorage(settings.file_upload_path, settings.max_file_upload)
        bootcamps = BootcampService(geocoder, photos)

        return cls(
            settings=settings,
            engine=engine,
            session_factory=build_session_factory(engine),
            geocoder=geocoder,
            photos=photos,
            mailer=mailer,
            bootcamps=bootcamps,
            courses=CourseService(),
            reviews=ReviewService(),
            users=UserService(bootcamps),
            auth=AuthService(settings, mailer),
        )

    async def connect(self) -> None:
        await ping(self.engine)
        logger.info("Database connected: %s", self.engine.url.render_as_string(hide_password=True))

    async def close(self) -> None:
        await self.geocoder.aclose()
        await self.engine.dispose()
        logger.info("Database engine disposed")


def get_context(request: Request) -> AppContext:
    return request.app.state.context
