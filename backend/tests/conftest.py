"""
DevCamper Backend — Test Configuration (conftest.py)
======================================================

What:  Shared fixtures: settings over a temporary SQLite database, a fake
       geocoder, the application context, an HTTP client and a set of
       accounts with tokens.
How:   Every test gets a fresh app from create_app(context=...) with tables
       created from the model metadata. No network and no PostgreSQL needed.

Fixture Hierarchy (all function-scoped):
    settings → geocoder → context → app → client
                                   └── publisher / other_publisher / member / admin
"""

import os
import tempfile
from dataclasses import dataclass
from typing import Dict, Optional
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set before devcamper is imported: devcamper.main builds a default app at import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./devcamper_import.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["FILE_UPLOAD_PATH"] = tempfile.mkdtemp(prefix="devcamper_test_")

from devcamper.config import Settings  # noqa: E402
from devcamper.context import AppContext  # noqa: E402
from devcamper.database import Base  # noqa: E402
from devcamper.exceptions import GeocodingError  # noqa: E402
from devcamper.main import create_app  # noqa: E402
from devcamper.models.user import User  # noqa: E402
from devcamper.result import Err, Ok  # noqa: E402
from devcamper.security import create_access_token, hash_password  # noqa: E402
from devcamper.services.geocoder import GeoLocation  # noqa: E402

API = "/api/v1"

TEST_PASSWORD = "123456"


# ══════════════════════════════════════════════════════════════════════════
# Fake Geocoder
# ══════════════════════════════════════════════════════════════════════════

def _place(lat: float, lng: float, city: str, state: str, zipcode: str) -> GeoLocation:
    return GeoLocation(
        latitude=lat,
        longitude=lng,
        formatted_address=f"{city}, {state} {zipcode}, US",
        street=None,
        city=city,
        state=state,
        zipcode=zipcode,
        country="US",
    )


# Addresses and zipcodes the fake geocoder knows about
KNOWN_PLACES: Dict[str, GeoLocation] = {
    "233 Bay State Rd Boston MA 02215": _place(42.350846, -71.103744, "Boston", "MA", "02215"),
    "02118": _place(42.336, -71.072, "Boston", "MA", "02118"),
    "45 Upper College Rd Kingston RI 02881": _place(41.486, -71.526, "Kingston", "RI", "02881"),
    "220 Pawtucket St, Lowell, MA 01854": _place(42.646, -71.330, "Lowell", "MA", "01854"),
    "10001": _place(40.750, -73.997, "New York", "NY", "10001"),
    "90210": _place(34.090, -118.406, "Beverly Hills", "CA", "90210"),
}


class FakeGeocoder:
    """Stands in for the HTTP geocoder; unknown queries fail like a no-match lookup."""

    def __init__(self, places: Optional[Dict[str, GeoLocation]] = None):
        self.places = dict(places or KNOWN_PLACES)
        self.queries = []
        self.closed = False

    async def geocode(self, query: str):
        self.queries.append(query)
        location = self.places.get(query)
        if location is None:
            return Err(GeocodingError(message=f"Could not geocode '{query}'"))
        return Ok(location)

    async def aclose(self) -> None:
        self.closed = True


# ══════════════════════════════════════════════════════════════════════════
# Application Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        file_upload_path=str(tmp_path / "uploads"),
        max_file_upload=1024,
        jwt_secret="test-secret",
        rate_limit_requests=1000,
        log_level="WARNING",
        smtp_host="",
    )


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest_asyncio.fixture
async def context(settings, geocoder):
    ctx = AppContext.build(settings, geocoder=geocoder)
    async with ctx.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield ctx
    await ctx.close()


@pytest.fixture
def app(context):
    return create_app(context=context)


@pytest_asyncio.fixture
async def client(app):
    """
    HTTPX AsyncClient routed straight into the app.

    raise_app_exceptions=False: unexpected errors come back as the 500
    envelope instead of propagating into the test.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Accounts
# ══════════════════════════════════════════════════════════════════════════

@dataclass
class Account:
    id: UUID
    email: str
    role: str
    token: str

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


async def make_account(context: AppContext, name: str, email: str, role: str) -> Account:
    async with context.session_factory() as session:
        user = User(name=name, email=email, role=role, password_hash=hash_password(TEST_PASSWORD))
        session.add(user)
        await session.commit()
        return Account(
            id=user.id,
            email=email,
            role=role,
            token=create_access_token(user.id, context.settings),
        )


@pytest_asyncio.fixture
async def publisher(context) -> Account:
    return await make_account(context, "Publisher One", "publisher@gmail.com", "publisher")


@pytest_asyncio.fixture
async def other_publisher(context) -> Account:
    return await make_account(context, "Publisher Two", "publisher2@gmail.com", "publisher")


@pytest_asyncio.fixture
async def member(context) -> Account:
    return await make_account(context, "Regular User", "user@gmail.com", "user")


@pytest_asyncio.fixture
async def other_member(context) -> Account:
    return await make_account(context, "Another User", "user2@gmail.com", "user")


@pytest_asyncio.fixture
async def admin(context) -> Account:
    return await make_account(context, "Admin", "admin@gmail.com", "admin")


# ══════════════════════════════════════════════════════════════════════════
# Payload Helpers
# ══════════════════════════════════════════════════════════════════════════

def bootcamp_payload(**overrides) -> Dict:
    payload = {
        "name": "Devworks Bootcamp",
        "description": "Devworks is a full stack JavaScript Bootcamp located in the heart of Boston",
        "website": "https://devworks.com",
        "phone": "(111) 111-1111",
        "email": "enroll@devworks.com",
        "address": "233 Bay State Rd Boston MA 02215",
        "careers": ["Web Development", "UI/UX", "Business"],
        "housing": True,
        "job_assistance": True,
        "job_guarantee": False,
        "accept_gi": True,
    }
    payload.update(overrides)
    return payload


def course_payload(**overrides) -> Dict:
    payload = {
        "title": "Front End Web Development",
        "description": "This course will provide you with all of the essentials",
        "weeks": "8",
        "tuition": 8000,
        "minimum_skill": "beginner",
        "scholarship_available": True,
    }
    payload.update(overrides)
    return payload


def review_payload(**overrides) -> Dict:
    payload = {"title": "Learned a ton!", "text": "Great instructors and projects.", "rating": 8}
    payload.update(overrides)
    return payload


async def create_bootcamp(client: AsyncClient, account: Account, **overrides) -> Dict:
    response = await client.post(f"{API}/bootcamps", json=bootcamp_payload(**overrides), headers=account.headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def create_course(client: AsyncClient, account: Account, bootcamp_id: str, **overrides) -> Dict:
    response = await client.post(
        f"{API}/bootcamps/{bootcamp_id}/courses", json=course_payload(**overrides), headers=account.headers
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]
