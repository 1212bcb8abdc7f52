"""
DevCamper Backend — Services Layer
====================================

What:  Business logic between routes (HTTP) and models (persistence).
How:   Services receive the request's AsyncSession and the authenticated
       user per call and return Result values. Long-lived collaborators
       (geocoder, photo storage, mailer, settings) are injected through the
       constructor by the application context.

Service Inventory:
    - BootcampService: CRUD, radius search, photo upload
    - CourseService / ReviewService: nested CRUD under a bootcamp
    - UserService: admin user management
    - AuthService: register, login, profile, password reset
    - Geocoder, PhotoStorage, Mailer: external collaborators
    - query_service: generic filter/sort/paginate helper
"""

import uuid
from typing import Any, Dict, Iterable, Optional

from devcamper.exceptions import CastError, ValidationFailedError
from devcamper.result import Err, Ok, Result


def parse_id(raw: Any) -> Result[uuid.UUID]:
    """Path ids arrive as strings; malformed ones are a cast error (400)."""
    if isinstance(raw, uuid.UUID):
        return Ok(raw)
    try:
        return Ok(uuid.UUID(str(raw)))
    except ValueError:
        return Err(CastError(raw))


def reject_nulls(changes: Dict[str, Any], required: Iterable[str]) -> Optional[Err]:
    """Partial updates may not null out required columns."""
    nulled = [name for name in required if name in changes and changes[name] is None]
    if nulled:
        return Err(ValidationFailedError(errors=[f"{name}: must not be null" for name in nulled]))
    return None
