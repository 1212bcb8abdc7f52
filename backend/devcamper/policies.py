"""
DevCamper Backend — Authorization Policy
==========================================

What:  Pure allow/deny decisions used by every service before it mutates a
       resource.
How:   Functions take the subject's role and id plus the resource owner id
       (or the subject's existing bootcamp count) and return a bool. They do
       no I/O, so they are unit-tested in isolation.

Rules:
    can_modify      → admin, or subject is the owner
    may_publish     → admin, or subject owns no bootcamp yet
    has_role        → subject role is one of the allowed roles
"""

from typing import Iterable, Optional
from uuid import UUID

from devcamper.models.user import UserRole


def _same_id(a, b) -> bool:
    if a is None or b is None:
        return False
    return str(a) == str(b)


def has_role(subject_role: str, allowed: Iterable[str]) -> bool:
    return subject_role in {str(getattr(role, "value", role)) for role in allowed}


def can_modify(subject_role: str, subject_id: UUID, owner_id: Optional[UUID]) -> bool:
    """Allow when the subject is an admin or owns the resource."""
    if subject_role == UserRole.ADMIN.value:
        return True
    return _same_id(subject_id, owner_id)


def may_publish(subject_role: str, owned_bootcamps: int) -> bool:
    """Non-admin users may publish a single bootcamp."""
    if subject_role == UserRole.ADMIN.value:
        return True
    return owned_bootcamps == 0
