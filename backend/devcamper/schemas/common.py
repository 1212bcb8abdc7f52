"""Envelope models shared by every resource (used for OpenAPI docs) and common field validators."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


def strip_text(value: Optional[str]) -> Optional[str]:
    """Trim a required text field; None passes through for partial updates."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class PageLink(BaseModel):
    page: int
    limit: int


class Pagination(BaseModel):
    next: Optional[PageLink] = None
    prev: Optional[PageLink] = None


class ErrorResponse(BaseModel):
    """
    Standardized error envelope.

    Example:
        {"success": false, "error": "Bootcamp not found with id of 5d72..."}
    """
    success: bool = Field(default=False)
    error: str = Field(description="Human-readable error description")


class SuccessResponse(BaseModel):
    success: bool = True
    data: Any = None


class ListResponse(BaseModel):
    success: bool = True
    count: int
    pagination: Pagination = Field(default_factory=Pagination)
    data: Any


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float
    details: Optional[Dict[str, Any]] = None
