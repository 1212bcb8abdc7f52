"""
DevCamper Backend — Bootcamp Schemas
======================================

What:  Request bodies for create/update and the response representation.
How:   BootcampCreate mirrors the writable columns; BootcampUpdate makes
       every field optional (partial PUT). BootcampOut folds the flattened
       location columns back into a GeoJSON-like `location` object.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from devcamper.models.bootcamp import CAREERS
from devcamper.schemas.common import strip_text

_URL_PREFIXES = ("http://", "https://")


def _check_careers(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return value
    if not value:
        raise ValueError("Please add at least one career")
    invalid = [career for career in value if career not in CAREERS]
    if invalid:
        raise ValueError(f"Invalid careers {invalid}. Allowed: {list(CAREERS)}")
    # de-duplicate, keep order
    return list(dict.fromkeys(value))


def _check_website(value: Optional[str]) -> Optional[str]:
    if value and not value.startswith(_URL_PREFIXES):
        raise ValueError("Please use a valid URL with HTTP or HTTPS")
    return value


class BootcampCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    description: str = Field(min_length=1, max_length=500)
    website: Optional[str] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = None
    address: str = Field(min_length=1)
    careers: List[str]
    housing: bool = False
    job_assistance: bool = False
    job_guarantee: bool = False
    accept_gi: bool = False

    @field_validator("name", "description", "address")
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        return strip_text(v)

    @field_validator("careers")
    @classmethod
    def validate_careers(cls, v):
        return _check_careers(v)

    @field_validator("website")
    @classmethod
    def validate_website(cls, v):
        return _check_website(v)


class BootcampUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    website: Optional[str] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(default=None, min_length=1)
    careers: Optional[List[str]] = None
    housing: Optional[bool] = None
    job_assistance: Optional[bool] = None
    job_guarantee: Optional[bool] = None
    accept_gi: Optional[bool] = None

    @field_validator("name", "description", "address")
    @classmethod
    def strip_required_text(cls, v: Optional[str]) -> Optional[str]:
        return strip_text(v)

    @field_validator("careers")
    @classmethod
    def validate_careers(cls, v):
        return _check_careers(v)

    @field_validator("website")
    @classmethod
    def validate_website(cls, v):
        return _check_website(v)


class Location(BaseModel):
    type: str = "Point"
    coordinates: List[float] = Field(default_factory=list, description="[longitude, latitude]")
    formatted_address: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None


class BootcampOut(BaseModel):
    id: uuid.UUID
    name: str
    slug: str
    description: str
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: str
    location: Optional[Location] = None
    careers: List[str]
    average_rating: Optional[float] = None
    average_cost: Optional[float] = None
    photo: str
    housing: bool
    job_assistance: bool
    job_guarantee: bool
    accept_gi: bool
    # Serialized as "user", the owner reference
    user_id: uuid.UUID = Field(serialization_alias="user")
    created_at: datetime

    model_config = {"from_attributes": True}

    @model_validator(mode="before")
    @classmethod
    def nest_location(cls, data: Any) -> Any:
        if isinstance(data, dict) or getattr(data, "latitude", None) is None:
            return data
        fields = {name: getattr(data, name) for name in cls.model_fields if name != "location"}
        fields["location"] = Location(
            coordinates=[data.longitude, data.latitude],
            formatted_address=data.formatted_address,
            street=data.street,
            city=data.city,
            state=data.state,
            zipcode=data.zipcode,
            country=data.country,
        )
        return fields


def bootcamp_to_dict(bootcamp) -> Dict[str, Any]:
    return BootcampOut.model_validate(bootcamp).model_dump(mode="json", by_alias=True)
