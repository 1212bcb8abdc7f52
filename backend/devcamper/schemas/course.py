"""Course request bodies and response representation."""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from devcamper.models.course import SkillLevel
from devcamper.schemas.common import strip_text


class CourseCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    weeks: str = Field(min_length=1, max_length=20)
    tuition: float = Field(ge=0)
    minimum_skill: SkillLevel
    scholarship_available: bool = False

    @field_validator("title", "description", "weeks")
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        return strip_text(v)


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    weeks: Optional[str] = Field(default=None, min_length=1, max_length=20)
    tuition: Optional[float] = Field(default=None, ge=0)
    minimum_skill: Optional[SkillLevel] = None
    scholarship_available: Optional[bool] = None

    @field_validator("title", "description", "weeks")
    @classmethod
    def strip_required_text(cls, v: Optional[str]) -> Optional[str]:
        return strip_text(v)


class CourseOut(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    weeks: str
    tuition: float
    minimum_skill: str
    scholarship_available: bool
    bootcamp_id: uuid.UUID
    user_id: uuid.UUID = Field(serialization_alias="user")
    created_at: datetime

    model_config = {"from_attributes": True}


def course_to_dict(course) -> Dict[str, Any]:
    return CourseOut.model_validate(course).model_dump(mode="json", by_alias=True)
