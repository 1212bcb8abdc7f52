"""Review request bodies and response representation."""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from devcamper.schemas.common import strip_text


class ReviewCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    text: str = Field(min_length=1)
    rating: int = Field(ge=1, le=10)

    @field_validator("title", "text")
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        return strip_text(v)


class ReviewUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    text: Optional[str] = Field(default=None, min_length=1)
    rating: Optional[int] = Field(default=None, ge=1, le=10)

    @field_validator("title", "text")
    @classmethod
    def strip_required_text(cls, v: Optional[str]) -> Optional[str]:
        return strip_text(v)


class ReviewOut(BaseModel):
    id: uuid.UUID
    title: str
    text: str
    rating: int
    bootcamp_id: uuid.UUID
    user_id: uuid.UUID = Field(serialization_alias="user")
    created_at: datetime

    model_config = {"from_attributes": True}


def review_to_dict(review) -> Dict[str, Any]:
    return ReviewOut.model_validate(review).model_dump(mode="json", by_alias=True)
