"""
DevCamper Backend — User and Auth Schemas
===========================================

What:  Bodies for registration, login, profile/password updates, password
       reset, and admin user management; plus the public user representation.

Password rules: at least 6 characters. Self-registration may choose `user`
or `publisher`; only the admin endpoints can assign `admin`.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from devcamper.models.user import UserRole

PASSWORD_MIN_LENGTH = 6


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    role: Literal["user", "publisher"] = "user"


class LoginRequest(BaseModel):
    # Optional so a missing field yields the "provide an email and password" message
    email: Optional[str] = None
    password: Optional[str] = None


class UpdateDetailsRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None


class UpdatePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    role: UserRole = UserRole.USER


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None


class UserOut(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    role: str
    created_at: datetime

    model_config = {"from_attributes": True}


def user_to_dict(user) -> Dict[str, Any]:
    return UserOut.model_validate(user).model_dump(mode="json")
