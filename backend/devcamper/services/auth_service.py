"""
DevCamper Backend — Auth Service
==================================

What:  Registration, login, the caller's own profile, password changes and
       the forgot/reset password flow.
How:   Token-issuing operations return Ok(<jwt>); the route turns that into
       the `{success, token}` body plus the `token` cookie. Reset tokens are
       emailed raw; the user row only keeps their sha256 digest and an
       expiry timestamp.

Failure policy:
    missing email or password       → 400 "Please provide an email and password"
    unknown email / wrong password  → 401 "Invalid credentials"
    wrong current password          → 401 "Password is incorrect"
    forgot password, unknown email  → 404 "There is no user with that email"
    mail delivery failure           → 500 "Email could not be sent" (token cleared)
    unknown or expired reset token  → 400 "Invalid token"
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.config import Settings
from devcamper.exceptions import NotFoundError, UnauthorizedError, ValidationFailedError
from devcamper.models.user import User
from devcamper.result import Err, Ok, Result
from devcamper.schemas.user import (
    LoginRequest,
    RegisterRequest,
    UpdateDetailsRequest,
    UpdatePasswordRequest,
    user_to_dict,
)
from devcamper.security import (
    create_access_token,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)
from devcamper.services import reject_nulls
from devcamper.services.mail_service import Mailer

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AuthService:
    """
    Args:
        settings: JWT and reset-token lifetimes
        mailer:   delivers password reset links
    """

    def __init__(self, settings: Settings, mailer: Mailer):
        self.settings = settings
        self.mailer = mailer

    def _token_for(self, user: User) -> str:
        return create_access_token(user.id, self.settings)

    async def _find_by_email(self, db: AsyncSession, email: str):
        return (
            await db.execute(select(User).where(User.email == email.strip().lower()))
        ).scalar_one_or_none()

    # ── Register / Login ──────────────────────────────────────────────────

    async def register(self, db: AsyncSession, payload: RegisterRequest) -> Result[str]:
        user = User(
            name=payload.name,
            email=payload.email.lower(),
            role=payload.role,
            password_hash=hash_password(payload.password),
        )
        db.add(user)
        await db.flush()
        logger.info("Registered user %s as %s", user.id, user.role)
        return Ok(self._token_for(user))

    async def login(self, db: AsyncSession, payload: LoginRequest) -> Result[str]:
        if not payload.email or not payload.password:
            return Err(ValidationFailedError(message="Please provide an email and password"))

        user = await self._find_by_email(db, payload.email)
        if user is None or not verify_password(payload.password, user.password_hash):
            logger.info("Failed login for %s", payload.email)
            return Err(UnauthorizedError("Invalid credentials"))

        return Ok(self._token_for(user))

    # ── Own Profile ───────────────────────────────────────────────────────

    async def me(self, user: User) -> Result[Dict[str, Any]]:
        return Ok(user_to_dict(user))

    async def update_details(
        self, db: AsyncSession, user: User, payload: UpdateDetailsRequest
    ) -> Result[Dict[str, Any]]:
        changes = payload.model_dump(exclude_unset=True)
        nulled = reject_nulls(changes, ("name", "email"))
        if nulled:
            return nulled
        if "email" in changes:
            changes["email"] = changes["email"].lower()

        for name, value in changes.items():
            setattr(user, name, value)
        await db.flush()
        return Ok(user_to_dict(user))

    async def update_password(
        self, db: AsyncSession, user: User, payload: UpdatePasswordRequest
    ) -> Result[str]:
        if not verify_password(payload.current_password, user.password_hash):
            return Err(UnauthorizedError("Password is incorrect"))

        user.password_hash = hash_password(payload.new_password)
        await db.flush()
        return Ok(self._token_for(user))

    # ── Password Reset ────────────────────────────────────────────────────

    async def forgot_password(self, db: AsyncSession, email: str, base_url: str) -> Result[str]:
        user = await self._find_by_email(db, email)
        if user is None:
            return Err(NotFoundError("There is no user with that email"))

        raw, digest, expire = generate_reset_token(self.settings)
        user.reset_password_token = digest
        user.reset_password_expire = expire
        await db.flush()

        reset_url = f"{base_url}api/v1/auth/resetpassword/{raw}"
        body = (
            "You are receiving this email because you (or someone else) has requested "
            f"the reset of a password. Please make a PUT request to: \n\n {reset_url}"
        )
        sent = await self.mailer.send(user.email, "Password reset token", body)
        if not sent.ok:
            user.reset_password_token = None
            user.reset_password_expire = None
            await db.flush()
            return sent

        return Ok("Email sent")

    async def reset_password(self, db: AsyncSession, raw_token: str, password: str) -> Result[str]:
        user = (
            await db.execute(select(User).where(User.reset_password_token == hash_reset_token(raw_token)))
        ).scalar_one_or_none()

        now = datetime.now(timezone.utc)
        if user is None or user.reset_password_expire is None or _as_utc(user.reset_password_expire) <= now:
            return Err(ValidationFailedError(message="Invalid token"))

        user.password_hash = hash_password(password)
        user.reset_password_token = None
        user.reset_password_expire = None
        await db.flush()

        logger.info("Password reset for user %s", user.id)
        return Ok(self._token_for(user))
