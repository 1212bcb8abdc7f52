"""
Authentication dependencies shared by the routers.

get_current_user reads a bearer token from the Authorization header, falling
back to the `token` cookie, and loads the user it names. require_roles()
builds a dependency that additionally checks the caller's role.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.context import AppContext, get_context
from devcamper.database import get_db_session
from devcamper.exceptions import ForbiddenError, UnauthorizedError
from devcamper.models.user import User, UserRole
from devcamper.policies import has_role
from devcamper.responses import TOKEN_COOKIE
from devcamper.security import decode_access_token
from devcamper.services import parse_id

logger = logging.getLogger(__name__)


def _token_from(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):].strip() or None
    return request.cookies.get(TOKEN_COOKIE) or None


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
) -> User:
    token = _token_from(request)
    if not token:
        raise UnauthorizedError()

    subject = decode_access_token(token, context.settings)
    if subject is None:
        raise UnauthorizedError(context={"reason": "invalid token"})

    user_id = parse_id(subject)
    user = await db.get(User, user_id.value) if user_id.ok else None
    if user is None:
        raise UnauthorizedError(context={"reason": "unknown user", "sub": subject})
    return user


def require_roles(*roles: UserRole):
    async def dependency(user: User = Depends(get_current_user)) -> User:
        if not has_role(user.role, roles):
            raise ForbiddenError(f"User role {user.role} is not authorized to access this route")
        return user

    return dependency


publisher_or_admin = require_roles(UserRole.PUBLISHER, UserRole.ADMIN)
user_or_admin = require_roles(UserRole.USER, UserRole.ADMIN)
admin_only = require_roles(UserRole.ADMIN)
