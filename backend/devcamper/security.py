"""
DevCamper Backend — Password Hashing and Tokens
=================================================

What:  bcrypt password hashing (passlib), signed JWT access tokens
       (python-jose), and password-reset tokens.
How:   Access tokens carry the user id in `sub` and expire after
       settings.jwt_expire_days. Reset tokens are random hex strings; only
       their sha256 digest is stored on the user row.
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from jose import JWTError, jwt
from passlib.context import CryptContext

from devcamper.config import Settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def create_access_token(user_id, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=settings.jwt_expire_days))
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> Optional[str]:
    """Return the user id from a valid token, or None when invalid/expired."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    return payload.get("sub")


def hash_reset_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode()).hexdigest()


def generate_reset_token(settings: Settings) -> Tuple[str, str, datetime]:
    """
    Returns (raw token for the email, digest to store, expiry timestamp).
    """
    raw = secrets.token_hex(20)
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.reset_token_expire_minutes)
    return raw, hash_reset_token(raw), expire
