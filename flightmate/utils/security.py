"""
Security Utilities
Password hashing (bcrypt) and JWT issue/verify (PyJWT, HS256)
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import bcrypt
import jwt
from loguru import logger

from ..config import settings

JWT_ALGORITHM = "HS256"

NO_TOKEN_MESSAGE = "No token provided. Authorization denied."
INVALID_TOKEN_MESSAGE = "Invalid token. Authorization denied."
EXPIRED_TOKEN_MESSAGE = "Token expired. Please login again."
USER_NOT_FOUND_MESSAGE = "User not found. Authorization denied."

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


class AuthError(Exception):
    """Token missing, invalid or expired; `str(e)` is the client-facing message"""


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def parse_expires_in(value: str) -> timedelta:
    """
    "7d", "24h", "30m", "3600s" or bare seconds -> timedelta

    Raises ValueError on anything else.
    """
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid token lifetime: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _UNIT_SECONDS[unit.lower()])


def create_access_token(
    user_id: str,
    email: str,
    secret: Optional[str] = None,
    expires_in: Optional[str] = None,
) -> str:
    expires_at = datetime.now(timezone.utc) + parse_expires_in(expires_in or settings.JWT_EXPIRES_IN)
    payload = {"userId": user_id, "email": email, "exp": expires_at}
    return jwt.encode(payload, secret or settings.JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str, secret: Optional[str] = None) -> Dict[str, Any]:
    """Verified payload; raises AuthError with the message to send back"""
    if not token:
        raise AuthError(NO_TOKEN_MESSAGE)
    try:
        payload = jwt.decode(token, secret or settings.JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise AuthError(EXPIRED_TOKEN_MESSAGE) from e
    except jwt.InvalidTokenError as e:
        raise AuthError(INVALID_TOKEN_MESSAGE) from e

    if not payload.get("userId"):
        raise AuthError(INVALID_TOKEN_MESSAGE)
    return payload
