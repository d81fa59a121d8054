"""
Session cookies.

The session is a signed JWT carrying the caller's email, stored in the
http-only ``access_token`` cookie.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Cookie, Depends, Response

from chatterbox.config import Settings
from chatterbox.database import Database, get_db, get_settings
from chatterbox.errors import AuthenticationError
from chatterbox.policies import Identity, can_moderate, ensure

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "access_token"
ALGORITHM = "HS256"


def create_access_token(email: str, settings: Settings) -> str:
    expire = datetime.now(timezone.utc) + timedelta(hours=settings.access_token_expire_hours)
    return jwt.encode({"email": email, "exp": expire}, settings.jwt_secret, algorithm=ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> str:
    """Return the email inside a valid token, else raise AuthenticationError."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.debug("Rejected expired session token")
        raise AuthenticationError()
    except jwt.PyJWTError as e:
        logger.debug("Rejected session token: %s", e)
        raise AuthenticationError()
    email = payload.get("email")
    if not email:
        raise AuthenticationError()
    return email


def cookie_options(settings: Settings) -> dict:
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "none" if settings.is_production else "strict",
    }


def set_session_cookie(response: Response, email: str, settings: Settings) -> None:
    token = create_access_token(email, settings)
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        token,
        max_age=settings.access_token_expire_hours * 3600,
        **cookie_options(settings),
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(ACCESS_TOKEN_COOKIE, **cookie_options(settings))


# ---------- Dependencies ----------

def get_current_email(
    access_token: Optional[str] = Cookie(None),
    settings: Settings = Depends(get_settings),
) -> str:
    if not access_token:
        raise AuthenticationError()
    return decode_access_token(access_token, settings)


def get_identity(
    email: str = Depends(get_current_email),
    db: Database = Depends(get_db),
) -> Identity:
    user = db["users"].find_one({"email": email})
    return Identity.from_user(email, user)


def require_admin(
    email: str = Depends(get_current_email),
    db: Database = Depends(get_db),
) -> Identity:
    user = db["users"].find_one({"email": email})
    identity = Identity.from_user(email, user)
    ensure(user is not None and can_moderate(identity))
    return identity
