"""
Identity token handling.

The identity provider signs a JWT per session; the API only needs the verified
subject (uid) plus optional profile claims. Token issuance is kept here for
local development and tests.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError

from neighbo.core.config import get_settings
from neighbo.core.errors import UnauthorizedError


@dataclass(frozen=True)
class Identity:
    """Verified claims about the caller."""
    uid: str
    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None
    is_admin: bool = False


def create_access_token(
    subject: str,
    email: Optional[str] = None,
    name: Optional[str] = None,
    picture: Optional[str] = None,
    admin: bool = False,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed identity token."""
    settings = get_settings()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.AUTH_TOKEN_EXPIRE_MINUTES)

    to_encode = {"sub": str(subject), "exp": expire}
    if email:
        to_encode["email"] = email
    if name:
        to_encode["name"] = name
    if picture:
        to_encode["picture"] = picture
    if admin:
        to_encode["admin"] = True
    if settings.AUTH_JWT_AUDIENCE:
        to_encode["aud"] = settings.AUTH_JWT_AUDIENCE
    if settings.AUTH_JWT_ISSUER:
        to_encode["iss"] = settings.AUTH_JWT_ISSUER
    return jwt.encode(to_encode, settings.AUTH_JWT_SECRET_KEY, algorithm=settings.AUTH_JWT_ALGORITHM)


def decode_token(token: str) -> dict | None:
    """Decode and validate a token. Returns payload or None if invalid."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET_KEY,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
            issuer=settings.AUTH_JWT_ISSUER,
            options={"verify_aud": settings.AUTH_JWT_AUDIENCE is not None},
        )
        return payload
    except JWTError:
        return None


def verify_identity_token(token: str) -> Identity:
    """
    Turn a bearer token into a verified Identity.

    Raises:
        UnauthorizedError: if the token is invalid, expired, or has no subject
    """
    payload = decode_token(token)
    if payload is None or not payload.get("sub"):
        raise UnauthorizedError("Invalid or expired token")

    return Identity(
        uid=str(payload["sub"]),
        email=payload.get("email"),
        name=payload.get("name"),
        picture=payload.get("picture"),
        is_admin=payload.get("admin") is True,
    )
