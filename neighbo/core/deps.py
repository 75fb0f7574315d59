"""
FastAPI dependencies for authentication and ownership.
"""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from neighbo.core.errors import ForbiddenError, UnauthorizedError
from neighbo.core.security import Identity, verify_identity_token
from neighbo.db.session import get_db
from neighbo.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """Verified identity of the caller, or 401."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Missing or invalid Authorization header")
    return verify_identity_token(credentials.credentials)


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise ForbiddenError("Administrator access required")
    return identity


def _owns(db: Session, identity: Identity, restaurant_id: str) -> bool:
    # Compares the claimed id only; a pending claim is enough.
    user = db.get(User, identity.uid)
    return user is not None and user.claimed_restaurant_id == restaurant_id


def require_ownership(
    restaurant_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> Identity:
    """Gate for owner-only writes on /restaurants/{restaurant_id}/..."""
    if not _owns(db, identity, restaurant_id):
        raise ForbiddenError("Not the owner of this restaurant")
    return identity


def require_owner_or_admin(
    restaurant_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> Identity:
    if identity.is_admin or _owns(db, identity, restaurant_id):
        return identity
    raise ForbiddenError("Not the owner of this restaurant")
