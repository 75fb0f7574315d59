"""
Endpoints for the signed-in user: profile, favorites and report history.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from neighbo.core.deps import get_current_identity
from neighbo.core.security import Identity
from neighbo.db.session import get_db
from neighbo.schemas.report import ReportListResponse, ReportResponse
from neighbo.schemas.user import (
    FavoriteListResponse,
    FavoriteResponse,
    UserResponse,
    UserUpdate,
)
from neighbo.services.reports import ReportService
from neighbo.services.users import UserService

router = APIRouter(prefix="/me", tags=["me"])


@router.get("", response_model=UserResponse)
def get_me(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Current profile, created on first access."""
    return UserResponse.model_validate(UserService(db).get_profile(identity))


@router.patch("", response_model=UserResponse)
def update_me(
    data: UserUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return UserResponse.model_validate(UserService(db).update_profile(identity, data))


@router.get("/favorites", response_model=FavoriteListResponse)
def list_favorites(
    cursor: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    favorites, next_cursor = UserService(db).list_favorites(identity.uid, cursor=cursor, limit=limit)
    return FavoriteListResponse(
        favorites=[FavoriteResponse.model_validate(f) for f in favorites],
        next_cursor=next_cursor,
    )


@router.post("/favorites/{restaurant_id}", response_model=FavoriteResponse, status_code=status.HTTP_201_CREATED)
def add_favorite(
    restaurant_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return FavoriteResponse.model_validate(UserService(db).add_favorite(identity.uid, restaurant_id))


@router.delete("/favorites/{restaurant_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_favorite(
    restaurant_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    UserService(db).remove_favorite(identity.uid, restaurant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/reports", response_model=ReportListResponse)
def my_reports(
    cursor: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """The caller's reports, newest first, including those of deleted restaurants."""
    reports, next_cursor = ReportService(db).list_for_user(identity.uid, cursor=cursor, limit=limit)
    return ReportListResponse(
        reports=[ReportResponse.model_validate(r) for r in reports],
        next_cursor=next_cursor,
    )
