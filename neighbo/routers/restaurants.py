"""
Restaurant discovery and catalog endpoints.

Provides endpoints for:
- Nearby search around a point
- Filtered, cursor-paginated listing
- Create / read / update values / soft delete
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from neighbo.core.deps import get_current_identity, require_owner_or_admin, require_ownership
from neighbo.core.security import Identity
from neighbo.db.session import get_db
from neighbo.schemas.restaurant import (
    NearbyResponse,
    RestaurantCreate,
    RestaurantListResponse,
    RestaurantResponse,
    RestaurantSummary,
    RestaurantUpdate,
    SortMode,
)
from neighbo.services.geo import GeoSearchService
from neighbo.services.restaurants import RestaurantService
from neighbo.services.values import parse_slug_list

router = APIRouter(prefix="/restaurants", tags=["restaurants"])


@router.get("/nearby", response_model=NearbyResponse)
def nearby_restaurants(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius: float = Query(5, gt=0, description="Radius in kilometers"),
    values: Optional[str] = Query(None, description="Comma separated value slugs (all required)"),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """
    Restaurants within ``radius`` km of (lat, lng), nearest first.
    """
    hits = GeoSearchService(db).nearby(
        lat=lat,
        lng=lng,
        radius_km=radius,
        required_slugs=parse_slug_list(values),
        limit=limit,
    )
    service = RestaurantService(db)
    labels = service.labels_for([restaurant for restaurant, _ in hits])
    return NearbyResponse(
        restaurants=[RestaurantSummary.build(r, labels, distance_km=d) for r, d in hits]
    )


@router.get("", response_model=RestaurantListResponse)
def list_restaurants(
    q: Optional[str] = Query(None, description="Case-insensitive name search"),
    values: Optional[str] = Query(None, description="Comma separated value slugs (all required)"),
    city: Optional[str] = Query(None),
    cert_tier: Optional[int] = Query(None, alias="certTier", ge=1, le=3),
    sort: SortMode = Query("name"),
    cursor: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    db: Session = Depends(get_db),
):
    """
    List restaurants with optional filters.

    Follow ``nextCursor`` until it is null to see every match; a page can
    hold fewer than ``limit`` results when several values are required.
    """
    service = RestaurantService(db)
    hits, next_cursor = service.list_restaurants(
        q=q,
        city=city,
        cert_tier=cert_tier,
        value_slugs=parse_slug_list(values),
        sort=sort,
        cursor=cursor,
        limit=limit,
        lat=lat,
        lng=lng,
    )
    labels = service.labels_for([restaurant for restaurant, _ in hits])
    return RestaurantListResponse(
        restaurants=[RestaurantSummary.build(r, labels, distance_km=d) for r, d in hits],
        next_cursor=next_cursor,
    )


@router.get("/{restaurant_id}", response_model=RestaurantResponse)
def get_restaurant(restaurant_id: str, db: Session = Depends(get_db)):
    service = RestaurantService(db)
    restaurant = service.get(restaurant_id)
    return RestaurantResponse.build(restaurant, service.labels_for([restaurant]))


@router.post("", response_model=RestaurantResponse, status_code=status.HTTP_201_CREATED)
def create_restaurant(
    data: RestaurantCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Add a restaurant to the catalog.

    Rejects a duplicate Google Place ID (409) and unknown value slugs (400).
    """
    service = RestaurantService(db)
    restaurant = service.create(data)
    return RestaurantResponse.build(restaurant, service.labels_for([restaurant]))


@router.patch("/{restaurant_id}", response_model=RestaurantResponse)
def update_restaurant(
    restaurant_id: str,
    data: RestaurantUpdate,
    identity: Identity = Depends(require_ownership),
    db: Session = Depends(get_db),
):
    service = RestaurantService(db)
    if data.values is not None:
        restaurant = service.update_values(restaurant_id, data.values)
    else:
        restaurant = service.get(restaurant_id)
    return RestaurantResponse.build(restaurant, service.labels_for([restaurant]))


@router.delete("/{restaurant_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_restaurant(
    restaurant_id: str,
    identity: Identity = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    RestaurantService(db).soft_delete(restaurant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
