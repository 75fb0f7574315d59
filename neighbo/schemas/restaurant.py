"""
Restaurant request/response schemas.
"""
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import Field

from neighbo.models.restaurant import Restaurant
from neighbo.schemas.common import CamelModel, Location

SortMode = Literal["distance", "name", "certTier"]


class RestaurantValue(CamelModel):
    """A value assertion joined with its current catalog label."""
    slug: str
    label: str
    cert_tier: int
    self_attested: bool
    report_count: int
    verified_at: Optional[datetime] = None


def resolve_values(restaurant: Restaurant, labels: Dict[str, str]) -> List[RestaurantValue]:
    """Join a restaurant's assertions with catalog labels (slug as fallback)."""
    return [
        RestaurantValue(
            slug=a.slug,
            label=labels.get(a.slug, a.slug),
            cert_tier=a.cert_tier,
            self_attested=a.self_attested,
            report_count=a.report_count,
            verified_at=a.verified_at,
        )
        for a in restaurant.values
    ]


class RestaurantSummary(CamelModel):
    id: str
    google_place_id: str
    name: str
    city: str
    values: List[RestaurantValue]
    cert_tier_max: int
    location: Location
    distance_km: Optional[float] = None

    @classmethod
    def build(
        cls,
        restaurant: Restaurant,
        labels: Dict[str, str],
        distance_km: Optional[float] = None,
    ) -> "RestaurantSummary":
        return cls(
            id=restaurant.id,
            google_place_id=restaurant.google_place_id,
            name=restaurant.name,
            city=restaurant.city,
            values=resolve_values(restaurant, labels),
            cert_tier_max=restaurant.cert_tier_max,
            location=Location(lat=restaurant.lat, lng=restaurant.lng),
            distance_km=distance_km,
        )


class RestaurantResponse(CamelModel):
    id: str
    google_place_id: str
    name: str
    city: str
    location: Location
    geohash: str
    values: List[RestaurantValue]
    value_slugs: List[str]
    cert_tier_max: int
    total_report_count: int
    claimed_by_user_id: Optional[str]
    claim_status: Optional[Literal["pending", "approved", "rejected"]]
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime]

    @classmethod
    def build(cls, restaurant: Restaurant, labels: Dict[str, str]) -> "RestaurantResponse":
        return cls(
            id=restaurant.id,
            google_place_id=restaurant.google_place_id,
            name=restaurant.name,
            city=restaurant.city,
            location=Location(lat=restaurant.lat, lng=restaurant.lng),
            geohash=restaurant.geohash,
            values=resolve_values(restaurant, labels),
            value_slugs=restaurant.value_slugs,
            cert_tier_max=restaurant.cert_tier_max,
            total_report_count=restaurant.total_report_count,
            claimed_by_user_id=restaurant.claimed_by_user_id,
            claim_status=restaurant.claim_status,
            created_at=restaurant.created_at,
            updated_at=restaurant.updated_at,
            deleted_at=restaurant.deleted_at,
        )


class RestaurantCreate(CamelModel):
    google_place_id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=200)
    city: str = Field(min_length=1, max_length=100)
    location: Location
    values: List[str] = []


class RestaurantUpdate(CamelModel):
    values: Optional[List[str]] = None


class NearbyResponse(CamelModel):
    restaurants: List[RestaurantSummary]


class RestaurantListResponse(CamelModel):
    restaurants: List[RestaurantSummary]
    next_cursor: Optional[str]
