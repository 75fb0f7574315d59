"""
Nearby restaurant search over the geohash index.

A disc is approximated by a handful of geohash ranges. Each range is one
ordered range scan; the merged candidates are a superset of the answer, so
exact great-circle distance decides the final set.
"""
import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from neighbo.core.errors import BadRequestError, ServiceUnavailableError
from neighbo.core.geohash import distance_km, geohash_query_bounds, validate_location
from neighbo.models.restaurant import Restaurant

logger = logging.getLogger(__name__)


class GeoSearchService:
    def __init__(self, db: Session):
        self.db = db

    def nearby(
        self,
        lat: float,
        lng: float,
        radius_km: float = 5,
        required_slugs: Optional[List[str]] = None,
        limit: int = 20,
    ) -> List[Tuple[Restaurant, float]]:
        """
        Find live restaurants within ``radius_km`` of a point.

        Args:
            lat: Latitude of the query point
            lng: Longitude of the query point
            radius_km: Search radius in kilometers
            required_slugs: Restaurants must carry every one of these values
            limit: Maximum number of results

        Returns:
            (restaurant, distance_km) pairs, nearest first
        """
        try:
            validate_location(lat, lng)
            bounds = geohash_query_bounds(lat, lng, radius_km)
        except ValueError as e:
            raise BadRequestError(str(e))

        candidates: Dict[str, Restaurant] = {}
        try:
            for start, end in bounds:
                stmt = (
                    select(Restaurant)
                    .options(selectinload(Restaurant.values))
                    .where(
                        Restaurant.deleted_at.is_(None),
                        Restaurant.geohash >= start,
                        Restaurant.geohash <= end,
                    )
                    .order_by(Restaurant.geohash)
                )
                for restaurant in self.db.execute(stmt).scalars().all():
                    # Edge cells can show up in more than one range
                    candidates.setdefault(restaurant.id, restaurant)
        except SQLAlchemyError as e:
            logger.error(f"Nearby search failed for ({lat}, {lng}, {radius_km}km): {e}", exc_info=True)
            raise ServiceUnavailableError("Restaurant search is temporarily unavailable")

        required = set(required_slugs or [])
        results: List[Tuple[Restaurant, float]] = []
        for restaurant in candidates.values():
            distance = distance_km(lat, lng, restaurant.lat, restaurant.lng)
            if distance > radius_km:
                continue
            if required and not required.issubset(restaurant.value_slugs):
                continue
            results.append((restaurant, distance))

        results.sort(key=lambda hit: hit[1])
        return results[:limit]
