"""
Restaurant catalog: create, list, read, update, and soft delete.

Listing uses keyset pagination. The cursor names the last restaurant of the
previous page; the next page resumes strictly after it in the active sort
order, with ties broken by id so the order is total.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from neighbo.core.errors import ConflictError, NotFoundError
from neighbo.core.geohash import distance_km
from neighbo.db.base import utcnow
from neighbo.db.transaction import run_in_transaction
from neighbo.models.restaurant import Restaurant, ValueAssertion, TIER_NONE
from neighbo.schemas.restaurant import RestaurantCreate, SortMode
from neighbo.services.pagination import decode_cursor, encode_cursor
from neighbo.services.values import ValueCatalog, unique_slugs

logger = logging.getLogger(__name__)

RestaurantHit = Tuple[Restaurant, Optional[float]]


def get_active_restaurant(db: Session, restaurant_id: str) -> Restaurant:
    """Load a restaurant, treating soft-deleted rows exactly like missing ones."""
    restaurant = db.get(Restaurant, restaurant_id)
    if restaurant is None or restaurant.is_deleted:
        raise NotFoundError("Restaurant not found")
    return restaurant


class RestaurantService:
    def __init__(self, db: Session):
        self.db = db
        self.catalog = ValueCatalog(db)

    def labels_for(self, restaurants: List[Restaurant]) -> dict:
        slugs = {slug for r in restaurants for slug in r.value_slugs}
        return self.catalog.labels_for(slugs)

    def create(self, data: RestaurantCreate) -> Restaurant:
        """
        Create a restaurant.

        Raises:
            ConflictError: another live restaurant has the same google_place_id
            BadRequestError: a requested value slug is not in the catalog
        """
        existing = self.db.execute(
            select(Restaurant.id).where(
                Restaurant.google_place_id == data.google_place_id,
                Restaurant.deleted_at.is_(None),
            ).limit(1)
        ).first()
        if existing:
            raise ConflictError("A restaurant with this Google Place ID already exists")

        slugs = unique_slugs(data.values)
        self.catalog.validate_slugs(slugs)

        now = utcnow()
        restaurant = Restaurant(
            google_place_id=data.google_place_id,
            name=data.name,
            city=data.city,
            cert_tier_max=TIER_NONE,
            total_report_count=0,
            claimed_by_user_id=None,
            claim_status=None,
            deleted_at=None,
            created_at=now,
            updated_at=now,
        )
        restaurant.set_location(data.location.lat, data.location.lng)
        for slug in slugs:
            restaurant.add_assertion(slug)

        self.db.add(restaurant)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent create won the live place id index
            self.db.rollback()
            raise ConflictError("A restaurant with this Google Place ID already exists")
        self.db.refresh(restaurant)
        logger.info(f"Created restaurant {restaurant.id} ({restaurant.name})")

        self.catalog.increment_restaurant_counts(slugs)
        return restaurant

    def get(self, restaurant_id: str) -> Restaurant:
        return get_active_restaurant(self.db, restaurant_id)

    def list_restaurants(
        self,
        q: Optional[str] = None,
        city: Optional[str] = None,
        cert_tier: Optional[int] = None,
        value_slugs: Optional[List[str]] = None,
        sort: SortMode = "name",
        cursor: Optional[str] = None,
        limit: int = 20,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
    ) -> Tuple[List[RestaurantHit], Optional[str]]:
        """
        List live restaurants matching the filters, one page at a time.

        Only the first required value slug is applied in the query; the rest
        filter the fetched page in memory, so a page may hold fewer than
        ``limit`` restaurants while ``next_cursor`` is still set. "has more" is
        judged on the fetched rows, before that in-memory filter, so following
        the cursor never skips a match.

        Returns:
            (restaurants with optional distance in km, next cursor or None)
        """
        value_slugs = value_slugs or []

        stmt = (
            select(Restaurant)
            .options(selectinload(Restaurant.values))
            .where(Restaurant.deleted_at.is_(None))
        )
        if city:
            stmt = stmt.where(Restaurant.city == city)
        if cert_tier is not None:
            stmt = stmt.where(Restaurant.cert_tier_max >= cert_tier)
        if q:
            stmt = stmt.where(func.lower(Restaurant.name).contains(q.lower(), autoescape=True))
        if value_slugs:
            stmt = stmt.where(Restaurant.values.any(ValueAssertion.slug == value_slugs[0]))

        last_doc_id = decode_cursor(cursor)
        if last_doc_id:
            anchor = self.db.get(Restaurant, last_doc_id)
            if anchor is not None:
                stmt = stmt.where(self._after(anchor, sort))

        stmt = stmt.order_by(*self._ordering(sort)).limit(limit + 1)
        rows = list(self.db.execute(stmt).scalars().all())

        has_more = len(rows) > limit
        page = rows[:limit]
        next_cursor = encode_cursor(page[-1].id) if has_more and page else None

        extra_slugs = set(value_slugs[1:])
        if extra_slugs:
            page = [r for r in page if extra_slugs.issubset(r.value_slugs)]

        hits: List[RestaurantHit] = []
        for restaurant in page:
            distance = None
            if lat is not None and lng is not None:
                distance = distance_km(lat, lng, restaurant.lat, restaurant.lng)
            hits.append((restaurant, distance))

        if sort == "distance" and lat is not None and lng is not None:
            hits.sort(key=lambda hit: hit[1])

        return hits, next_cursor

    @staticmethod
    def _ordering(sort: SortMode):
        if sort == "name":
            return (Restaurant.name.asc(), Restaurant.id.asc())
        if sort == "certTier":
            return (Restaurant.cert_tier_max.desc(), Restaurant.id.asc())
        # "distance" needs a reference point the store knows nothing about
        return (Restaurant.id.asc(),)

    @staticmethod
    def _after(anchor: Restaurant, sort: SortMode):
        if sort == "name":
            return or_(
                Restaurant.name > anchor.name,
                and_(Restaurant.name == anchor.name, Restaurant.id > anchor.id),
            )
        if sort == "certTier":
            return or_(
                Restaurant.cert_tier_max < anchor.cert_tier_max,
                and_(Restaurant.cert_tier_max == anchor.cert_tier_max, Restaurant.id > anchor.id),
            )
        return Restaurant.id > anchor.id

    def update_values(self, restaurant_id: str, slugs: List[str]) -> Restaurant:
        """
        Replace the restaurant's value set.

        Retained slugs keep their tier, attestation, and report state; new
        slugs start at zero; dropped slugs are discarded with their history.
        """
        slugs = unique_slugs(slugs)
        self.catalog.validate_slugs(slugs)

        def work(db: Session) -> Restaurant:
            restaurant = get_active_restaurant(db, restaurant_id)
            existing = {a.slug: a for a in restaurant.values}

            kept = []
            for position, slug in enumerate(slugs):
                assertion = existing.get(slug)
                if assertion is None:
                    assertion = ValueAssertion(
                        slug=slug,
                        cert_tier=TIER_NONE,
                        self_attested=False,
                        report_count=0,
                        verified_at=None,
                    )
                assertion.position = position
                kept.append(assertion)

            restaurant.values = kept
            restaurant.recompute_cert_tier_max(floor=TIER_NONE)
            restaurant.updated_at = utcnow()
            return restaurant

        restaurant = run_in_transaction(self.db, work)
        logger.info(f"Updated values for restaurant {restaurant_id}: {slugs}")
        return restaurant

    def soft_delete(self, restaurant_id: str) -> None:
        """Hide a restaurant from every read path. Related records are left alone."""

        def work(db: Session) -> None:
            restaurant = get_active_restaurant(db, restaurant_id)
            now = utcnow()
            restaurant.deleted_at = now
            restaurant.updated_at = now

        run_in_transaction(self.db, work)
        logger.info(f"Soft-deleted restaurant {restaurant_id}")
