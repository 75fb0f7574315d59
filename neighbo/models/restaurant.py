"""
Restaurant aggregate and its embedded value assertions.

A restaurant exclusively owns its ValueAssertion rows. Labels are never stored
on an assertion; they are joined from the value catalog when read.
"""
from sqlalchemy import Column, String, Integer, Float, Boolean, ForeignKey, Index, text
from sqlalchemy.orm import relationship

from neighbo.core.geohash import encode_geohash
from neighbo.db.base import Base, UTCDateTime, new_id, utcnow

# Certification tiers
TIER_NONE = 0
TIER_SELF_ATTESTED = 1
TIER_COMMUNITY = 2
TIER_VERIFIED = 3

# Geohash range scans rely on byte ordering ("~" sorts after every base32 char)
GeohashString = String(12).with_variant(String(12, collation="C"), "postgresql")


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(String(36), primary_key=True, default=new_id)
    google_place_id = Column(String, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    city = Column(String(100), nullable=False, index=True)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    geohash = Column(GeohashString, nullable=False)

    cert_tier_max = Column(Integer, nullable=False, default=TIER_NONE)
    total_report_count = Column(Integer, nullable=False, default=0)

    claimed_by_user_id = Column(String(128), nullable=True)
    claim_status = Column(String(20), nullable=True)  # pending | approved | rejected

    deleted_at = Column(UTCDateTime, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)

    # Bumped on every UPDATE; a concurrent writer's flush then matches no rows
    version_id = Column(Integer, nullable=False)

    values = relationship(
        "ValueAssertion",
        back_populates="restaurant",
        order_by="ValueAssertion.position",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version_id}

    __table_args__ = (
        Index("idx_restaurants_geohash", "geohash"),
        Index("idx_restaurants_name_id", "name", "id"),
        Index("idx_restaurants_tier_id", "cert_tier_max", "id"),
        Index(
            "uq_restaurants_live_google_place_id",
            "google_place_id",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    @property
    def value_slugs(self) -> list[str]:
        return [assertion.slug for assertion in self.values]

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def set_location(self, lat: float, lng: float) -> None:
        """Move the restaurant; the geohash always follows the coordinates."""
        self.lat = lat
        self.lng = lng
        self.geohash = encode_geohash(lat, lng)

    def assertion_for(self, slug: str) -> "ValueAssertion | None":
        for assertion in self.values:
            if assertion.slug == slug:
                return assertion
        return None

    def add_assertion(
        self,
        slug: str,
        cert_tier: int = TIER_NONE,
        self_attested: bool = False,
    ) -> "ValueAssertion":
        assertion = ValueAssertion(
            slug=slug,
            position=len(self.values),
            cert_tier=cert_tier,
            self_attested=self_attested,
            report_count=0,
            verified_at=None,
        )
        self.values.append(assertion)
        return assertion

    def recompute_cert_tier_max(self, floor: int = TIER_NONE) -> int:
        self.cert_tier_max = max([floor] + [a.cert_tier for a in self.values])
        return self.cert_tier_max


class ValueAssertion(Base):
    """One restaurant's relationship with one value slug."""
    __tablename__ = "restaurant_values"

    id = Column(String(36), primary_key=True, default=new_id)
    restaurant_id = Column(String(36), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False)
    slug = Column(String(64), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    cert_tier = Column(Integer, nullable=False, default=TIER_NONE)
    self_attested = Column(Boolean, nullable=False, default=False)
    report_count = Column(Integer, nullable=False, default=0)
    verified_at = Column(UTCDateTime, nullable=True)

    restaurant = relationship("Restaurant", back_populates="values")

    __table_args__ = (
        Index("idx_restaurant_values_restaurant_slug", "restaurant_id", "slug", unique=True),
    )
