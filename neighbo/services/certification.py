"""
Certification ledger.

Tiers per value:
    0 - none
    1 - self-attested by the owner
    2 - community-vetted (see reports.PROMOTION_THRESHOLD)
    3 - verified (set only by manual review, never by this service)

Tiers are never lowered here. Every read-modify-write of the aggregate runs in
one transaction so concurrent attestations and reports cannot lose updates.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from neighbo.core.security import Identity
from neighbo.db.base import utcnow
from neighbo.db.transaction import run_in_transaction
from neighbo.models.certification import CertificationEvidence
from neighbo.models.restaurant import Restaurant, TIER_SELF_ATTESTED
from neighbo.schemas.certification import CertificationResponse
from neighbo.schemas.restaurant import resolve_values
from neighbo.services.restaurants import get_active_restaurant
from neighbo.services.values import ValueCatalog, unique_slugs

logger = logging.getLogger(__name__)


class CertificationService:
    def __init__(self, db: Session):
        self.db = db
        self.catalog = ValueCatalog(db)

    def build_view(self, restaurant: Restaurant) -> CertificationResponse:
        """
        Certification view with live catalog labels.

        cert_tier_max is recomputed from the assertions (floor 1) instead of
        trusting the stored column, which may have drifted out of band.
        """
        labels = self.catalog.labels_for(restaurant.value_slugs)
        tier_max = max([TIER_SELF_ATTESTED] + [a.cert_tier for a in restaurant.values])
        return CertificationResponse(
            restaurant_id=restaurant.id,
            values=resolve_values(restaurant, labels),
            cert_tier_max=tier_max,
            total_report_count=restaurant.total_report_count,
        )

    def get_certification(self, restaurant_id: str) -> CertificationResponse:
        return self.build_view(get_active_restaurant(self.db, restaurant_id))

    def self_attest(self, restaurant_id: str, slugs: List[str]) -> CertificationResponse:
        """
        Mark values as self-attested by the owner.

        Existing assertions are raised to at least tier 1; missing ones are
        created at tier 1. Re-attesting is a no-op apart from updated_at.
        """
        slugs = unique_slugs(slugs)
        self.catalog.validate_slugs(slugs)

        def work(db: Session) -> Restaurant:
            restaurant = get_active_restaurant(db, restaurant_id)
            for slug in slugs:
                assertion = restaurant.assertion_for(slug)
                if assertion is None:
                    restaurant.add_assertion(slug, cert_tier=TIER_SELF_ATTESTED, self_attested=True)
                else:
                    assertion.self_attested = True
                    assertion.cert_tier = max(assertion.cert_tier, TIER_SELF_ATTESTED)
            restaurant.recompute_cert_tier_max(floor=TIER_SELF_ATTESTED)
            restaurant.updated_at = utcnow()
            return restaurant

        restaurant = run_in_transaction(self.db, work)
        logger.info(f"Restaurant {restaurant_id} self-attested {slugs}")
        return self.build_view(restaurant)

    def submit_evidence(
        self,
        restaurant_id: str,
        identity: Identity,
        value_slug: str,
        file_urls: List[str],
        description: Optional[str] = None,
    ) -> CertificationEvidence:
        """
        Store evidence for later manual review. Tiers are not touched.
        """
        get_active_restaurant(self.db, restaurant_id)
        self.catalog.validate_slugs([value_slug])

        evidence = CertificationEvidence(
            restaurant_id=restaurant_id,
            value_slug=value_slug,
            file_urls=list(file_urls),
            description=description,
            submitted_by_user_id=identity.uid,
            status="pending",
            created_at=utcnow(),
        )
        self.db.add(evidence)
        self.db.commit()
        logger.info(f"Evidence {evidence.id} submitted for {restaurant_id}/{value_slug}")
        return evidence
