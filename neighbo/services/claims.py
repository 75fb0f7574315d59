"""
Ownership claims.

Restaurant claim states:

    Unclaimed --claim--> Pending --approve--> Approved
                            |
                            +----reject----> Unclaimed

A user holds at most one claimed restaurant (users.claimed_restaurant_id),
which is what the ownership gate checks.
"""
import logging
from typing import Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from neighbo.core.errors import ConflictError, NotFoundError
from neighbo.core.security import Identity
from neighbo.db.base import utcnow
from neighbo.db.transaction import run_in_transaction
from neighbo.models.claim import BusinessClaim, CLAIM_APPROVED, CLAIM_PENDING, CLAIM_REJECTED
from neighbo.models.restaurant import Restaurant
from neighbo.models.user import User
from neighbo.schemas.claim import ClaimCreate
from neighbo.services.restaurants import get_active_restaurant
from neighbo.services.users import UserService

logger = logging.getLogger(__name__)


class ClaimService:
    def __init__(self, db: Session):
        self.db = db

    def create_claim(self, identity: Identity, restaurant_id: str, data: ClaimCreate) -> Tuple[BusinessClaim, bool]:
        """
        Claim a restaurant for the caller.

        Retrying while the caller's claim is still pending returns that claim
        unchanged.

        Returns:
            (claim, created) where created is False for the idempotent retry

        Raises:
            NotFoundError: restaurant missing or deleted
            ConflictError: restaurant already approved-claimed, pending for
                someone else, or the caller already holds another restaurant
        """
        get_active_restaurant(self.db, restaurant_id)
        UserService(self.db).get_profile(identity)

        def work(db: Session) -> Tuple[BusinessClaim, bool]:
            restaurant = get_active_restaurant(db, restaurant_id)

            if restaurant.claim_status == CLAIM_APPROVED:
                raise ConflictError("Restaurant is already claimed")

            user = UserService(db).get_or_create(identity)
            if user.claimed_restaurant_id and user.claimed_restaurant_id != restaurant_id:
                raise ConflictError("You already own a restaurant")

            existing = db.execute(
                select(BusinessClaim)
                .where(
                    BusinessClaim.restaurant_id == restaurant_id,
                    BusinessClaim.user_id == identity.uid,
                    BusinessClaim.status == CLAIM_PENDING,
                )
                .limit(1)
            ).scalar_one_or_none()
            if existing is not None:
                return existing, False

            if restaurant.claim_status == CLAIM_PENDING and restaurant.claimed_by_user_id != identity.uid:
                raise ConflictError("Restaurant has a pending claim from another user")

            now = utcnow()
            claim = BusinessClaim(
                restaurant_id=restaurant_id,
                restaurant_name=restaurant.name,
                user_id=identity.uid,
                user_email=identity.email or "",
                owner_name=data.owner_name,
                role=data.role,
                phone=data.phone,
                email=data.email,
                evidence_description=data.evidence_description,
                evidence_file_urls=[],
                status=CLAIM_PENDING,
                created_at=now,
            )
            db.add(claim)

            restaurant.claimed_by_user_id = identity.uid
            restaurant.claim_status = CLAIM_PENDING
            restaurant.updated_at = now
            user.claimed_restaurant_id = restaurant_id
            user.updated_at = now
            return claim, True

        claim, created = run_in_transaction(self.db, work)
        if created:
            logger.info(f"User {identity.uid} claimed restaurant {restaurant_id} (claim {claim.id})")
        return claim, created

    def latest_claim(self, uid: str, restaurant_id: str) -> BusinessClaim:
        claim = self.db.execute(
            select(BusinessClaim)
            .where(BusinessClaim.restaurant_id == restaurant_id, BusinessClaim.user_id == uid)
            .order_by(BusinessClaim.created_at.desc())
            .limit(1)
        ).scalar_one_or_none()
        if claim is None:
            raise NotFoundError("Claim not found")
        return claim

    def _load_pending(self, db: Session, claim_id: str) -> Tuple[BusinessClaim, Restaurant]:
        claim = db.get(BusinessClaim, claim_id)
        if claim is None:
            raise NotFoundError("Claim not found")
        if claim.status != CLAIM_PENDING:
            raise ConflictError(f"Claim has already been {claim.status}")
        return claim, get_active_restaurant(db, claim.restaurant_id)

    def approve(self, claim_id: str) -> BusinessClaim:
        """Pending -> Approved. The claimant becomes the restaurant's owner."""

        def work(db: Session) -> BusinessClaim:
            claim, restaurant = self._load_pending(db, claim_id)
            now = utcnow()
            claim.status = CLAIM_APPROVED
            claim.reviewed_at = now
            restaurant.claimed_by_user_id = claim.user_id
            restaurant.claim_status = CLAIM_APPROVED
            restaurant.updated_at = now

            user = db.get(User, claim.user_id)
            if user is not None:
                user.claimed_restaurant_id = restaurant.id
                user.user_type = "business"
                user.updated_at = now
            return claim

        claim = run_in_transaction(self.db, work)
        logger.info(f"Claim {claim_id} approved")
        return claim

    def reject(self, claim_id: str) -> BusinessClaim:
        """Pending -> rejected; the restaurant returns to unclaimed."""

        def work(db: Session) -> BusinessClaim:
            claim, restaurant = self._load_pending(db, claim_id)
            now = utcnow()
            claim.status = CLAIM_REJECTED
            claim.reviewed_at = now
            if restaurant.claimed_by_user_id == claim.user_id:
                restaurant.claimed_by_user_id = None
                restaurant.claim_status = None
                restaurant.updated_at = now

            user = db.get(User, claim.user_id)
            if user is not None and user.claimed_restaurant_id == restaurant.id:
                user.claimed_restaurant_id = None
                user.updated_at = now
            return claim

        claim = run_in_transaction(self.db, work)
        logger.info(f"Claim {claim_id} rejected")
        return claim
