"""
User profiles and favorites.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from neighbo.core.security import Identity
from neighbo.db.base import utcnow
from neighbo.db.transaction import run_in_transaction
from neighbo.models.favorite import Favorite
from neighbo.models.restaurant import Restaurant
from neighbo.models.user import User
from neighbo.schemas.user import UserUpdate
from neighbo.services.pagination import decode_cursor, encode_cursor
from neighbo.services.restaurants import get_active_restaurant

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_or_create(self, identity: Identity) -> User:
        """
        Return the caller's user row, adding a fresh one to the session if absent.

        Does not commit; callers decide the transaction boundary.
        """
        user = self.db.get(User, identity.uid)
        if user is not None:
            return user

        now = utcnow()
        user = User(
            uid=identity.uid,
            email=identity.email or "",
            display_name=identity.name,
            photo_url=identity.picture,
            user_type="user",
            value_preferences=[],
            claimed_restaurant_id=None,
            report_count=0,
            created_at=now,
            updated_at=now,
        )
        self.db.add(user)
        logger.info(f"Created user profile for {identity.uid}")
        return user

    def get_profile(self, identity: Identity) -> User:
        """
        Return the caller's profile, committing a new one on first use.

        Two first requests from the same uid race on the insert; the loser
        rolls back and reads the winner's row.
        """
        user = self.get_or_create(identity)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            user = self.db.get(User, identity.uid)
            if user is None:
                raise
            logger.info(f"User profile for {identity.uid} was created concurrently")
        return user

    def update_profile(self, identity: Identity, data: UserUpdate) -> User:
        self.get_profile(identity)
        changes = data.model_dump(exclude_unset=True)

        def work(db: Session) -> User:
            user = db.get(User, identity.uid)
            for field, value in changes.items():
                setattr(user, field, value)
            user.updated_at = utcnow()
            return user

        return run_in_transaction(self.db, work)

    def my_restaurant(self, uid: str) -> Optional[Restaurant]:
        """The restaurant the user has claimed, or None if none is live."""
        user = self.db.get(User, uid)
        if user is None or not user.claimed_restaurant_id:
            return None
        restaurant = self.db.get(Restaurant, user.claimed_restaurant_id)
        if restaurant is None or restaurant.is_deleted:
            return None
        return restaurant

    def add_favorite(self, uid: str, restaurant_id: str) -> Favorite:
        restaurant = get_active_restaurant(self.db, restaurant_id)

        favorite = self.db.execute(
            select(Favorite).where(Favorite.user_id == uid, Favorite.restaurant_id == restaurant_id)
        ).scalar_one_or_none()
        if favorite is None:
            favorite = Favorite(user_id=uid, restaurant_id=restaurant_id)
            self.db.add(favorite)

        favorite.restaurant_name = restaurant.name
        favorite.restaurant_city = restaurant.city
        favorite.added_at = utcnow()
        self.db.commit()
        return favorite

    def remove_favorite(self, uid: str, restaurant_id: str) -> None:
        favorite = self.db.execute(
            select(Favorite).where(Favorite.user_id == uid, Favorite.restaurant_id == restaurant_id)
        ).scalar_one_or_none()
        if favorite is not None:
            self.db.delete(favorite)
            self.db.commit()

    def list_favorites(
        self,
        uid: str,
        cursor: Optional[str] = None,
        limit: int = 20,
    ) -> Tuple[List[Favorite], Optional[str]]:
        """
        Newest favorites first. Favorites of soft-deleted restaurants are hidden.

        The cursor carries the restaurant id of the last favorite on the page.
        """
        stmt = (
            select(Favorite)
            .join(Restaurant, Restaurant.id == Favorite.restaurant_id)
            .where(Favorite.user_id == uid, Restaurant.deleted_at.is_(None))
        )

        last_restaurant_id = decode_cursor(cursor)
        if last_restaurant_id:
            anchor = self.db.execute(
                select(Favorite).where(Favorite.user_id == uid, Favorite.restaurant_id == last_restaurant_id)
            ).scalar_one_or_none()
            if anchor is not None:
                stmt = stmt.where(
                    or_(
                        Favorite.added_at < anchor.added_at,
                        and_(Favorite.added_at == anchor.added_at, Favorite.id < anchor.id),
                    )
                )

        stmt = stmt.order_by(Favorite.added_at.desc(), Favorite.id.desc()).limit(limit + 1)
        favorites = list(self.db.execute(stmt).scalars().all())

        next_cursor = None
        if len(favorites) > limit:
            favorites = favorites[:limit]
            next_cursor = encode_cursor(favorites[-1].restaurant_id)
        return favorites, next_cursor
