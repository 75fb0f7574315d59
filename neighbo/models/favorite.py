from sqlalchemy import Column, String, Index

from neighbo.db.base import Base, UTCDateTime, new_id, utcnow


class Favorite(Base):
    """A restaurant saved by a user. Survives the restaurant's soft delete."""
    __tablename__ = "favorites"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(128), nullable=False)
    restaurant_id = Column(String(36), nullable=False)
    restaurant_name = Column(String(200), nullable=False)
    restaurant_city = Column(String(100), nullable=False)
    added_at = Column(UTCDateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_favorites_user_restaurant", "user_id", "restaurant_id", unique=True),
        Index("idx_favorites_user_added", "user_id", "added_at"),
    )
