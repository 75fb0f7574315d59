from sqlalchemy import Column, String, Integer, Boolean, Index

from neighbo.db.base import Base, UTCDateTime, utcnow


class Value(Base):
    """
    Catalog entry for an ethical or operational value (e.g. "sustainable").

    The catalog is the source of truth for labels. restaurant_count is a
    denormalized, best-effort counter.
    """
    __tablename__ = "values_catalog"

    slug = Column(String(64), primary_key=True)
    label = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    icon = Column(String(50), nullable=True)
    category = Column(String(50), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    restaurant_count = Column(Integer, nullable=False, default=0)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_values_catalog_active_sort", "active", "sort_order"),
    )
