from sqlalchemy import Column, String, JSON, Index

from neighbo.db.base import Base, UTCDateTime, new_id, utcnow

REPORT_ACTIVE = "active"
REPORT_WITHDRAWN = "withdrawn"


class Report(Base):
    """
    A community member's report that a restaurant lives up to some values.

    One active report per (user, restaurant) inside any rolling 30-day window;
    enforced by the report service, not by a constraint.
    """
    __tablename__ = "reports"

    id = Column(String(36), primary_key=True, default=new_id)
    restaurant_id = Column(String(36), nullable=False)
    restaurant_name = Column(String(200), nullable=False)
    user_id = Column(String(128), nullable=False)
    values = Column(JSON, nullable=False, default=list)
    comment = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=REPORT_ACTIVE)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_reports_user_restaurant_created", "user_id", "restaurant_id", "created_at"),
        Index("idx_reports_restaurant_status", "restaurant_id", "status"),
        Index("idx_reports_user_created", "user_id", "created_at"),
    )
