"""
Business claim model.

A claim is a user's assertion that they own or manage a restaurant listing.
While it is pending, at most one exists per (restaurant, user) pair.
"""
from sqlalchemy import Column, String, JSON, Index

from neighbo.db.base import Base, UTCDateTime, new_id, utcnow

CLAIM_PENDING = "pending"
CLAIM_APPROVED = "approved"
CLAIM_REJECTED = "rejected"


class BusinessClaim(Base):
    __tablename__ = "business_claims"

    id = Column(String(36), primary_key=True, default=new_id)
    restaurant_id = Column(String(36), nullable=False)
    restaurant_name = Column(String(200), nullable=False)  # snapshot at claim time
    user_id = Column(String(128), nullable=False)
    user_email = Column(String, nullable=False, default="")
    owner_name = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False)  # owner | manager | authorized-rep
    phone = Column(String(20), nullable=False)
    email = Column(String, nullable=False)
    evidence_description = Column(String(1000), nullable=True)
    evidence_file_urls = Column(JSON, nullable=False, default=list)
    status = Column(String(20), nullable=False, default=CLAIM_PENDING)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    reviewed_at = Column(UTCDateTime, nullable=True)

    __table_args__ = (
        Index("idx_business_claims_restaurant_user", "restaurant_id", "user_id", "status"),
    )
