from sqlalchemy import Column, String, JSON, ForeignKey, Index

from neighbo.db.base import Base, UTCDateTime, new_id, utcnow


class CertificationEvidence(Base):
    """
    Evidence an owner submitted for one of their restaurant's values.

    Stored for manual review; submitting evidence never changes a tier.
    """
    __tablename__ = "certification_evidence"

    id = Column(String(36), primary_key=True, default=new_id)
    restaurant_id = Column(String(36), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False)
    value_slug = Column(String(64), nullable=False)
    file_urls = Column(JSON, nullable=False, default=list)
    description = Column(String(1000), nullable=True)
    submitted_by_user_id = Column(String(128), nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_certification_evidence_restaurant", "restaurant_id", "created_at"),
    )
