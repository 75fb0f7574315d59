from sqlalchemy import Column, String, Integer, JSON

from neighbo.db.base import Base, UTCDateTime, utcnow


class User(Base):
    """
    Profile for a verified identity. Created lazily on first authenticated
    profile fetch (or the first write that needs one).
    """
    __tablename__ = "users"

    uid = Column(String(128), primary_key=True)
    email = Column(String, nullable=False, default="")
    display_name = Column(String(200), nullable=True)
    photo_url = Column(String, nullable=True)
    user_type = Column(String(20), nullable=False, default="user")  # user | business
    value_preferences = Column(JSON, nullable=False, default=list)
    claimed_restaurant_id = Column(String(36), nullable=True, index=True)
    report_count = Column(Integer, nullable=False, default=0)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)

    # claimed_restaurant_id must not be overwritten by a racing claim
    version_id = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}
