"""
Test configuration and fixtures.
"""
import os
import pytest
from typing import Callable, Dict, Generator, List, Optional
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Set test configuration before importing app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_JWT_SECRET_KEY"] = "neighbo-test-signing-key-0123456789abcdef"

from neighbo.main import app
from neighbo.db.base import Base, utcnow
from neighbo.db.seed import seed_values
from neighbo.db.session import get_db
from neighbo.core.security import create_access_token
from neighbo.models.restaurant import Restaurant
from neighbo.models.user import User
from neighbo.schemas.common import Location
from neighbo.schemas.restaurant import RestaurantCreate
from neighbo.services.restaurants import RestaurantService
import neighbo.models  # noqa: F401


# In-memory SQLite shared across threads so TestClient sees the same data
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Downtown Minneapolis
MPLS_LAT = 44.9778
MPLS_LNG = -93.2650


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Fresh schema with the default value catalog for every test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    seed_values(session)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create test client with database session override."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


def make_headers(uid: str, admin: bool = False) -> Dict[str, str]:
    token = create_access_token(
        subject=uid,
        email=f"{uid}@example.com",
        name=uid.replace("-", " ").title(),
        admin=admin,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for() -> Callable[..., Dict[str, str]]:
    """Build Authorization headers for an arbitrary uid."""
    return make_headers


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return make_headers("diner-1")


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    return make_headers("admin-1", admin=True)


@pytest.fixture
def make_restaurant(db: Session) -> Callable[..., Restaurant]:
    """Factory creating restaurants through the catalog service."""
    counter = {"n": 0}

    def _make(
        name: Optional[str] = None,
        lat: float = MPLS_LAT,
        lng: float = MPLS_LNG,
        city: str = "Minneapolis",
        values: Optional[List[str]] = None,
        google_place_id: Optional[str] = None,
    ) -> Restaurant:
        counter["n"] += 1
        data = RestaurantCreate(
            google_place_id=google_place_id or f"place-{counter['n']}",
            name=name or f"Restaurant {counter['n']}",
            city=city,
            location=Location(lat=lat, lng=lng),
            values=values or [],
        )
        return RestaurantService(db).create(data)

    return _make


@pytest.fixture
def make_owner(db: Session) -> Callable[[str, str], User]:
    """Give ``uid`` ownership of ``restaurant_id`` as far as the ownership gate is concerned."""

    def _make(uid: str, restaurant_id: str) -> User:
        user = db.get(User, uid)
        now = utcnow()
        if user is None:
            user = User(
                uid=uid,
                email=f"{uid}@example.com",
                user_type="business",
                value_preferences=[],
                report_count=0,
                created_at=now,
                updated_at=now,
            )
            db.add(user)
        user.claimed_restaurant_id = restaurant_id
        db.commit()
        return user

    return _make
