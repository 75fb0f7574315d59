"""
Interleaved writers on a file-backed database.

Each test runs a rival operation to completion on a second session while the
first is paused inside its unit of work, then lets the first one finish.
"""
from datetime import datetime, timezone
from typing import Generator, List, Optional

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker

from neighbo.core.errors import ConflictError, RateLimitedError
from neighbo.core.security import Identity
from neighbo.db.base import Base
from neighbo.db.seed import seed_values
from neighbo.models.claim import BusinessClaim, CLAIM_PENDING
from neighbo.models.report import Report
from neighbo.models.restaurant import Restaurant
from neighbo.models.user import User
from neighbo.schemas.claim import ClaimCreate
from neighbo.schemas.common import Location
from neighbo.schemas.restaurant import RestaurantCreate
from neighbo.services.claims import ClaimService
from neighbo.services.reports import REPORT_COOLDOWN, ReportService
from neighbo.services.restaurants import RestaurantService
from neighbo.services.users import UserService
from neighbo.services.values import ValueCatalog

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sessions(tmp_path) -> Generator[sessionmaker, None, None]:
    """Session factory whose sessions each hold their own connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'neighbo.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    with factory() as session:
        seed_values(session)
    yield factory
    engine.dispose()


@pytest.fixture
def pair(sessions) -> Generator[tuple, None, None]:
    session_a, session_b = sessions(), sessions()
    try:
        yield session_a, session_b
    finally:
        session_a.close()
        session_b.close()


def restaurant_data(place_id: str, name: str = "Corner Cafe", values: Optional[List[str]] = None) -> RestaurantCreate:
    return RestaurantCreate(
        google_place_id=place_id,
        name=name,
        city="Minneapolis",
        location=Location(lat=44.9778, lng=-93.2650),
        values=values or [],
    )


def add_restaurant(sessions: sessionmaker, place_id: str, values: Optional[List[str]] = None) -> str:
    with sessions() as session:
        return RestaurantService(session).create(restaurant_data(place_id, values=values)).id


def identity(uid: str) -> Identity:
    return Identity(uid=uid, email=f"{uid}@example.com", name=uid.title())


def claim_data() -> ClaimCreate:
    return ClaimCreate(owner_name="Pat Owner", role="owner", phone="612-555-0100", email="pat@example.com")


def pending_claims(session: Session, **filters) -> List[BusinessClaim]:
    stmt = select(BusinessClaim).filter_by(status=CLAIM_PENDING, **filters)
    return list(session.execute(stmt).scalars().all())


class TestReportRace:
    """Two submissions from one user for one restaurant."""

    def test_loser_is_rate_limited(self, sessions, pair, monkeypatch):
        restaurant_id = add_restaurant(sessions, "place-1", values=["union"])
        session_a, session_b = pair
        diner = identity("diner-1")
        original = ReportService._active_report_in_window
        checks = []

        def window_check(db, uid, rid, now):
            found = original(db, uid, rid, now)
            if db is session_a:
                checks.append(found)
                if len(checks) == 2:
                    # Rival commits right after our in-transaction re-check
                    ReportService(session_b, clock=lambda: T0).submit(diner, rid, ["union"])
            return found

        monkeypatch.setattr(ReportService, "_active_report_in_window", staticmethod(window_check))

        with pytest.raises(RateLimitedError) as exc_info:
            ReportService(session_a, clock=lambda: T0).submit(diner, restaurant_id, ["union"])

        # Up-front check, first attempt, replay after the version conflict
        assert len(checks) == 3
        assert checks[2] is not None
        assert exc_info.value.next_allowed_at == T0 + REPORT_COOLDOWN

        with sessions() as session:
            reports = session.execute(select(Report).where(Report.user_id == "diner-1")).scalars().all()
            restaurant = session.get(Restaurant, restaurant_id)
            assert len(reports) == 1
            assert restaurant.total_report_count == 1
            assert restaurant.assertion_for("union").report_count == 1
            assert session.get(User, "diner-1").report_count == 1


class TestClaimRace:
    """Claims that interleave with another claim."""

    def _pause_inside_claim(self, monkeypatch, session_a, rival):
        """Run ``rival`` once, after the first session has read its user row inside the claim."""
        original = UserService.get_or_create
        calls = []

        def get_or_create(service, who):
            user = original(service, who)
            if service.db is session_a:
                calls.append(who.uid)
                # Call 1 is the profile commit, call 2 the read inside the transaction
                if len(calls) == 2:
                    rival()
            return user

        monkeypatch.setattr(UserService, "get_or_create", get_or_create)

    def test_two_users_one_restaurant(self, sessions, pair, monkeypatch):
        restaurant_id = add_restaurant(sessions, "place-1")
        session_a, session_b = pair
        self._pause_inside_claim(
            monkeypatch,
            session_a,
            lambda: ClaimService(session_b).create_claim(identity("owner-b"), restaurant_id, claim_data()),
        )

        with pytest.raises(ConflictError):
            ClaimService(session_a).create_claim(identity("owner-a"), restaurant_id, claim_data())

        with sessions() as session:
            claims = pending_claims(session, restaurant_id=restaurant_id)
            restaurant = session.get(Restaurant, restaurant_id)
            assert [c.user_id for c in claims] == ["owner-b"]
            assert restaurant.claimed_by_user_id == "owner-b"
            assert session.get(User, "owner-a").claimed_restaurant_id is None

    def test_one_user_two_restaurants(self, sessions, pair, monkeypatch):
        first_id = add_restaurant(sessions, "place-1")
        second_id = add_restaurant(sessions, "place-2")
        session_a, session_b = pair
        owner = identity("owner-1")
        self._pause_inside_claim(
            monkeypatch,
            session_a,
            lambda: ClaimService(session_b).create_claim(owner, second_id, claim_data()),
        )

        with pytest.raises(ConflictError) as exc_info:
            ClaimService(session_a).create_claim(owner, first_id, claim_data())
        assert exc_info.value.message == "You already own a restaurant"

        with sessions() as session:
            claims = pending_claims(session, user_id="owner-1")
            first = session.get(Restaurant, first_id)
            assert [c.restaurant_id for c in claims] == [second_id]
            assert first.claimed_by_user_id is None
            assert first.claim_status is None
            assert session.get(User, "owner-1").claimed_restaurant_id == second_id


class TestProfileRace:

    def test_first_requests_share_one_profile(self, sessions, pair, monkeypatch):
        session_a, session_b = pair
        newcomer = identity("newcomer")
        original = UserService.get_or_create
        fired = []

        def get_or_create(service, who):
            user = original(service, who)
            if service.db is session_a and not fired:
                fired.append(True)
                UserService(session_b).get_profile(who)
            return user

        monkeypatch.setattr(UserService, "get_or_create", get_or_create)

        profile = UserService(session_a).get_profile(newcomer)

        assert fired
        assert profile.uid == "newcomer"
        assert profile.email == "newcomer@example.com"
        with sessions() as session:
            assert session.query(User).filter_by(uid="newcomer").count() == 1


class TestPlaceIdRace:

    def test_second_live_restaurant_is_a_conflict(self, sessions, pair, monkeypatch):
        session_a, session_b = pair
        original = ValueCatalog.validate_slugs
        fired = []

        def validate_slugs(catalog, slugs):
            original(catalog, slugs)
            # Both creates have passed the duplicate check by now
            if catalog.db is session_a and not fired:
                fired.append(True)
                RestaurantService(session_b).create(restaurant_data("place-dup", name="Rival"))

        monkeypatch.setattr(ValueCatalog, "validate_slugs", validate_slugs)

        with pytest.raises(ConflictError):
            RestaurantService(session_a).create(restaurant_data("place-dup", name="Ours"))

        with sessions() as session:
            rows = session.execute(
                select(Restaurant).where(Restaurant.google_place_id == "place-dup")
            ).scalars().all()
            assert [r.name for r in rows] == ["Rival"]

    def test_place_id_freed_by_soft_delete(self, sessions):
        with sessions() as session:
            service = RestaurantService(session)
            old = service.create(restaurant_data("place-1", name="Old"))
            service.soft_delete(old.id)
            new = service.create(restaurant_data("place-1", name="New"))

            assert new.id != old.id
            live = session.execute(
                select(Restaurant).where(
                    Restaurant.google_place_id == "place-1",
                    Restaurant.deleted_at.is_(None),
                )
            ).scalars().all()
            assert [r.name for r in live] == ["New"]
