"""
Tests for community reports, tier promotion and the report rate limit.
"""
from datetime import datetime, timedelta, timezone

import pytest

from neighbo.core.errors import BadRequestError, NotFoundError, RateLimitedError
from neighbo.core.security import Identity
from neighbo.models.restaurant import Restaurant
from neighbo.models.user import User
from neighbo.services.certification import CertificationService
from neighbo.services.reports import PROMOTION_THRESHOLD, REPORT_COOLDOWN, ReportService
from neighbo.services.restaurants import RestaurantService

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def clock():
    return FakeClock(T0)


@pytest.fixture
def reports(db, clock):
    return ReportService(db, clock=clock)


def user(uid: str) -> Identity:
    return Identity(uid=uid, email=f"{uid}@example.com")


class TestPromotion:
    """Tier promotion driven by report counts."""

    def test_three_reports_promote_to_community(self, db, make_restaurant, reports):
        restaurant = make_restaurant(values=["sustainable"])
        CertificationService(db).self_attest(restaurant.id, ["sustainable"])

        tiers = []
        for uid in ["u1", "u2", "u3"]:
            reports.submit(user(uid), restaurant.id, ["sustainable"])
            tiers.append(db.get(Restaurant, restaurant.id).values[0].cert_tier)

        assert tiers == [1, 1, 2]
        restaurant = db.get(Restaurant, restaurant.id)
        assert restaurant.values[0].report_count == PROMOTION_THRESHOLD
        assert restaurant.cert_tier_max == 2
        assert restaurant.total_report_count == 3

    def test_tier_never_decreases(self, db, make_restaurant, reports):
        restaurant = make_restaurant(values=["union"])
        restaurant.values[0].cert_tier = 3
        restaurant.cert_tier_max = 3
        db.commit()

        for uid in ["u1", "u2", "u3", "u4"]:
            reports.submit(user(uid), restaurant.id, ["union"])

        restaurant = db.get(Restaurant, restaurant.id)
        assert restaurant.values[0].cert_tier == 3
        assert restaurant.cert_tier_max == 3

    def test_unlisted_value_is_recorded_but_not_counted(self, db, make_restaurant, reports):
        restaurant = make_restaurant(values=["union"])

        report, _ = reports.submit(user("u1"), restaurant.id, ["union", "woman-owned"])

        assert report.values == ["union", "woman-owned"]
        restaurant = db.get(Restaurant, restaurant.id)
        assert restaurant.value_slugs == ["union"]
        assert restaurant.values[0].report_count == 1

    def test_unknown_slug(self, db, make_restaurant, reports):
        restaurant = make_restaurant(values=["union"])

        with pytest.raises(BadRequestError):
            reports.submit(user("u1"), restaurant.id, ["union", "nope"])

        assert db.get(Restaurant, restaurant.id).total_report_count == 0

    def test_deleted_restaurant(self, db, make_restaurant, reports):
        restaurant = make_restaurant(values=["union"])
        RestaurantService(db).soft_delete(restaurant.id)

        with pytest.raises(NotFoundError):
            reports.submit(user("u1"), restaurant.id, ["union"])

    def test_user_report_count(self, db, make_restaurant, reports):
        first = make_restaurant(values=["union"])
        second = make_restaurant(values=["union"])

        reports.submit(user("u1"), first.id, ["union"])
        reports.submit(user("u1"), second.id, ["union"])

        assert db.get(User, "u1").report_count == 2


class TestRateLimit:
    """One report per user and restaurant every 30 days."""

    def test_second_report_inside_window(self, make_restaurant, reports, clock):
        restaurant = make_restaurant(values=["union"])
        _, next_allowed = reports.submit(user("u1"), restaurant.id, ["union"])
        assert next_allowed == T0 + REPORT_COOLDOWN

        clock.now = T0 + timedelta(days=29, hours=23)
        with pytest.raises(RateLimitedError) as exc_info:
            reports.submit(user("u1"), restaurant.id, ["union"])

        assert exc_info.value.next_allowed_at == T0 + timedelta(days=30)

    def test_report_allowed_at_window_end(self, db, make_restaurant, reports, clock):
        restaurant = make_restaurant(values=["union"])
        reports.submit(user("u1"), restaurant.id, ["union"])

        clock.now = T0 + REPORT_COOLDOWN
        report, next_allowed = reports.submit(user("u1"), restaurant.id, ["union"])

        assert report.created_at == T0 + REPORT_COOLDOWN
        assert next_allowed == T0 + 2 * REPORT_COOLDOWN
        assert db.get(Restaurant, restaurant.id).values[0].report_count == 2

    def test_limit_is_per_restaurant(self, make_restaurant, reports):
        first = make_restaurant(values=["union"])
        second = make_restaurant(values=["union"])

        reports.submit(user("u1"), first.id, ["union"])
        reports.submit(user("u1"), second.id, ["union"])

    def test_limit_is_per_user(self, make_restaurant, reports):
        restaurant = make_restaurant(values=["union"])

        reports.submit(user("u1"), restaurant.id, ["union"])
        reports.submit(user("u2"), restaurant.id, ["union"])

    def test_check(self, make_restaurant, reports):
        restaurant = make_restaurant(values=["union"])

        before = reports.check("u1", restaurant.id)
        assert before.has_active_report is False
        assert before.next_report_allowed_at is None

        reports.submit(user("u1"), restaurant.id, ["union"])
        after = reports.check("u1", restaurant.id)
        assert after.has_active_report is True
        assert after.reported_values == ["union"]
        assert after.next_report_allowed_at == T0 + REPORT_COOLDOWN


class TestAggregateAndHistory:

    def test_aggregate(self, make_restaurant, reports):
        restaurant = make_restaurant(values=["union", "sustainable"])
        reports.submit(user("u1"), restaurant.id, ["union", "sustainable"])
        reports.submit(user("u2"), restaurant.id, ["union"])

        aggregate = reports.aggregate(restaurant.id)

        assert aggregate.total_reports == 2
        assert aggregate.value_counts == {"union": 2, "sustainable": 1}

    def test_history_newest_first_with_cursor(self, make_restaurant, reports, clock):
        restaurants = [make_restaurant(name=f"R{i}", values=["union"]) for i in range(3)]
        for i, restaurant in enumerate(restaurants):
            clock.now = T0 + timedelta(hours=i)
            reports.submit(user("u1"), restaurant.id, ["union"])

        page, cursor = reports.list_for_user("u1", limit=2)
        assert [r.restaurant_name for r in page] == ["R2", "R1"]
        assert cursor is not None

        page, cursor = reports.list_for_user("u1", cursor=cursor, limit=2)
        assert [r.restaurant_name for r in page] == ["R0"]
        assert cursor is None


class TestReportsRouter:
    """Tests for /api/restaurants/{id}/reports endpoints."""

    def test_submit_then_rate_limited(self, client, auth_headers, make_restaurant):
        restaurant = make_restaurant(values=["union"])
        url = f"/api/restaurants/{restaurant.id}/reports"

        first = client.post(url, headers=auth_headers, json={"values": ["union"], "comment": "Union shop"})
        assert first.status_code == 201
        body = first.json()
        assert body["userId"] == "diner-1"
        assert body["values"] == ["union"]
        assert body["status"] == "active"
        assert body["restaurantName"] == restaurant.name
        assert parse_ts(body["nextReportAllowedAt"]) == parse_ts(body["createdAt"]) + REPORT_COOLDOWN

        second = client.post(url, headers=auth_headers, json={"values": ["union"]})
        assert second.status_code == 429
        error = second.json()
        assert error["error"] == "rate_limited"
        assert parse_ts(error["nextReportAllowedAt"]) == parse_ts(body["nextReportAllowedAt"])

    def test_submit_requires_auth(self, client, make_restaurant):
        restaurant = make_restaurant(values=["union"])

        response = client.post(f"/api/restaurants/{restaurant.id}/reports", json={"values": ["union"]})
        assert response.status_code == 401

    def test_submit_requires_values(self, client, auth_headers, make_restaurant):
        restaurant = make_restaurant(values=["union"])

        response = client.post(
            f"/api/restaurants/{restaurant.id}/reports",
            headers=auth_headers,
            json={"values": []},
        )
        assert response.status_code == 400

    def test_mine(self, client, auth_headers, make_restaurant):
        restaurant = make_restaurant(values=["union"])
        url = f"/api/restaurants/{restaurant.id}/reports"

        assert client.get(f"{url}/mine", headers=auth_headers).json()["hasActiveReport"] is False
        client.post(url, headers=auth_headers, json={"values": ["union"]})

        data = client.get(f"{url}/mine", headers=auth_headers).json()
        assert data["hasActiveReport"] is True
        assert data["reportedValues"] == ["union"]
        assert data["nextReportAllowedAt"] is not None

    def test_aggregate_is_public(self, client, auth_headers, make_restaurant):
        restaurant = make_restaurant(values=["union"])
        client.post(f"/api/restaurants/{restaurant.id}/reports", headers=auth_headers, json={"values": ["union"]})

        data = client.get(f"/api/restaurants/{restaurant.id}/reports").json()
        assert data == {"valueCounts": {"union": 1}, "totalReports": 1}

    def test_missing_restaurant(self, client, auth_headers):
        response = client.get("/api/restaurants/ghost/reports")
        assert response.status_code == 404
