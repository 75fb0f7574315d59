"""
Community reports and the per-user rate limit.

Per (user, restaurant) pair:

    Eligible --submit--> Cooldown(until created_at + 30 days) --time--> Eligible

A submission bumps report_count on each reported value the restaurant already
carries and promotes the value to community-vetted once its count reaches
PROMOTION_THRESHOLD.
"""
import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from neighbo.core.errors import RateLimitedError
from neighbo.core.security import Identity
from neighbo.db.base import utcnow
from neighbo.db.transaction import run_in_transaction
from neighbo.models.report import Report, REPORT_ACTIVE
from neighbo.models.restaurant import TIER_COMMUNITY, TIER_NONE
from neighbo.models.user import User
from neighbo.schemas.report import ReportAggregate, UserReportCheck
from neighbo.services.pagination import decode_cursor, encode_cursor
from neighbo.services.restaurants import get_active_restaurant
from neighbo.services.users import UserService
from neighbo.services.values import ValueCatalog, unique_slugs

logger = logging.getLogger(__name__)

REPORT_COOLDOWN = timedelta(days=30)
PROMOTION_THRESHOLD = 3


class ReportService:
    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.catalog = ValueCatalog(db)

    @staticmethod
    def _active_report_in_window(db: Session, uid: str, restaurant_id: str, now: datetime) -> Optional[Report]:
        """Most recent active report still inside its cooldown, if any."""
        stmt = (
            select(Report)
            .where(
                Report.user_id == uid,
                Report.restaurant_id == restaurant_id,
                Report.status == REPORT_ACTIVE,
                Report.created_at > now - REPORT_COOLDOWN,
            )
            .order_by(Report.created_at.desc())
            .limit(1)
        )
        return db.execute(stmt).scalar_one_or_none()

    def check(self, uid: str, restaurant_id: str) -> UserReportCheck:
        get_active_restaurant(self.db, restaurant_id)
        report = self._active_report_in_window(self.db, uid, restaurant_id, self.clock())
        if report is None:
            return UserReportCheck(has_active_report=False, reported_values=[], next_report_allowed_at=None)
        return UserReportCheck(
            has_active_report=True,
            reported_values=list(report.values),
            next_report_allowed_at=report.created_at + REPORT_COOLDOWN,
        )

    def submit(
        self,
        identity: Identity,
        restaurant_id: str,
        values: List[str],
        comment: Optional[str] = None,
    ) -> Tuple[Report, datetime]:
        """
        Record a report and fold it into the restaurant's certification state.

        The cooldown is checked once up front for a fast rejection and again
        inside the transaction. Every submission also rewrites the restaurant
        row, so two racing submissions from one user conflict on its version
        and the replayed one sees the winner's report.

        Returns:
            (created report, instant from which the user may report again)

        Raises:
            NotFoundError: restaurant missing or deleted
            BadRequestError: unknown value slug
            RateLimitedError: an active report is still cooling down
        """
        slugs = unique_slugs(values)
        get_active_restaurant(self.db, restaurant_id)
        self.catalog.validate_slugs(slugs)

        previous = self._active_report_in_window(self.db, identity.uid, restaurant_id, self.clock())
        if previous is not None:
            raise RateLimitedError(
                "You have already reported this restaurant recently",
                next_allowed_at=previous.created_at + REPORT_COOLDOWN,
            )
        UserService(self.db).get_profile(identity)

        def work(db: Session) -> Report:
            now = self.clock()
            restaurant = get_active_restaurant(db, restaurant_id)

            previous = self._active_report_in_window(db, identity.uid, restaurant_id, now)
            if previous is not None:
                raise RateLimitedError(
                    "You have already reported this restaurant recently",
                    next_allowed_at=previous.created_at + REPORT_COOLDOWN,
                )

            for slug in slugs:
                assertion = restaurant.assertion_for(slug)
                if assertion is None:
                    continue
                assertion.report_count += 1
                if assertion.report_count >= PROMOTION_THRESHOLD and assertion.cert_tier < TIER_COMMUNITY:
                    assertion.cert_tier = TIER_COMMUNITY
                    logger.info(f"Value {slug} at restaurant {restaurant_id} promoted to community-vetted")

            restaurant.recompute_cert_tier_max(floor=TIER_NONE)
            restaurant.total_report_count += 1
            restaurant.updated_at = now

            user = db.get(User, identity.uid)
            user.report_count = User.report_count + 1
            user.updated_at = now

            report = Report(
                restaurant_id=restaurant_id,
                restaurant_name=restaurant.name,
                user_id=identity.uid,
                values=slugs,
                comment=comment,
                status=REPORT_ACTIVE,
                created_at=now,
                updated_at=now,
            )
            db.add(report)
            return report

        report = run_in_transaction(self.db, work)
        logger.info(f"User {identity.uid} reported restaurant {restaurant_id}: {slugs}")
        return report, report.created_at + REPORT_COOLDOWN

    def aggregate(self, restaurant_id: str) -> ReportAggregate:
        """Tally active reports per value. Full scan; not paginated."""
        get_active_restaurant(self.db, restaurant_id)
        rows = self.db.execute(
            select(Report.values).where(
                Report.restaurant_id == restaurant_id,
                Report.status == REPORT_ACTIVE,
            )
        ).scalars().all()

        counts: Counter = Counter()
        for reported in rows:
            counts.update(reported or [])
        return ReportAggregate(value_counts=dict(counts), total_reports=len(rows))

    def list_for_user(
        self,
        uid: str,
        cursor: Optional[str] = None,
        limit: int = 20,
    ) -> Tuple[List[Report], Optional[str]]:
        """The user's own reports, newest first."""
        stmt = select(Report).where(Report.user_id == uid)

        last_doc_id = decode_cursor(cursor)
        if last_doc_id:
            anchor = self.db.get(Report, last_doc_id)
            if anchor is not None and anchor.user_id == uid:
                stmt = stmt.where(
                    or_(
                        Report.created_at < anchor.created_at,
                        and_(Report.created_at == anchor.created_at, Report.id < anchor.id),
                    )
                )

        stmt = stmt.order_by(Report.created_at.desc(), Report.id.desc()).limit(limit + 1)
        reports = list(self.db.execute(stmt).scalars().all())

        next_cursor = None
        if len(reports) > limit:
            reports = reports[:limit]
            next_cursor = encode_cursor(reports[-1].id)
        return reports, next_cursor
