"""
Value catalog lookups.

The catalog owns labels; restaurants only reference values by slug. Every read
that shows a label goes through ValueCatalog so catalog edits show up
immediately everywhere.
"""
import logging
from typing import Dict, Iterable, List

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from neighbo.core.errors import BadRequestError
from neighbo.models.value import Value

logger = logging.getLogger(__name__)


def unique_slugs(slugs: Iterable[str]) -> List[str]:
    """Strip and deduplicate slugs, keeping first-seen order."""
    seen: List[str] = []
    for slug in slugs:
        slug = slug.strip()
        if slug and slug not in seen:
            seen.append(slug)
    return seen


def parse_slug_list(raw: str | None) -> List[str]:
    """Parse a comma separated query parameter into slugs."""
    if not raw:
        return []
    return unique_slugs(raw.split(","))


class ValueCatalog:
    def __init__(self, db: Session):
        self.db = db

    def list_active(self) -> List[Value]:
        stmt = select(Value).where(Value.active.is_(True)).order_by(Value.sort_order.asc(), Value.slug.asc())
        return list(self.db.execute(stmt).scalars().all())

    def labels_for(self, slugs: Iterable[str]) -> Dict[str, str]:
        """Map each known slug to its current label. Unknown slugs are omitted."""
        wanted = set(slugs)
        if not wanted:
            return {}
        rows = self.db.execute(select(Value.slug, Value.label).where(Value.slug.in_(wanted))).all()
        return {row.slug: row.label for row in rows}

    def validate_slugs(self, slugs: List[str]) -> None:
        """
        Fail fast on the first slug (in request order) missing from the catalog.

        Raises:
            BadRequestError: naming the offending slug
        """
        if not slugs:
            return
        known = set(self.db.execute(select(Value.slug).where(Value.slug.in_(slugs))).scalars().all())
        for slug in slugs:
            if slug not in known:
                raise BadRequestError(f'Value slug "{slug}" does not exist')

    def increment_restaurant_counts(self, slugs: List[str]) -> None:
        """
        Bump restaurant_count on each value, best effort.

        Runs as its own small batch after the restaurant is committed. A failure
        here leaves the counter stale but never fails the caller's request.
        """
        if not slugs:
            return
        try:
            self.db.execute(
                update(Value)
                .where(Value.slug.in_(slugs))
                .values(restaurant_count=Value.restaurant_count + 1)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Failed to increment restaurant_count for values {slugs}: {e}")
