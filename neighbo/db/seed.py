"""
Default value catalog.
"""
import logging

from sqlalchemy.orm import Session

from neighbo.db.base import utcnow
from neighbo.models.value import Value

logger = logging.getLogger(__name__)

DEFAULT_VALUES = [
    {
        "slug": "lgbtq-friendly",
        "label": "LGBTQ+ Friendly",
        "description": "Welcoming and affirming to LGBTQ+ customers and employees",
        "icon": "rainbow",
        "category": "identity",
    },
    {
        "slug": "anti-ice",
        "label": "Anti-ICE / Sanctuary",
        "description": "Has publicly declared solidarity with immigrant communities",
        "icon": "shield",
        "category": "social-justice",
    },
    {
        "slug": "union",
        "label": "Labor-Friendly / Union",
        "description": "Supports organized labor, fair wages, and worker rights",
        "icon": "handshake",
        "category": "labor",
    },
    {
        "slug": "sustainable",
        "label": "Sustainable",
        "description": "Prioritizes sustainable sourcing, waste reduction, or eco-friendly practices",
        "icon": "leaf",
        "category": "environment",
    },
    {
        "slug": "black-owned",
        "label": "Black-Owned",
        "description": "Owned by Black entrepreneurs",
        "icon": "fist",
        "category": "ownership",
    },
    {
        "slug": "woman-owned",
        "label": "Woman-Owned",
        "description": "Owned by women",
        "icon": "venus",
        "category": "ownership",
    },
    {
        "slug": "disability-friendly",
        "label": "Disability-Friendly",
        "description": "Accessible facilities and accommodating to people with disabilities",
        "icon": "accessibility",
        "category": "accessibility",
    },
    {
        "slug": "indigenous-owned",
        "label": "Indigenous-Owned",
        "description": "Owned by Indigenous peoples",
        "icon": "feather",
        "category": "ownership",
    },
    {
        "slug": "immigrant-owned",
        "label": "Immigrant-Owned",
        "description": "Owned by immigrants",
        "icon": "globe",
        "category": "ownership",
    },
    {
        "slug": "worker-cooperative",
        "label": "Worker Cooperative",
        "description": "Owned and operated cooperatively by workers",
        "icon": "users",
        "category": "labor",
    },
    {
        "slug": "poc-owned",
        "label": "POC-Owned",
        "description": "Owned by people of color",
        "icon": "circle",
        "category": "ownership",
    },
]


def seed_values(db: Session) -> int:
    """
    Insert catalog entries that are missing. Existing entries are left alone
    so edited labels survive a re-seed.

    Returns:
        Number of values inserted
    """
    inserted = 0
    now = utcnow()
    for order, definition in enumerate(DEFAULT_VALUES):
        if db.get(Value, definition["slug"]) is not None:
            continue
        db.add(Value(
            **definition,
            active=True,
            sort_order=order,
            restaurant_count=0,
            created_at=now,
            updated_at=now,
        ))
        inserted += 1
    db.commit()
    logger.info(f"Seeded {inserted} catalog values")
    return inserted
