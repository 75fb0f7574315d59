"""
Atomic units of work with optimistic-concurrency retry.

Restaurant and user rows carry a version counter. When two writers race,
the loser's flush matches zero rows and SQLAlchemy raises StaleDataError; the
whole unit of work is rolled back and replayed against fresh state.
"""
import logging
from typing import Callable, TypeVar

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from neighbo.core.config import get_settings
from neighbo.core.errors import ConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_in_transaction(
    db: Session,
    work: Callable[[Session], T],
    max_attempts: int | None = None,
) -> T:
    """
    Run ``work`` and commit it as one transaction.

    ``work`` must do all of its reads through ``db`` so a replay sees the
    winner's committed state. Any exception other than a version conflict
    rolls back and propagates unchanged; nothing partial is ever committed.

    Args:
        db: Session for the current request
        work: Callable performing the reads and writes
        max_attempts: Override for TRANSACTION_MAX_ATTEMPTS

    Returns:
        Whatever ``work`` returned on the committed attempt
    """
    attempts = max_attempts or get_settings().TRANSACTION_MAX_ATTEMPTS

    for attempt in range(1, attempts + 1):
        try:
            result = work(db)
            db.commit()
            return result
        except StaleDataError:
            db.rollback()
            if attempt == attempts:
                logger.warning(f"Transaction gave up after {attempts} conflicting attempts")
                raise ConflictError("The resource was modified concurrently. Please retry.")
            logger.info(f"Concurrent write detected, retrying transaction (attempt {attempt + 1}/{attempts})")
        except Exception:
            db.rollback()
            raise

    # Unreachable: the loop either returns or raises.
    raise ConflictError("The resource was modified concurrently. Please retry.")
