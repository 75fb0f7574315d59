"""
Community report endpoints.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from neighbo.core.deps import get_current_identity
from neighbo.core.security import Identity
from neighbo.db.session import get_db
from neighbo.schemas.report import (
    ReportAggregate,
    ReportCreate,
    ReportCreateResponse,
    ReportResponse,
    UserReportCheck,
)
from neighbo.services.reports import ReportService

router = APIRouter(prefix="/restaurants/{restaurant_id}/reports", tags=["reports"])


@router.get("/mine", response_model=UserReportCheck)
def my_report_status(
    restaurant_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Whether the caller can report this restaurant now, and if not, when."""
    return ReportService(db).check(identity.uid, restaurant_id)


@router.get("", response_model=ReportAggregate)
def report_summary(restaurant_id: str, db: Session = Depends(get_db)):
    return ReportService(db).aggregate(restaurant_id)


@router.post("", response_model=ReportCreateResponse, status_code=status.HTTP_201_CREATED)
def submit_report(
    restaurant_id: str,
    data: ReportCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Report which values a restaurant lives up to.

    One report per restaurant every 30 days; earlier attempts get 429 with
    ``nextReportAllowedAt``.
    """
    report, next_allowed_at = ReportService(db).submit(identity, restaurant_id, data.values, data.comment)
    return ReportCreateResponse(
        **ReportResponse.model_validate(report).model_dump(),
        next_report_allowed_at=next_allowed_at,
    )
