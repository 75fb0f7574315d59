"""
Community report schemas.
"""
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import Field

from neighbo.schemas.common import CamelModel, NonEmptyStr


class ReportCreate(CamelModel):
    values: List[NonEmptyStr] = Field(min_length=1, description="Must report at least one value")
    comment: Optional[str] = Field(default=None, max_length=500)


class ReportResponse(CamelModel):
    id: str
    restaurant_id: str
    restaurant_name: str
    user_id: str
    values: List[str]
    comment: Optional[str]
    status: Literal["active", "withdrawn"]
    created_at: datetime


class ReportCreateResponse(ReportResponse):
    next_report_allowed_at: datetime


class UserReportCheck(CamelModel):
    """Whether the caller may report a restaurant right now."""
    has_active_report: bool
    reported_values: List[str]
    next_report_allowed_at: Optional[datetime]


class ReportAggregate(CamelModel):
    value_counts: Dict[str, int]
    total_reports: int


class ReportListResponse(CamelModel):
    reports: List[ReportResponse]
    next_cursor: Optional[str]
