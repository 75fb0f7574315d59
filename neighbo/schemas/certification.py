"""
Certification schemas.
"""
from typing import List, Optional

from pydantic import AnyUrl, Field

from neighbo.schemas.common import CamelModel, NonEmptyStr
from neighbo.schemas.restaurant import RestaurantValue


class CertificationResponse(CamelModel):
    restaurant_id: str
    values: List[RestaurantValue]
    cert_tier_max: int
    total_report_count: int


class SelfAttestRequest(CamelModel):
    values: List[NonEmptyStr] = Field(min_length=1, description="Must attest at least one value")


class UploadEvidenceRequest(CamelModel):
    value_slug: NonEmptyStr
    file_urls: List[AnyUrl] = Field(alias="fileURLs")
    description: Optional[str] = Field(default=None, max_length=1000)


class UploadEvidenceResponse(CamelModel):
    success: bool
    message: str
