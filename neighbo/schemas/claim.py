"""
Business claim schemas.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import EmailStr, Field

from neighbo.schemas.common import CamelModel

ClaimRole = Literal["owner", "manager", "authorized-rep"]


class ClaimCreate(CamelModel):
    owner_name: str = Field(min_length=1, max_length=200)
    role: ClaimRole
    phone: str = Field(min_length=7, max_length=20)
    email: EmailStr
    evidence_description: Optional[str] = Field(default=None, max_length=1000)


class ClaimResponse(CamelModel):
    id: str
    restaurant_id: str
    restaurant_name: str
    user_id: str
    user_email: str
    owner_name: str
    role: ClaimRole
    phone: str
    email: str
    evidence_description: Optional[str]
    evidence_file_urls: List[str] = Field(alias="evidenceFileURLs")
    status: Literal["pending", "approved", "rejected"]
    created_at: datetime
