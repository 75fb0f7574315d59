from datetime import datetime
from typing import List, Optional

from neighbo.schemas.common import CamelModel


class ValueResponse(CamelModel):
    slug: str
    label: str
    description: Optional[str]
    icon: Optional[str]
    category: str
    restaurant_count: int
    sort_order: int
    active: bool
    created_at: datetime
    updated_at: datetime


class ValueListResponse(CamelModel):
    values: List[ValueResponse]
