"""
User profile and favorites schemas.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from neighbo.schemas.common import CamelModel
from neighbo.schemas.restaurant import RestaurantResponse

UserType = Literal["user", "business"]


class UserResponse(CamelModel):
    uid: str
    email: str
    display_name: Optional[str]
    photo_url: Optional[str] = Field(alias="photoURL")
    user_type: UserType
    value_preferences: List[str]
    claimed_restaurant_id: Optional[str]
    report_count: int
    created_at: datetime
    updated_at: datetime


class UserUpdate(CamelModel):
    """Partial profile update; omitted fields are left untouched."""
    display_name: Optional[str] = Field(default=None, max_length=200)
    photo_url: Optional[str] = Field(default=None, alias="photoURL")
    user_type: Optional[UserType] = None
    value_preferences: Optional[List[str]] = None


class FavoriteResponse(CamelModel):
    restaurant_id: str
    restaurant_name: str
    restaurant_city: str
    added_at: datetime


class FavoriteListResponse(CamelModel):
    favorites: List[FavoriteResponse]
    next_cursor: Optional[str]


class MyRestaurantResponse(CamelModel):
    restaurant: Optional[RestaurantResponse]
