from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from neighbo.core.deps import get_current_identity
from neighbo.core.security import Identity
from neighbo.db.session import get_db
from neighbo.schemas.restaurant import RestaurantResponse
from neighbo.schemas.user import MyRestaurantResponse
from neighbo.services.restaurants import RestaurantService
from neighbo.services.users import UserService

router = APIRouter(prefix="/business", tags=["business"])


@router.get("/my-restaurant", response_model=MyRestaurantResponse)
def my_restaurant(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """The restaurant the caller has claimed, or null."""
    restaurant = UserService(db).my_restaurant(identity.uid)
    if restaurant is None:
        return MyRestaurantResponse(restaurant=None)
    labels = RestaurantService(db).labels_for([restaurant])
    return MyRestaurantResponse(restaurant=RestaurantResponse.build(restaurant, labels))
