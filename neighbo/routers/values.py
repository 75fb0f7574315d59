from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from neighbo.db.session import get_db
from neighbo.schemas.value import ValueListResponse, ValueResponse
from neighbo.services.values import ValueCatalog

router = APIRouter(prefix="/values", tags=["values"])


@router.get("", response_model=ValueListResponse)
def list_values(db: Session = Depends(get_db)):
    """Active catalog values in display order."""
    values = ValueCatalog(db).list_active()
    return ValueListResponse(values=[ValueResponse.model_validate(v) for v in values])
