"""
Business claim endpoints, including administrator review.
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from neighbo.core.deps import get_current_identity, require_admin, require_ownership
from neighbo.core.security import Identity
from neighbo.db.session import get_db
from neighbo.schemas.claim import ClaimCreate, ClaimResponse
from neighbo.services.claims import ClaimService

router = APIRouter(tags=["claims"])


@router.post("/restaurants/{restaurant_id}/claim", response_model=ClaimResponse, status_code=status.HTTP_201_CREATED)
def claim_restaurant(
    restaurant_id: str,
    data: ClaimCreate,
    response: Response,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Claim ownership of a restaurant.

    Returns 201 for a new claim, 200 with the existing claim when the caller
    already has one pending for this restaurant.
    """
    claim, created = ClaimService(db).create_claim(identity, restaurant_id, data)
    if not created:
        response.status_code = status.HTTP_200_OK
    return ClaimResponse.model_validate(claim)


@router.get("/restaurants/{restaurant_id}/claim", response_model=ClaimResponse)
def get_my_claim(
    restaurant_id: str,
    identity: Identity = Depends(require_ownership),
    db: Session = Depends(get_db),
):
    return ClaimResponse.model_validate(ClaimService(db).latest_claim(identity.uid, restaurant_id))


@router.post("/admin/claims/{claim_id}/approve", response_model=ClaimResponse)
def approve_claim(
    claim_id: str,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ClaimResponse.model_validate(ClaimService(db).approve(claim_id))


@router.post("/admin/claims/{claim_id}/reject", response_model=ClaimResponse)
def reject_claim(
    claim_id: str,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ClaimResponse.model_validate(ClaimService(db).reject(claim_id))
