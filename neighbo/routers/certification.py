"""
Certification endpoints for a restaurant's values.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from neighbo.core.deps import require_ownership
from neighbo.core.security import Identity
from neighbo.db.session import get_db
from neighbo.schemas.certification import (
    CertificationResponse,
    SelfAttestRequest,
    UploadEvidenceRequest,
    UploadEvidenceResponse,
)
from neighbo.services.certification import CertificationService

router = APIRouter(prefix="/restaurants/{restaurant_id}/certification", tags=["certification"])


@router.get("", response_model=CertificationResponse)
def get_certification(restaurant_id: str, db: Session = Depends(get_db)):
    return CertificationService(db).get_certification(restaurant_id)


@router.post("/self-attest", response_model=CertificationResponse)
def self_attest(
    restaurant_id: str,
    data: SelfAttestRequest,
    identity: Identity = Depends(require_ownership),
    db: Session = Depends(get_db),
):
    """
    Owner attests that the restaurant holds the given values (tier 1).
    """
    return CertificationService(db).self_attest(restaurant_id, data.values)


@router.post("/upload-evidence", response_model=UploadEvidenceResponse)
def upload_evidence(
    restaurant_id: str,
    data: UploadEvidenceRequest,
    identity: Identity = Depends(require_ownership),
    db: Session = Depends(get_db),
):
    """
    Submit already-uploaded evidence files for manual review.
    """
    CertificationService(db).submit_evidence(
        restaurant_id,
        identity,
        value_slug=data.value_slug,
        file_urls=[str(url) for url in data.file_urls],
        description=data.description,
    )
    return UploadEvidenceResponse(success=True, message="Evidence submitted for review")
