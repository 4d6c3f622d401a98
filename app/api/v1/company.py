"""Company profile endpoints. The profile is encrypted at rest."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v1.schemas import CompanyProfileIn, CompanyProfileOut, CompanySaved
from app.db.session import get_db
from app.security.auth.jwt_handler import get_current_user_id
from app.security.encryption.field_encryption import (
    FieldEncryptor,
    get_field_encryptor,
)
from app.services.company_profile import CompanyProfileService

router = APIRouter(prefix="/company", tags=["company"])


def get_profile_service(
    db: Session = Depends(get_db),
    encryptor: FieldEncryptor = Depends(get_field_encryptor),
) -> CompanyProfileService:
    return CompanyProfileService(db, encryptor)


@router.get("", response_model=CompanyProfileOut)
def read_profile(
    user_id: int = Depends(get_current_user_id),
    service: CompanyProfileService = Depends(get_profile_service),
) -> CompanyProfileOut:
    """Current user's company profile, decrypted."""
    profile = service.load(user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return CompanyProfileOut(profile=profile)


@router.post("", response_model=CompanySaved, status_code=status.HTTP_201_CREATED)
def save_profile(
    body: CompanyProfileIn,
    user_id: int = Depends(get_current_user_id),
    service: CompanyProfileService = Depends(get_profile_service),
) -> CompanySaved:
    """Create or replace the current user's company profile."""
    company = service.save(user_id, body.model_dump())
    return CompanySaved(id=company.id)
