"""Load and store the per-user company profile as an encrypted envelope."""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.models.company import Company
from app.security.encryption.field_encryption import FieldEncryptor
from app.utils.logger import get_logger

logger = get_logger(__name__)


class CompanyProfileService:
    def __init__(self, db: Session, encryptor: FieldEncryptor) -> None:
        self.db = db
        self.encryptor = encryptor

    def load(self, user_id: int) -> Optional[Dict[str, Any]]:
        """Decrypted profile for ``user_id``, or ``None`` if none was saved."""
        company = self.db.query(Company).filter(Company.user_id == user_id).first()
        if company is None:
            return None
        profile = self.encryptor.decrypt(company.envelope)
        logger.info("Company profile decrypted", user_id=user_id, company_id=company.id)
        return profile

    def save(self, user_id: int, profile: Dict[str, Any]) -> Company:
        """Encrypt ``profile`` and replace the user's stored envelope."""
        envelope = self.encryptor.encrypt(profile)
        company = self.db.query(Company).filter(Company.user_id == user_id).first()
        if company is None:
            company = Company(user_id=user_id)
            self.db.add(company)
        company.envelope = envelope
        self.db.commit()
        self.db.refresh(company)
        logger.info("Company profile encrypted", user_id=user_id, company_id=company.id)
        return company
