"""Company profile, stored only as an AES-GCM envelope."""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.db.base_class import Base
from app.security.encryption.field_encryption import EncryptedEnvelope


class Company(Base):
    __tablename__ = "companies"

    user_id = Column(
        Integer, ForeignKey("users.id"), nullable=False, unique=True, index=True
    )
    # Envelope columns are always written together from one encryption
    iv = Column(String(32), nullable=False)
    tag = Column(String(32), nullable=False)
    ciphertext = Column(Text, nullable=False)

    user = relationship("User", back_populates="company")

    @property
    def envelope(self) -> EncryptedEnvelope:
        return EncryptedEnvelope(iv=self.iv, tag=self.tag, ciphertext=self.ciphertext)

    @envelope.setter
    def envelope(self, value: EncryptedEnvelope) -> None:
        self.iv = value.iv
        self.tag = value.tag
        self.ciphertext = value.ciphertext
