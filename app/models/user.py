from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class User(Base):
    __tablename__ = "users"

    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)

    company = relationship(
        "Company", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
