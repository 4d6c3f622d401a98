"""Request/response schemas for the auth and company profile API."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class Credentials(BaseModel):
    email: str = Field(max_length=320, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=8, max_length=1024)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class TokenResponse(BaseModel):
    token: str


class CompanyProfileIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    industry: str = Field(min_length=2)
    region: str = Field(min_length=2)
    size: str = Field(min_length=1, examples=["1-10", "11-50"])


class CompanyProfileOut(BaseModel):
    profile: Dict[str, Any]


class CompanySaved(BaseModel):
    id: int
