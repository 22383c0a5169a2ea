"""Member and partner schemas."""
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.models.person import PartnerPayType, PersonStatus

MOBILE_PATTERN = r"^\+?[0-9]{10,15}$"


class _PersonFields(BaseModel):
    @field_validator("name", check_fields=False)
    @classmethod
    def _name_not_blank(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("name cannot be blank")
        return value.strip() if value is not None else value

    @field_validator("batch_ids", check_fields=False)
    @classmethod
    def _unique_batch_ids(cls, value: list[int] | None) -> list[int] | None:
        if value is None:
            return value
        return sorted(set(value))

    @field_validator("name", "email", "mobile", "status", "pay_type", "batch_ids", check_fields=False)
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class MemberCreate(_PersonFields):
    name: str = Field(max_length=40)
    email: EmailStr
    mobile: str = Field(pattern=MOBILE_PATTERN)
    status: PersonStatus = PersonStatus.active
    batch_ids: list[int] = Field(default_factory=list)


class MemberUpdate(_PersonFields):
    name: str | None = Field(default=None, max_length=40)
    email: EmailStr | None = None
    mobile: str | None = Field(default=None, pattern=MOBILE_PATTERN)
    status: PersonStatus | None = None
    batch_ids: list[int] | None = None


class PartnerCreate(_PersonFields):
    name: str = Field(max_length=100)
    email: EmailStr
    mobile: str = Field(pattern=MOBILE_PATTERN)
    specialization: str | None = Field(default=None, max_length=255)
    status: PersonStatus = PersonStatus.active
    pay_type: PartnerPayType = PartnerPayType.fixed
    pay_amount: Decimal | None = Field(default=None, ge=Decimal("0"))
    pay_percentage: Decimal | None = Field(default=None, ge=Decimal("0"), le=Decimal("100"))
    batch_ids: list[int] = Field(default_factory=list)


class PartnerUpdate(_PersonFields):
    name: str | None = Field(default=None, max_length=100)
    email: EmailStr | None = None
    mobile: str | None = Field(default=None, pattern=MOBILE_PATTERN)
    specialization: str | None = Field(default=None, max_length=255)
    status: PersonStatus | None = None
    pay_type: PartnerPayType | None = None
    pay_amount: Decimal | None = Field(default=None, ge=Decimal("0"))
    pay_percentage: Decimal | None = Field(default=None, ge=Decimal("0"), le=Decimal("100"))
    batch_ids: list[int] | None = None


class TogglePauseIn(BaseModel):
    """Pause (with an end date and reason) or resume a person's attendance."""

    action: Literal["pause", "resume"]
    end_date: dt.date | None = None
    reason: str | None = Field(default=None, max_length=500)


class MemberRead(BaseModel):
    id: int
    name: str
    email: str
    mobile: str
    status: PersonStatus
    excused_until: dt.date | None = None
    excuse_reason: str | None = None
    effective_display_status: str
    batch_ids: list[int]
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class PartnerRead(MemberRead):
    specialization: str | None = None
    pay_type: PartnerPayType
    pay_amount: Decimal | None = None
    pay_percentage: Decimal | None = None


__all__ = [
    "MOBILE_PATTERN",
    "MemberCreate",
    "MemberRead",
    "MemberUpdate",
    "PartnerCreate",
    "PartnerRead",
    "PartnerUpdate",
    "TogglePauseIn",
]
