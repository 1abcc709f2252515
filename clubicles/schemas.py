from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from .shared.validators import validate_indian_phone
from .vibgyor import is_valid_professional_role


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    professional_role: Optional[str] = None
    role: str
    is_active: bool
    is_email_verified: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    professional_role: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_indian_phone(v)
        return v

    @field_validator("professional_role")
    @classmethod
    def validate_role(cls, v):
        if v and not is_valid_professional_role(v):
            raise ValueError("Unknown professional role")
        return v


class SpaceOwnerSummary(BaseModel):
    id: int
    approval_status: str
    onboarding_completed: bool
    premium_plan: str
    premium_payments_enabled: bool

    class Config:
        from_attributes = True
