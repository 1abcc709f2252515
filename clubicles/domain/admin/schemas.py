"""Admin domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class VerificationUpdate(BaseModel):
    business_info_id: int
    verification_status: Literal["pending", "verified", "rejected"]
    rejection_reason: Optional[str] = None
    verified_by: Optional[str] = None


class SpaceOwnerUpdate(BaseModel):
    approval_status: Optional[Literal["pending", "approved", "rejected"]] = None
    onboarding_completed: Optional[bool] = None
    rejection_reason: Optional[str] = None


class PayoutCreate(BaseModel):
    space_owner_id: int
    amount: float = Field(..., gt=0)
    payment_method: Literal["bank_transfer", "upi"]
    transaction_id: Optional[str] = None
    notes: Optional[str] = None


class PremiumAction(BaseModel):
    action: str
    space_owner_id: int
    plan: Optional[Literal["basic", "premium"]] = None
    plan_expiry_date: Optional[datetime] = None
    extension_days: Optional[int] = Field(None, gt=0)
