"""Owner domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_gst, validate_ifsc, validate_pan, validate_pincode


class BusinessInfoPayload(BaseModel):
    business_name: str
    business_type: Optional[str] = None
    gst_number: Optional[str] = None
    pan_number: Optional[str] = None
    business_address: Optional[str] = None
    business_city: Optional[str] = None
    business_state: Optional[str] = None
    business_pincode: Optional[str] = None

    @field_validator("gst_number")
    @classmethod
    def check_gst(cls, v):
        return validate_gst(v)

    @field_validator("pan_number")
    @classmethod
    def check_pan(cls, v):
        return validate_pan(v)

    @field_validator("business_pincode")
    @classmethod
    def check_pincode(cls, v):
        return validate_pincode(v)


class BusinessInfoResponse(BaseModel):
    id: int
    business_name: str
    business_type: Optional[str] = None
    gst_number: Optional[str] = None
    pan_number: Optional[str] = None
    business_address: Optional[str] = None
    business_city: Optional[str] = None
    business_state: Optional[str] = None
    business_pincode: Optional[str] = None
    verification_status: str
    verified_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    class Config:
        from_attributes = True


class PaymentInfoPayload(BaseModel):
    bank_account_number: Optional[str] = None
    bank_ifsc_code: Optional[str] = None
    bank_account_holder_name: Optional[str] = None
    bank_name: Optional[str] = None
    upi_id: Optional[str] = None

    @field_validator("bank_ifsc_code")
    @classmethod
    def check_ifsc(cls, v):
        return validate_ifsc(v)


class PaymentInfoResponse(BaseModel):
    id: int
    bank_account_number: Optional[str] = None  # masked
    bank_ifsc_code: Optional[str] = None
    bank_account_holder_name: Optional[str] = None
    bank_name: Optional[str] = None
    upi_id: Optional[str] = None


class PremiumPaymentsToggle(BaseModel):
    enabled: Any  # must be a real bool, checked in the service


class ApprovalStatusResponse(BaseModel):
    approval_status: str
    onboarding_completed: bool
    rejection_reason: Optional[str] = None
    verification_status: Optional[str] = None
    has_business_info: bool
    has_payment_info: bool
