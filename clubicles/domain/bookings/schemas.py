"""Booking domain schemas - Pydantic models for validation"""

from datetime import date as date_type
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_time
from ...vibgyor import is_valid_professional_role


class BookingDateRequest(BaseModel):
    """One booked date inside a checkout"""

    date: date_type
    start_time: str
    end_time: str
    seats: int = Field(default=1, ge=1)
    booking_type: Literal["hourly", "daily"] = "hourly"
    professional_role: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, v):
        return validate_time(v)

    @field_validator("professional_role")
    @classmethod
    def check_role(cls, v):
        if v and not is_valid_professional_role(v):
            raise ValueError("Unknown professional role")
        return v


class BookingCheckoutData(BaseModel):
    space_id: int
    dates: list[BookingDateRequest] = Field(min_length=1)


class BookingResponse(BaseModel):
    id: int
    space_id: int
    user_id: int
    date: date_type
    start_time: str
    end_time: str
    booking_type: str
    seats_booked: int
    base_amount: float
    tax_amount: float
    total_amount: float
    owner_payout: float
    platform_commission: float
    status: str
    payment_id: Optional[str] = None
    redemption_code: Optional[str] = None
    qr_code_data: Optional[str] = None
    is_redeemed: bool
    redeemed_at: Optional[datetime] = None
    roles: Optional[list[str]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookingActionRequest(BaseModel):
    booking_id: int
    action: str  # confirm | cancel


class RedeemBookingRequest(BaseModel):
    redemption_code: str
