"""Payment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

from ..bookings.schemas import BookingCheckoutData


class ProcessPaymentRequest(BaseModel):
    type: Literal["booking", "subscription"]
    amount: float
    currency: str = "INR"
    plan: Optional[Literal["premium"]] = None
    billing_cycle: Optional[Literal["monthly", "yearly"]] = None
    space_id: Optional[int] = None


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str = ""
    amount: Optional[float] = None
    currency: str = "INR"
    plan: Optional[Literal["premium"]] = None
    billing_cycle: Optional[Literal["monthly", "yearly"]] = None
    booking_data: Optional[BookingCheckoutData] = None


class PaymentHistoryResponse(BaseModel):
    id: int
    amount: float
    currency: str
    payment_method: str
    transaction_id: Optional[str] = None
    status: str
    payment_date: datetime
    description: Optional[str] = None

    class Config:
        from_attributes = True
