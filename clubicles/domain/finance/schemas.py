"""Finance domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class OwnerPaymentsAction(BaseModel):
    action: str  # update_payment_info | request_payout
    data: dict[str, Any] = {}


class PayoutResponse(BaseModel):
    id: int
    amount: float
    status: str
    payout_method: str
    notes: Optional[str] = None
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SpaceOwnerPayoutResponse(BaseModel):
    id: int
    space_owner_id: int
    amount: float
    payment_method: str
    transaction_id: Optional[str] = None
    status: str
    notes: Optional[str] = None
    processed_by: Optional[int] = None
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BalanceResponse(BaseModel):
    current_balance: float = 0.0
    total_earned: float = 0.0
    total_withdrawn: float = 0.0
    pending_amount: float = 0.0
    commission_deducted: float = 0.0
    tax_deducted: float = 0.0
    last_payout_date: Optional[datetime] = None

    class Config:
        from_attributes = True
