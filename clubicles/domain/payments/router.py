"""Payment router - order creation, verification and owner payment history"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_owner, get_current_user
from ...database import get_db
from ...models import SpaceOwner, User
from .schemas import PaymentHistoryResponse, ProcessPaymentRequest, VerifyPaymentRequest
from .service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payment", tags=["Payments"])


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    """Dependency injection for PaymentService"""
    return PaymentService(db)


@router.post("/process")
async def process_payment(
    data: ProcessPaymentRequest,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    """Create a gateway order for a booking checkout or a premium subscription"""
    logger.info(f"💳 Creating {data.type} order for user {current_user.id}: {data.amount} {data.currency}")
    return await service.create_order(data, current_user)


@router.post("/verify")
async def verify_payment(
    data: VerifyPaymentRequest,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    """
    Verify the gateway signature and fulfil the purchase.

    With booking_data the checkout becomes confirmed bookings, otherwise the
    payment upgrades the caller's owner account to premium.
    """
    return await service.verify_payment(data, current_user)


@router.get("/history")
async def payment_history(
    owner: SpaceOwner = Depends(get_current_owner),
    service: PaymentService = Depends(get_payment_service),
):
    payments = service.payment_history(owner)
    return {
        "success": True,
        "payments": [PaymentHistoryResponse.model_validate(p).model_dump() for p in payments],
    }
