"""Finance router - owner analytics, revenue, balances and payouts"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...auth import get_current_owner
from ...database import get_db
from ...models import SpaceOwner
from .schemas import OwnerPaymentsAction
from .service import FinanceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/owner", tags=["Owner", "Finance"])


def get_finance_service(db: Session = Depends(get_db)) -> FinanceService:
    """Dependency injection for FinanceService"""
    return FinanceService(db)


@router.get("/analytics")
async def get_analytics(
    owner: SpaceOwner = Depends(get_current_owner),
    service: FinanceService = Depends(get_finance_service),
):
    return {"success": True, "data": service.analytics(owner)}


@router.get("/revenue")
async def get_revenue(
    owner: SpaceOwner = Depends(get_current_owner),
    service: FinanceService = Depends(get_finance_service),
):
    """Revenue after taxes and fees; also refreshes the pending payout record"""
    return {"success": True, "data": service.revenue(owner)}


@router.get("/financial")
async def get_financial(
    owner: SpaceOwner = Depends(get_current_owner),
    service: FinanceService = Depends(get_finance_service),
):
    return {"success": True, "data": service.financial(owner)}


@router.get("/payments")
async def get_payments(
    owner: SpaceOwner = Depends(get_current_owner),
    service: FinanceService = Depends(get_finance_service),
):
    return {"success": True, "data": service.payments_overview(owner)}


@router.post("/payments")
async def post_payments(
    body: OwnerPaymentsAction,
    owner: SpaceOwner = Depends(get_current_owner),
    service: FinanceService = Depends(get_finance_service),
):
    if body.action == "update_payment_info":
        payment_info = service.update_payment_info(owner, body.data)
        return {"success": True, "message": "Payment information updated successfully", "data": payment_info}

    if body.action == "request_payout":
        payout = service.request_payout(owner, body.data)
        return {"success": True, "message": "Payout request submitted successfully", "data": payout}

    raise HTTPException(status_code=400, detail="Invalid action")
