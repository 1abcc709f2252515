"""Owner router - approval, business profile, payment settings, plan and dashboard"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_owner
from ...database import get_db
from ...models import SpaceOwner
from .schemas import ApprovalStatusResponse, BusinessInfoPayload, PaymentInfoPayload, PremiumPaymentsToggle
from .service import OwnerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/owner", tags=["Owner"])


def get_owner_service(db: Session = Depends(get_db)) -> OwnerService:
    """Dependency injection for OwnerService"""
    return OwnerService(db)


# ============================================================================
# ONBOARDING
# ============================================================================


@router.get("/approval-status")
async def get_approval_status(
    owner: SpaceOwner = Depends(get_current_owner),
    service: OwnerService = Depends(get_owner_service),
):
    status = ApprovalStatusResponse(**service.approval_status(owner))
    return {"success": True, **status.model_dump()}


@router.get("/business-info")
async def get_business_info(
    owner: SpaceOwner = Depends(get_current_owner),
    service: OwnerService = Depends(get_owner_service),
):
    return {"success": True, "business_info": service.get_business_info(owner)}


@router.put("/business-info")
async def update_business_info(
    data: BusinessInfoPayload,
    owner: SpaceOwner = Depends(get_current_owner),
    service: OwnerService = Depends(get_owner_service),
):
    """Save the business profile; changes go back to admin verification"""
    business = service.update_business_info(owner, data)
    return {"success": True, "message": "Business info saved", "business_info": business}


# ============================================================================
# PAYMENTS SETTINGS
# ============================================================================


@router.get("/payment-settings")
async def get_payment_settings(
    owner: SpaceOwner = Depends(get_current_owner),
    service: OwnerService = Depends(get_owner_service),
):
    return {"success": True, **service.get_payment_settings(owner)}


@router.put("/payment-settings")
async def update_payment_settings(
    data: PaymentInfoPayload,
    owner: SpaceOwner = Depends(get_current_owner),
    service: OwnerService = Depends(get_owner_service),
):
    payment_info = service.update_payment_settings(owner, data)
    return {"success": True, "message": "Payment settings updated", "payment_info": payment_info}


@router.get("/premium-payments")
async def get_premium_payments(owner: SpaceOwner = Depends(get_current_owner)):
    return {"success": True, "enabled": owner.premium_payments_enabled}


@router.post("/premium-payments")
async def set_premium_payments(
    data: PremiumPaymentsToggle,
    owner: SpaceOwner = Depends(get_current_owner),
    service: OwnerService = Depends(get_owner_service),
):
    """Premium payments halve the platform fee on future bookings"""
    enabled = service.set_premium_payments(owner, data.enabled)
    return {
        "success": True,
        "enabled": enabled,
        "message": f"Premium payments {'enabled' if enabled else 'disabled'}",
    }


# ============================================================================
# PLAN & DASHBOARD
# ============================================================================


@router.get("/subscription")
async def get_subscription(
    owner: SpaceOwner = Depends(get_current_owner),
    service: OwnerService = Depends(get_owner_service),
):
    return {"success": True, **service.subscription_status(owner)}


@router.get("/dashboard")
async def get_dashboard(
    owner: SpaceOwner = Depends(get_current_owner),
    service: OwnerService = Depends(get_owner_service),
):
    return {"success": True, "data": service.dashboard(owner)}
