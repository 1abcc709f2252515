"""Admin router - platform dashboard, verification, owners, payouts and premium plans"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...models import User
from .schemas import PayoutCreate, PremiumAction, SpaceOwnerUpdate, VerificationUpdate
from .service import AdminService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


def get_admin_service(db: Session = Depends(get_db)) -> AdminService:
    """Dependency injection for AdminService"""
    return AdminService(db)


# ============================================================================
# DASHBOARD
# ============================================================================


@router.get("/dashboard")
async def get_dashboard(
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return {"success": True, "data": service.dashboard()}


@router.get("/analytics")
async def get_analytics(
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return {"success": True, "data": {"analytics": service.analytics()}}


# ============================================================================
# SPACES
# ============================================================================


@router.get("/spaces")
async def list_spaces(
    search: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    spaces = service.list_spaces(search, status_filter)
    return {"success": True, "spaces": spaces, "total": len(spaces)}


# ============================================================================
# BUSINESS VERIFICATION
# ============================================================================


@router.get("/verifications")
async def list_verifications(
    search: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    business_type: Optional[str] = Query(None),
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    verifications = service.list_verifications(search, status_filter, business_type)
    return {"success": True, "verifications": verifications, "total": len(verifications)}


@router.patch("/verifications")
async def update_verification(
    data: VerificationUpdate,
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    business_info = service.update_verification(admin, data)
    return {"success": True, "message": "Verification status updated", "business_info": business_info}


# ============================================================================
# SPACE OWNERS
# ============================================================================


@router.get("/space-owners")
async def list_space_owners(
    search: Optional[str] = Query(None),
    approval_status: Optional[str] = Query(None),
    onboarding: Optional[str] = Query(None, description="completed | incomplete"),
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    owners = service.list_space_owners(search, approval_status, onboarding)
    return {"success": True, "space_owners": owners, "total": len(owners)}


@router.get("/space-owners/payout")
async def list_payouts(
    space_owner_id: Optional[int] = Query(None),
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return {"success": True, "payouts": service.list_payouts(space_owner_id)}


@router.post("/space-owners/payout", status_code=status.HTTP_201_CREATED)
async def create_payout(
    data: PayoutCreate,
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    payout = await service.create_payout(admin, data)
    return {"success": True, "message": "Payout processed successfully", "payout": payout}


@router.patch("/space-owners/{space_owner_id}")
async def update_space_owner(
    space_owner_id: int,
    data: SpaceOwnerUpdate,
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    owner = service.update_space_owner(space_owner_id, data)
    return {"success": True, "message": "Space owner updated", "space_owner": owner}


# ============================================================================
# PREMIUM PLANS
# ============================================================================


@router.get("/premium-analytics")
async def get_premium_analytics(
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return {"success": True, "data": service.premium_analytics()}


@router.post("/premium-analytics")
async def premium_action(
    data: PremiumAction,
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return {"success": True, **(await service.premium_action(data))}


# ============================================================================
# BOOKINGS & USERS
# ============================================================================


@router.get("/bookings")
async def list_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    bookings = service.list_bookings(status_filter)
    return {"success": True, "bookings": bookings, "total": len(bookings)}


@router.get("/users")
async def list_users(
    search: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    users = service.list_users(search, role)
    return {"success": True, "users": users, "total": len(users)}
