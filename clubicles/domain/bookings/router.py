"""Booking router - member booking history and owner booking management"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_owner, get_current_user
from ...database import get_db
from ...models import SpaceOwner, User
from .schemas import BookingActionRequest, BookingResponse, RedeemBookingRequest
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["Bookings"])
owner_router = APIRouter(prefix="/api/owner", tags=["Owner", "Bookings"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


# ============================================================================
# MEMBER
# ============================================================================


@router.get("")
async def list_my_bookings(
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    bookings = service.list_user_bookings(current_user, status)
    return {"success": True, "bookings": bookings, "total": len(bookings)}


@router.get("/{booking_id}")
async def get_my_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return {"success": True, "booking": service.get_user_booking(current_user, booking_id)}


# ============================================================================
# OWNER
# ============================================================================


@owner_router.get("/bookings")
async def list_owner_bookings(
    status: Optional[str] = Query(None),
    owner: SpaceOwner = Depends(get_current_owner),
    service: BookingService = Depends(get_booking_service),
):
    bookings = service.list_owner_bookings(owner, status)
    return {"success": True, "bookings": bookings, "total": len(bookings)}


@owner_router.post("/bookings")
async def update_owner_booking(
    data: BookingActionRequest,
    owner: SpaceOwner = Depends(get_current_owner),
    service: BookingService = Depends(get_booking_service),
):
    """Confirm or cancel a booking at one of the owner's spaces"""
    booking = service.update_booking_status(owner, data.booking_id, data.action)
    return {
        "success": True,
        "message": f"Booking {booking.status} successfully",
        "booking": {"id": booking.id, "status": booking.status},
    }


@owner_router.post("/redeem-booking")
async def redeem_booking(
    data: RedeemBookingRequest,
    owner: SpaceOwner = Depends(get_current_owner),
    service: BookingService = Depends(get_booking_service),
):
    """Mark a booking as fulfilled using the code shown by the member at the front desk"""
    booking = service.redeem_booking(owner, data.redemption_code)
    return {
        "success": True,
        "message": "Booking redeemed successfully",
        "booking": BookingResponse.model_validate(booking).model_dump(),
    }
