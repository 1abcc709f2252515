import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..domain.bookings.service import BookingService
from ..domain.reviews.service import ReviewService
from ..models import User
from ..schemas import UserResponse, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["Users"])


@router.get("/profile")
async def get_profile(current_user: User = Depends(get_current_user)):
    return {"success": True, "user": UserResponse.model_validate(current_user).model_dump()}


@router.put("/profile")
async def update_profile(
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update the caller's own profile; email and role are not editable here"""
    updates = data.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No changes provided")

    try:
        for key, value in updates.items():
            setattr(current_user, key, value.strip() if isinstance(value, str) else value)
        db.commit()
        db.refresh(current_user)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error updating profile for user {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update profile") from e

    logger.info(f"✅ Updated profile for user {current_user.id}: {list(updates)}")
    return {
        "success": True,
        "message": "Profile updated successfully",
        "user": UserResponse.model_validate(current_user).model_dump(),
    }


@router.get("/bookings")
async def get_my_bookings(
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    bookings = BookingService(db).list_user_bookings(current_user, status)
    return {"success": True, "bookings": bookings, "total": len(bookings)}


@router.get("/reviews")
async def get_my_reviews(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    reviews = ReviewService(db).list_user_reviews(current_user)
    return {"success": True, "reviews": reviews, "total": len(reviews)}
