"""Review router - create, edit and remove space reviews"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, get_optional_user
from ...database import get_db
from ...models import User
from .schemas import ReviewCreate, ReviewResponse, ReviewUpdate, ReviewUpdateBySpace
from .service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reviews", tags=["Reviews"])


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    """Dependency injection for ReviewService"""
    return ReviewService(db)


@router.post("", status_code=201)
async def create_review(
    data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    review = await service.create_review(current_user, data)
    return {
        "success": True,
        "message": "Review created successfully",
        "review": ReviewResponse.model_validate(review).model_dump(),
    }


@router.put("")
async def update_review_for_space(
    data: ReviewUpdateBySpace,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    """Update the caller's review of a space, addressed by space id"""
    review = service.update_review_for_space(current_user, data.space_id, data)
    return {
        "success": True,
        "message": "Review updated successfully",
        "review": ReviewResponse.model_validate(review).model_dump(),
    }


@router.get("/eligibility")
async def review_eligibility(
    space_id: Optional[int] = Query(None),
    current_user: Optional[User] = Depends(get_optional_user),
    service: ReviewService = Depends(get_review_service),
):
    return service.check_eligibility(current_user, space_id)


@router.put("/{review_id}")
async def update_review(
    review_id: int,
    data: ReviewUpdate,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    review = service.update_review(current_user, review_id, data)
    return {
        "success": True,
        "message": "Review updated successfully",
        "review": ReviewResponse.model_validate(review).model_dump(),
    }


@router.delete("/{review_id}")
async def delete_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    service.delete_review(current_user, review_id)
    return {"success": True, "message": "Review deleted successfully"}
