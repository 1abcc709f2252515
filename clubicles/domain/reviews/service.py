"""Review service - reviews are open only to members who redeemed a booking"""

import logging
from typing import Any, Optional

from fastapi import HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ...email_service import send_review_notification
from ...models import User
from ...models_booking import Review, Space
from ...security_utils import sanitize_text
from .repository import ReviewRepository
from .schemas import ReviewCreate, ReviewResponse, ReviewUpdate

logger = logging.getLogger(__name__)


def review_fields(data: BaseModel) -> dict[str, Any]:
    """Fields explicitly sent by the client, with the text cleaned"""
    fields = data.model_dump(exclude_unset=True, exclude={"space_id"})
    if "review_text" in fields:
        text = sanitize_text(fields["review_text"])
        if not text:
            raise HTTPException(status_code=400, detail="Review text cannot be empty")
        fields["review_text"] = text
    return {key: value for key, value in fields.items() if not (key == "rating" and value is None)}


class ReviewService:
    """Service for review operations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReviewRepository()

    def check_eligibility(self, user: Optional[User], space_id: Optional[int]) -> dict[str, Any]:
        if not user:
            return {
                "eligible": False,
                "reason": "Authentication required",
                "action_required": "Please sign in to write a review",
            }
        if not space_id:
            return {
                "eligible": False,
                "reason": "Space ID is required",
                "action_required": "Please select a space",
            }

        redeemed = self.repo.get_redeemed_bookings(self.db, user.id, space_id)
        if not redeemed:
            return {
                "eligible": False,
                "reason": "You must redeem a booking before writing a review",
                "action_required": "Book and redeem a space to write a review",
                "redeemed_bookings": [],
            }

        existing = self.repo.get_user_space_review(self.db, user.id, space_id)
        result = {
            "eligible": True,
            "reason": "You have a redeemed booking and can write a review",
            "action_available": "edit" if existing else "create",
            "redeemed_bookings": [
                {"id": b.id, "redemption_code": b.redemption_code, "date": b.date.isoformat()} for b in redeemed
            ],
        }
        if existing:
            result["existing_review"] = ReviewResponse.model_validate(existing).model_dump()
        return result

    async def create_review(self, user: User, data: ReviewCreate) -> Review:
        space = self.db.query(Space).filter(Space.id == data.space_id).first()
        if not space:
            raise HTTPException(status_code=404, detail="Space not found")

        redeemed = self.repo.get_redeemed_bookings(self.db, user.id, data.space_id)
        if not redeemed:
            raise HTTPException(status_code=403, detail="You must redeem a booking before writing a review")

        if self.repo.get_user_space_review(self.db, user.id, data.space_id):
            raise HTTPException(
                status_code=409, detail="You already have a review for this space. Use PUT to update it."
            )

        fields = review_fields(data)
        try:
            review = self.repo.create(
                self.db,
                user_id=user.id,
                space_id=data.space_id,
                booking_id=redeemed[0].id,
                **fields,
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error creating review for space {data.space_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create review") from e

        logger.info(f"⭐ Review {review.id} created by user {user.id} for space {space.id} ({review.rating}/5)")

        owner = space.business.space_owner if space.business else None
        if owner:
            try:
                await send_review_notification(
                    to=owner.email,
                    owner_name=owner.first_name or "there",
                    space_name=space.name,
                    rating=review.rating,
                    review_text=review.review_text,
                )
            except Exception as e:
                logger.warning(f"⚠️ Review notification failed for owner {owner.id}: {e}")

        return review

    def update_review_for_space(self, user: User, space_id: int, data: ReviewUpdate) -> Review:
        if not self.repo.get_redeemed_bookings(self.db, user.id, space_id):
            raise HTTPException(status_code=403, detail="You must redeem a booking before writing a review")

        review = self.repo.get_user_space_review(self.db, user.id, space_id)
        if not review:
            raise HTTPException(status_code=404, detail="No existing review found to update")
        return self._apply_update(review, data)

    def update_review(self, user: User, review_id: int, data: ReviewUpdate) -> Review:
        review = self.repo.get_user_review(self.db, user.id, review_id)
        if not review:
            raise HTTPException(status_code=404, detail="Review not found")
        return self._apply_update(review, data)

    def _apply_update(self, review: Review, data: ReviewUpdate) -> Review:
        fields = review_fields(data)
        try:
            review = self.repo.update(self.db, review, **fields)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating review {review.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update review") from e
        logger.info(f"✅ Review {review.id} updated")
        return review

    def delete_review(self, user: User, review_id: int) -> None:
        review = self.repo.get_user_review(self.db, user.id, review_id)
        if not review:
            raise HTTPException(status_code=404, detail="Review not found")
        try:
            self.repo.delete(self.db, review)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error deleting review {review_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete review") from e
        logger.info(f"🗑️ Review {review_id} deleted by user {user.id}")

    def list_user_reviews(self, user: User) -> list[dict[str, Any]]:
        return [
            {
                "id": review.id,
                "space_id": review.space_id,
                "space_name": review.space.name if review.space else None,
                "rating": review.rating,
                "review_text": review.review_text,
                "created_at": review.created_at,
                "updated_at": review.updated_at,
            }
            for review in self.repo.get_user_reviews(self.db, user.id)
        ]
