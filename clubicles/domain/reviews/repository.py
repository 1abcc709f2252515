"""Review repository - Database operations for reviews"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models_booking import Booking, Review


class ReviewRepository:
    """Repository for review database operations"""

    @staticmethod
    def get_redeemed_bookings(db: Session, user_id: int, space_id: int) -> list[Booking]:
        return (
            db.query(Booking)
            .filter(Booking.user_id == user_id, Booking.space_id == space_id, Booking.is_redeemed.is_(True))
            .order_by(Booking.redeemed_at.desc(), Booking.id.desc())
            .all()
        )

    @staticmethod
    def get_user_space_review(db: Session, user_id: int, space_id: int) -> Optional[Review]:
        return db.query(Review).filter(Review.user_id == user_id, Review.space_id == space_id).first()

    @staticmethod
    def get_user_review(db: Session, user_id: int, review_id: int) -> Optional[Review]:
        return db.query(Review).filter(Review.id == review_id, Review.user_id == user_id).first()

    @staticmethod
    def get_user_reviews(db: Session, user_id: int) -> list[Review]:
        return (
            db.query(Review)
            .options(joinedload(Review.space))
            .filter(Review.user_id == user_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .all()
        )

    @staticmethod
    def create(db: Session, **data) -> Review:
        review = Review(**data)
        db.add(review)
        db.commit()
        db.refresh(review)
        return review

    @staticmethod
    def update(db: Session, review: Review, **data) -> Review:
        for key, value in data.items():
            setattr(review, key, value)
        db.commit()
        db.refresh(review)
        return review

    @staticmethod
    def delete(db: Session, review: Review) -> None:
        db.delete(review)
        db.commit()
