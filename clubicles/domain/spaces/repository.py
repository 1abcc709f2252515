"""Space repository - Database operations for spaces"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from ...models import SpaceOwner, SpaceOwnerBusinessInfo
from ...models_booking import Booking, Review, Space

ACTIVE_BOOKING_STATUSES = ("pending", "confirmed")


class SpaceRepository:
    """Repository for space database operations"""

    @staticmethod
    def public_spaces_query(db: Session):
        """Active spaces whose owner is approved and active"""
        return (
            db.query(Space)
            .join(SpaceOwnerBusinessInfo, Space.business_id == SpaceOwnerBusinessInfo.id)
            .join(SpaceOwner, SpaceOwnerBusinessInfo.space_owner_id == SpaceOwner.id)
            .options(joinedload(Space.business))
            .filter(
                Space.status == "active",
                SpaceOwner.approval_status == "approved",
                SpaceOwner.is_active.is_(True),
            )
        )

    @staticmethod
    def get_public_spaces(
        db: Session,
        city: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> list[Space]:
        """Publicly listed spaces, newest first"""
        query = SpaceRepository.public_spaces_query(db)
        if city:
            query = query.filter(func.lower(Space.city).contains(city.strip().lower()))
        if min_price is not None:
            query = query.filter(Space.price_per_hour >= min_price)
        if max_price is not None:
            query = query.filter(Space.price_per_hour <= max_price)
        return query.order_by(Space.created_at.desc(), Space.id.desc()).all()

    @staticmethod
    def get_public_by_id(db: Session, space_id: int) -> Optional[Space]:
        return SpaceRepository.public_spaces_query(db).filter(Space.id == space_id).first()

    @staticmethod
    def suggest(db: Session, term: str, limit: int = 10) -> list[Space]:
        """Public spaces whose name, address, city or description contains the term"""
        pattern = f"%{term}%"
        return (
            SpaceRepository.public_spaces_query(db)
            .filter(
                or_(
                    Space.name.ilike(pattern),
                    Space.address.ilike(pattern),
                    Space.city.ilike(pattern),
                    Space.description.ilike(pattern),
                )
            )
            .order_by(Space.created_at.desc(), Space.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def suggest_businesses(db: Session, term: str, limit: int = 5) -> list[SpaceOwnerBusinessInfo]:
        pattern = f"%{term}%"
        return (
            db.query(SpaceOwnerBusinessInfo)
            .join(SpaceOwner, SpaceOwnerBusinessInfo.space_owner_id == SpaceOwner.id)
            .filter(
                SpaceOwner.approval_status == "approved",
                SpaceOwner.is_active.is_(True),
                or_(
                    SpaceOwnerBusinessInfo.business_name.ilike(pattern),
                    SpaceOwnerBusinessInfo.business_city.ilike(pattern),
                    SpaceOwnerBusinessInfo.business_type.ilike(pattern),
                ),
            )
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_business_spaces(db: Session, business_id: int) -> list[Space]:
        return (
            db.query(Space)
            .filter(Space.business_id == business_id)
            .order_by(Space.created_at.desc(), Space.id.desc())
            .all()
        )

    @staticmethod
    def get_business_space(db: Session, business_id: int, space_id: int) -> Optional[Space]:
        return db.query(Space).filter(Space.id == space_id, Space.business_id == business_id).first()

    @staticmethod
    def count_business_spaces(db: Session, business_id: int) -> int:
        return (
            db.query(func.count(Space.id))
            .filter(Space.business_id == business_id, Space.status == "active")
            .scalar()
            or 0
        )

    @staticmethod
    def rating_stats(db: Session, space_ids: list[int]) -> dict[int, tuple[float, int]]:
        """space_id -> (average rating rounded to 1 decimal, review count)"""
        if not space_ids:
            return {}
        rows = (
            db.query(Review.space_id, func.avg(Review.rating), func.count(Review.id))
            .filter(Review.space_id.in_(space_ids))
            .group_by(Review.space_id)
            .all()
        )
        return {space_id: (round(float(avg or 0), 1), count) for space_id, avg, count in rows}

    @staticmethod
    def booking_stats(db: Session, space_id: int) -> dict[str, int]:
        rows = (
            db.query(Booking.status, func.count(Booking.id))
            .filter(Booking.space_id == space_id)
            .group_by(Booking.status)
            .all()
        )
        by_status = {status: count for status, count in rows}
        return {
            "total_bookings": sum(by_status.values()),
            "confirmed_bookings": by_status.get("confirmed", 0),
            "completed_bookings": by_status.get("completed", 0),
        }

    @staticmethod
    def count_active_bookings(db: Session, space_id: int) -> int:
        return (
            db.query(func.count(Booking.id))
            .filter(Booking.space_id == space_id, Booking.status.in_(ACTIVE_BOOKING_STATUSES))
            .scalar()
            or 0
        )

    @staticmethod
    def get_reviews(db: Session, space_id: int) -> list[Review]:
        return (
            db.query(Review)
            .options(joinedload(Review.user))
            .filter(Review.space_id == space_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .all()
        )

    @staticmethod
    def create(db: Session, **data) -> Space:
        space = Space(**data)
        db.add(space)
        db.commit()
        db.refresh(space)
        return space

    @staticmethod
    def update(db: Session, space: Space, **data) -> Space:
        for key, value in data.items():
            setattr(space, key, value)
        db.commit()
        db.refresh(space)
        return space

    @staticmethod
    def delete(db: Session, space: Space) -> None:
        db.delete(space)
        db.commit()
