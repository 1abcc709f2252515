"""Booking repository - Database operations for bookings"""

from datetime import datetime
from typing import Optional

from sqlalchemy import case
from sqlalchemy.orm import Session, joinedload

from ...models import SpaceOwnerBusinessInfo
from ...models_booking import Booking, Space


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def owner_bookings_query(db: Session, space_owner_id: int):
        """Bookings at any space belonging to the owner's business"""
        return (
            db.query(Booking)
            .join(Space, Booking.space_id == Space.id)
            .join(SpaceOwnerBusinessInfo, Space.business_id == SpaceOwnerBusinessInfo.id)
            .filter(SpaceOwnerBusinessInfo.space_owner_id == space_owner_id)
        )

    @staticmethod
    def get_user_bookings(db: Session, user_id: int, status: Optional[str] = None) -> list[Booking]:
        query = db.query(Booking).options(joinedload(Booking.space)).filter(Booking.user_id == user_id)
        if status:
            query = query.filter(Booking.status == status)
        return query.order_by(Booking.created_at.desc(), Booking.id.desc()).all()

    @staticmethod
    def get_user_booking(db: Session, user_id: int, booking_id: int) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id, Booking.user_id == user_id).first()

    @staticmethod
    def get_owner_bookings(db: Session, space_owner_id: int, status: Optional[str] = None) -> list[Booking]:
        query = BookingRepository.owner_bookings_query(db, space_owner_id).options(
            joinedload(Booking.user), joinedload(Booking.space)
        )
        if status:
            query = query.filter(Booking.status == status)
        return query.order_by(Booking.date.desc(), Booking.id.desc()).all()

    @staticmethod
    def get_owner_booking(db: Session, space_owner_id: int, booking_id: int) -> Optional[Booking]:
        return BookingRepository.owner_bookings_query(db, space_owner_id).filter(Booking.id == booking_id).first()

    @staticmethod
    def get_owner_booking_by_code(db: Session, space_owner_id: int, code: str) -> Optional[Booking]:
        return (
            BookingRepository.owner_bookings_query(db, space_owner_id)
            .filter(Booking.redemption_code == code)
            .first()
        )

    @staticmethod
    def get_by_payment_id(db: Session, payment_id: str) -> list[Booking]:
        return db.query(Booking).filter(Booking.payment_id == payment_id).order_by(Booking.id.asc()).all()

    @staticmethod
    def mark_redeemed(db: Session, booking_id: int, space_owner_id: int) -> int:
        """
        Flip a confirmed, unredeemed booking to redeemed/completed in one statement.
        Returns the number of rows updated (0 when another request got there first).
        """
        now = datetime.utcnow()
        return (
            db.query(Booking)
            .filter(
                Booking.id == booking_id,
                Booking.is_redeemed.is_(False),
                Booking.status == "confirmed",
            )
            .update(
                {
                    Booking.is_redeemed: True,
                    Booking.redeemed_at: now,
                    Booking.redeemed_by: space_owner_id,
                    Booking.status: "completed",
                    Booking.updated_at: now,
                },
                synchronize_session=False,
            )
        )

    @staticmethod
    def increment_vibgyor(db: Session, space_id: int, category: str) -> int:
        column = getattr(Space, category)
        return (
            db.query(Space)
            .filter(Space.id == space_id)
            .update({column: column + 1}, synchronize_session=False)
        )

    @staticmethod
    def reserve_seats(db: Session, space_id: int, seats: int) -> int:
        """Decrement available seats only if enough remain; returns rows updated"""
        return (
            db.query(Space)
            .filter(Space.id == space_id, Space.available_seats >= seats)
            .update({Space.available_seats: Space.available_seats - seats}, synchronize_session=False)
        )

    @staticmethod
    def release_seats(db: Session, space_id: int, seats: int) -> int:
        """Give seats back, never past the space's total capacity"""
        released = Space.available_seats + seats
        return (
            db.query(Space)
            .filter(Space.id == space_id)
            .update(
                {Space.available_seats: case((released > Space.total_seats, Space.total_seats), else_=released)},
                synchronize_session=False,
            )
        )
