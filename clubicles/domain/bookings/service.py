"""Booking service - checkout, owner booking management and redemption"""

import json
import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...email_service import send_booking_confirmation
from ...models import SpaceOwner, User
from ...models_booking import Booking, BookingPayment, BookingTax, Space
from ...security_utils import generate_redemption_code
from ...vibgyor import DEFAULT_PROFESSIONAL_ROLE, role_to_category
from ..finance.repository import BalanceRepository
from ..taxes.calculator import PLATFORM_FEE_NAME, apportion, calculate_taxes
from ..taxes.repository import TaxConfigurationRepository
from .repository import BookingRepository
from .schemas import BookingCheckoutData, BookingDateRequest

logger = logging.getLogger(__name__)

OWNER_ACTIONS = {"confirm": "confirmed", "cancel": "cancelled"}
AMOUNT_TOLERANCE = 0.01


def booking_hours(start_time: str, end_time: str) -> float:
    start_h, start_m = (int(part) for part in start_time.split(":"))
    end_h, end_m = (int(part) for part in end_time.split(":"))
    return ((end_h * 60 + end_m) - (start_h * 60 + start_m)) / 60


def date_amount(space: Space, item: BookingDateRequest) -> float:
    """Price of one booked date: hourly rate x seats x hours (min 1), or daily rate x seats"""
    if item.booking_type == "hourly":
        hours = booking_hours(item.start_time, item.end_time)
        if hours <= 0:
            raise HTTPException(status_code=400, detail="End time must be after start time")
        rate = space.price_per_hour or 0
        if rate <= 0:
            raise HTTPException(status_code=400, detail="This space does not offer hourly bookings")
        return round(rate * item.seats * max(1.0, hours), 2)

    rate = space.price_per_day or 0
    if rate <= 0:
        raise HTTPException(status_code=400, detail="This space does not offer daily bookings")
    return round(rate * item.seats, 2)


def serialize_booking_for_user(booking: Booking) -> dict:
    space = booking.space
    return {
        "id": booking.id,
        "date": booking.date.isoformat(),
        "start_time": booking.start_time,
        "end_time": booking.end_time,
        "booking_type": booking.booking_type,
        "seats_booked": booking.seats_booked,
        "total_amount": booking.total_amount,
        "tax_amount": booking.tax_amount,
        "status": booking.status,
        "redemption_code": booking.redemption_code,
        "qr_code_data": booking.qr_code_data,
        "is_redeemed": booking.is_redeemed,
        "redeemed_at": booking.redeemed_at,
        "created_at": booking.created_at,
        "space": {
            "id": space.id,
            "name": space.name,
            "address": space.address,
            "city": space.city,
            "images": space.images or [],
        }
        if space
        else None,
    }


def serialize_booking_for_owner(booking: Booking) -> dict:
    user = booking.user
    return {
        "id": booking.id,
        "space_id": booking.space_id,
        "space_name": booking.space.name if booking.space else None,
        "customer_name": f"{user.first_name or ''} {user.last_name or ''}".strip() if user else None,
        "customer_email": user.email if user else None,
        "customer_phone": user.phone if user else None,
        "date": booking.date.isoformat(),
        "start_time": booking.start_time,
        "end_time": booking.end_time,
        "seats_booked": booking.seats_booked,
        "base_amount": booking.base_amount,
        "total_amount": booking.total_amount,
        "tax_amount": booking.tax_amount,
        "owner_payout": booking.owner_payout,
        "platform_commission": booking.platform_commission,
        "status": booking.status,
        "redemption_code": booking.redemption_code,
        "is_redeemed": booking.is_redeemed,
        "redeemed_at": booking.redeemed_at,
        "roles": booking.roles or [],
        "created_at": booking.created_at,
    }


class BookingService:
    """Service for booking operations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()
        self.tax_repo = TaxConfigurationRepository()
        self.balance_repo = BalanceRepository()

    # ------------------------------------------------------------------
    # Member side
    # ------------------------------------------------------------------

    def list_user_bookings(self, user: User, status: Optional[str] = None) -> list[dict]:
        return [serialize_booking_for_user(b) for b in self.repo.get_user_bookings(self.db, user.id, status)]

    def get_user_booking(self, user: User, booking_id: int) -> dict:
        booking = self.repo.get_user_booking(self.db, user.id, booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return serialize_booking_for_user(booking)

    async def create_paid_bookings(
        self,
        user: User,
        checkout: BookingCheckoutData,
        order_id: str,
        payment_id: str,
        currency: str = "INR",
        paid_amount: Optional[float] = None,
    ) -> tuple[list[Booking], bool]:
        """
        Turn a verified checkout into one confirmed booking per date.

        Returns (bookings, already_processed). A payment id that already produced
        bookings returns those bookings unchanged. The paid amount has to equal the
        total computed from the space's rates.
        """
        existing = self.repo.get_by_payment_id(self.db, payment_id)
        if existing:
            logger.info(f"⚠️ Booking already exists for payment {payment_id}")
            return existing, True

        space = self.db.query(Space).filter(Space.id == checkout.space_id, Space.status == "active").first()
        if not space:
            raise HTTPException(status_code=404, detail="Space not found")

        total_seats = sum(item.seats for item in checkout.dates)
        if space.available_seats < total_seats:
            raise HTTPException(
                status_code=400,
                detail=f"Not enough seats available. Only {space.available_seats} seats remaining.",
            )

        amounts = [date_amount(space, item) for item in checkout.dates]
        grand_total = round(sum(amounts), 2)
        if paid_amount is None or abs(round(paid_amount, 2) - grand_total) > AMOUNT_TOLERANCE:
            logger.warning(f"⚠️ Payment {payment_id} amount {paid_amount} != booking total {grand_total}")
            raise HTTPException(status_code=400, detail="Payment amount does not match the booking total")

        owner = space.business.space_owner if space.business else None
        premium = bool(owner and owner.premium_payments_enabled)
        breakdown = calculate_taxes(grand_total, self.tax_repo.get_enabled(self.db), premium)

        try:
            if self.repo.reserve_seats(self.db, space.id, total_seats) == 0:
                raise HTTPException(status_code=400, detail="Not enough seats available")

            now = datetime.utcnow()
            bookings = []
            ledger = {"payout": 0.0, "commission": 0.0, "tax": 0.0}

            for item, amount in zip(checkout.dates, amounts):
                lines = [
                    (line, apportion(line.amount, amount, grand_total)) for line in breakdown.lines
                ]
                tax_amount = round(sum(share for _, share in lines), 2)
                commission = round(sum(share for line, share in lines if line.name == PLATFORM_FEE_NAME), 2)
                owner_payout = round(amount - tax_amount, 2)

                booking = Booking(
                    user_id=user.id,
                    space_id=space.id,
                    date=item.date,
                    start_time=item.start_time,
                    end_time=item.end_time,
                    booking_type=item.booking_type,
                    seats_booked=item.seats,
                    base_amount=amount,
                    tax_amount=tax_amount,
                    total_amount=amount,
                    owner_payout=owner_payout,
                    platform_commission=commission,
                    status="confirmed",
                    payment_id=payment_id,
                    redemption_code=generate_redemption_code(),
                    roles=[item.professional_role or user.professional_role or DEFAULT_PROFESSIONAL_ROLE],
                )
                self.db.add(booking)
                self.db.flush()

                booking.qr_code_data = json.dumps(
                    {
                        "booking_id": booking.id,
                        "redemption_code": booking.redemption_code,
                        "space_id": space.id,
                        "date": item.date.isoformat(),
                    }
                )
                for line, share in lines:
                    self.db.add(
                        BookingTax(
                            booking_id=booking.id,
                            tax_configuration_id=line.tax_configuration_id,
                            tax_name=line.name,
                            tax_percentage=line.rate,
                            tax_amount=share,
                        )
                    )
                self.db.add(
                    BookingPayment(
                        booking_id=booking.id,
                        amount=amount,
                        currency=currency,
                        payment_method="razorpay",
                        transaction_id=payment_id,
                        gateway_order_id=order_id,
                        status="completed",
                        payment_date=now,
                    )
                )

                ledger["payout"] += owner_payout
                ledger["commission"] += commission
                ledger["tax"] += tax_amount
                bookings.append(booking)

            self.balance_repo.apply_deltas(
                self.db,
                space.business_id,
                current_balance=round(ledger["payout"], 2),
                total_earned=round(ledger["payout"], 2),
                pending_amount=round(ledger["payout"], 2),
                commission_deducted=round(ledger["commission"], 2),
                tax_deducted=round(ledger["tax"], 2),
            )
            self.db.commit()
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create bookings for payment {payment_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create booking") from e

        for booking in bookings:
            self.db.refresh(booking)
        logger.info(
            f"✅ Created {len(bookings)} booking(s) for payment {payment_id}, space {space.id}, "
            f"reserved {total_seats} seat(s)"
        )

        try:
            await send_booking_confirmation(
                to=user.email,
                customer_name=user.first_name or "there",
                space_name=space.name,
                space_address=f"{space.address}, {space.city}",
                bookings=[
                    {
                        "date": b.date.isoformat(),
                        "start_time": b.start_time,
                        "end_time": b.end_time,
                        "seats": b.seats_booked,
                        "redemption_code": b.redemption_code,
                    }
                    for b in bookings
                ],
                total_amount=grand_total,
            )
        except Exception as e:
            logger.warning(f"⚠️ Booking confirmation email failed for {user.email}: {e}")

        return bookings, False

    # ------------------------------------------------------------------
    # Owner side
    # ------------------------------------------------------------------

    def list_owner_bookings(self, owner: SpaceOwner, status: Optional[str] = None) -> list[dict]:
        return [serialize_booking_for_owner(b) for b in self.repo.get_owner_bookings(self.db, owner.id, status)]

    def update_booking_status(self, owner: SpaceOwner, booking_id: int, action: str) -> Booking:
        booking = self.repo.get_owner_booking(self.db, owner.id, booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")

        new_status = OWNER_ACTIONS.get(action)
        if not new_status:
            raise HTTPException(status_code=400, detail="Invalid action")
        if booking.is_redeemed or booking.status == "completed":
            raise HTTPException(status_code=400, detail="Completed bookings cannot be changed")
        if booking.status == "cancelled":
            raise HTTPException(status_code=400, detail="Cancelled bookings cannot be changed")

        previous_status = booking.status
        try:
            booking.status = new_status
            if action == "cancel" and previous_status == "confirmed":
                self.repo.release_seats(self.db, booking.space_id, booking.seats_booked)
                self.reverse_earnings(booking)
            self.db.commit()
            self.db.refresh(booking)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating booking {booking_id} status: {e}")
            raise HTTPException(status_code=500, detail="Failed to update booking status") from e

        logger.info(f"✅ Booking {booking.id} status updated: {previous_status} -> {booking.status}")
        return booking

    def reverse_earnings(self, booking: Booking) -> None:
        """Take a cancelled booking's amounts back out of the business ledger"""
        payout = booking.owner_payout or 0.0
        self.balance_repo.apply_deltas(
            self.db,
            booking.space.business_id,
            current_balance=-payout,
            total_earned=-payout,
            pending_amount=-payout,
            commission_deducted=-(booking.platform_commission or 0.0),
            tax_deducted=-(booking.tax_amount or 0.0),
        )
        logger.info(f"↩️ Reversed {payout} from business {booking.space.business_id} for booking {booking.id}")

    def redeem_booking(self, owner: SpaceOwner, redemption_code: str) -> Booking:
        code = redemption_code.strip().upper()
        booking = self.repo.get_owner_booking_by_code(self.db, owner.id, code)
        if not booking:
            raise HTTPException(status_code=404, detail="Invalid redemption code")
        if booking.is_redeemed:
            raise HTTPException(status_code=400, detail="Booking has already been redeemed")
        if booking.status != "confirmed":
            raise HTTPException(status_code=400, detail="Booking is not confirmed")

        try:
            updated = self.repo.mark_redeemed(self.db, booking.id, owner.id)
            if updated == 0:
                self.db.rollback()
                raise HTTPException(status_code=400, detail="Booking has already been redeemed")
            self.db.commit()
        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error redeeming booking {booking.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to redeem booking") from e

        logger.info(f"✅ Booking {booking.id} redeemed by owner {owner.id}")

        roles = booking.roles or []
        role = roles[0] if roles else DEFAULT_PROFESSIONAL_ROLE
        category = role_to_category(role)
        if category:
            try:
                self.repo.increment_vibgyor(self.db, booking.space_id, category)
                self.db.commit()
                logger.info(f"🌈 VIBGYOR {category} incremented for space {booking.space_id}")
            except Exception as e:
                self.db.rollback()
                logger.warning(f"⚠️ VIBGYOR update failed for space {booking.space_id}: {e}")
        else:
            logger.warning(f"⚠️ Unknown professional role '{role}' on booking {booking.id}")

        self.db.refresh(booking)
        return booking
