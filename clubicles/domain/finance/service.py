"""Finance service - owner analytics, revenue, balances and payout requests"""

import logging
from datetime import datetime
from typing import Any

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import SpaceOwner, SpaceOwnerBusinessInfo
from ...models_booking import Booking, Space
from ...vibgyor import VIBGYOR_KEYS, summarize_counts
from ..bookings.repository import BookingRepository
from ..owners.repository import OwnerRepository
from ..owners.schemas import PaymentInfoPayload
from ..owners.service import serialize_payment_info
from ..taxes.repository import TaxConfigurationRepository
from . import metrics
from .repository import BalanceRepository, PayoutRepository
from .schemas import BalanceResponse, PayoutResponse, SpaceOwnerPayoutResponse

logger = logging.getLogger(__name__)

INACTIVE_BOOKING_STATUSES = ("cancelled",)


class FinanceService:
    """Service for owner finance operations"""

    def __init__(self, db: Session):
        self.db = db
        self.booking_repo = BookingRepository()
        self.balance_repo = BalanceRepository()
        self.payout_repo = PayoutRepository()
        self.tax_repo = TaxConfigurationRepository()
        self.owner_repo = OwnerRepository()

    def _business(self, owner: SpaceOwner) -> SpaceOwnerBusinessInfo:
        if not owner.business_info:
            raise HTTPException(status_code=404, detail="Business info not found")
        return owner.business_info

    def _bookings(self, owner: SpaceOwner) -> list[Booking]:
        return (
            self.booking_repo.owner_bookings_query(self.db, owner.id)
            .options(joinedload(Booking.user), joinedload(Booking.space))
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .all()
        )

    def _balance_dict(self, business_id: int) -> dict[str, Any]:
        balance = self.balance_repo.get(self.db, business_id)
        if not balance:
            return BalanceResponse().model_dump()
        return BalanceResponse.model_validate(balance).model_dump()

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    def analytics(self, owner: SpaceOwner) -> dict[str, Any]:
        business = self._business(owner)
        today = datetime.utcnow().date()

        bookings = self._bookings(owner)
        completed = [b for b in bookings if b.status == "completed"]
        active = [b for b in bookings if b.status not in INACTIVE_BOOKING_STATUSES]
        taxes = metrics.tax_summary(completed, self.tax_repo.get_enabled(self.db), owner.premium_payments_enabled)

        completed_payouts = self.payout_repo.sum_business_payouts(self.db, business.id, "completed")
        balance = self.balance_repo.get(self.db, business.id)
        current_balance = round(balance.current_balance, 2) if balance else 0.0
        if completed_payouts == 0 and taxes["total_revenue"] > 0 and current_balance <= 0:
            # Ledger not populated yet: fall back to revenue after taxes and fees
            current_balance = taxes["owner_payout"]

        spaces = self.db.query(Space).filter(Space.business_id == business.id).all()
        total_capacity = sum(space.total_seats or 0 for space in spaces)
        vibgyor_counts = {key: sum(int(getattr(space, key) or 0) for space in spaces) for key in VIBGYOR_KEYS}

        return {
            "total_revenue": taxes["total_revenue"],
            "total_tax_collected": taxes["total_tax"],
            "total_platform_commission": taxes["platform_commission"],
            "net_earnings": taxes["owner_payout"],
            "total_payouts": completed_payouts,
            "current_balance": current_balance,
            "total_bookings": len(bookings),
            "completed_bookings": len(completed),
            "monthly_revenue": metrics.monthly_revenue(completed, today),
            "booking_trends": metrics.booking_patterns(active, today),
            "revenue_growth": metrics.revenue_growth(completed, today),
            "occupancy_rate": metrics.occupancy_rate(active, total_capacity),
            "average_booking_duration": metrics.average_duration(active),
            "peak_hours": metrics.peak_hours(active),
            "total_capacity": total_capacity,
            "spaces_count": len(spaces),
            "tax_breakdown": taxes["breakdown"],
            "vibgyor": summarize_counts(vibgyor_counts),
        }

    # ------------------------------------------------------------------
    # Revenue
    # ------------------------------------------------------------------

    def revenue(self, owner: SpaceOwner) -> dict[str, Any]:
        business = self._business(owner)
        today = datetime.utcnow().date()

        bookings = self._bookings(owner)
        completed = [b for b in bookings if b.status == "completed" and b.is_redeemed]
        taxes = metrics.tax_summary(completed, self.tax_repo.get_enabled(self.db), owner.premium_payments_enabled)

        completed_payouts = self.payout_repo.sum_business_payouts(self.db, business.id, "completed")
        paid_by_admin = self.payout_repo.sum_space_owner_payouts(self.db, owner.id)
        self._sync_pending_payout(
            business.id, round(taxes["owner_payout"] - completed_payouts - paid_by_admin, 2)
        )
        pending_payouts = self.payout_repo.sum_business_payouts(self.db, business.id, "pending")

        growth = metrics.revenue_growth(completed, today)
        payout_date = metrics.next_payout_date(today)
        average_payout = round(taxes["owner_payout"] / len(completed), 2) if completed else 0.0
        this_year = [b for b in bookings if b.created_at and b.created_at.year == today.year]

        return {
            "financial_overview": {
                "last_updated": datetime.utcnow(),
                "total_revenue": {
                    "amount": taxes["total_revenue"],
                    "growth": growth,
                    "growth_text": f"{'+' if growth >= 0 else ''}{growth}% from last month",
                },
                "tax_deducted": {
                    "amount": taxes["total_tax"],
                    "effective_rate": taxes["effective_rate"],
                    "effective_rate_text": f"{taxes['effective_rate']}% effective rate",
                },
                "net_profit": {"amount": taxes["owner_payout"], "description": "After all taxes & fees"},
                "pending_payout": {
                    "amount": pending_payouts,
                    "next_payout_date": payout_date.isoformat(),
                    "next_payout_text": f"Will be paid on {payout_date.strftime('%d %b %Y')}",
                },
                "average_payout_per_booking": {"amount": average_payout, "description": "After taxes & fees"},
                "total_bookings": {"count": len(this_year), "period": "This year"},
            },
            "tax_breakdown": taxes["breakdown"],
            "total_tax_deducted": {
                "amount": taxes["total_tax"],
                "effective_rate": taxes["effective_rate"],
                "description": "All taxes combined",
            },
            "recent_bookings": [
                {
                    "id": b.id,
                    "booking_reference": b.redemption_code or f"#{b.id}",
                    "space_name": b.space.name if b.space else None,
                    "customer_name": f"{b.user.first_name or ''} {b.user.last_name or ''}".strip() if b.user else None,
                    "date": b.date.isoformat(),
                    "start_time": b.start_time,
                    "end_time": b.end_time,
                    "total_amount": b.total_amount,
                    "tax_amount": b.tax_amount,
                    "owner_payout": b.owner_payout,
                    "status": b.status,
                }
                for b in completed[:10]
            ],
            "summary": {
                "total_revenue": taxes["total_revenue"],
                "total_tax_collected": taxes["total_tax"],
                "total_platform_commission": taxes["platform_commission"],
                "total_owner_payout": taxes["owner_payout"],
                "net_profit": taxes["owner_payout"],
                "effective_tax_rate": taxes["effective_rate"],
                "total_payouts": completed_payouts,
                "pending_payouts": pending_payouts,
                "total_bookings": len(bookings),
                "completed_bookings": len(completed),
            },
        }

    def _sync_pending_payout(self, business_id: int, outstanding: float) -> None:
        """Keep a single pending payout row equal to earnings not yet paid out"""
        try:
            pending = self.payout_repo.latest_pending(self.db, business_id)
            if pending:
                if round(pending.amount, 2) != outstanding:
                    pending.amount = max(0.0, outstanding)
                    self.db.commit()
                    logger.info(f"💰 Pending payout updated for business {business_id}: ₹{pending.amount}")
            elif outstanding > 0:
                self.payout_repo.create_payout(
                    self.db,
                    business_id=business_id,
                    amount=outstanding,
                    status="pending",
                    payout_method="bank_transfer",
                    notes="Scheduled payout of earnings after taxes and fees",
                )
                self.db.commit()
                logger.info(f"💰 Pending payout created for business {business_id}: ₹{outstanding}")
        except Exception as e:
            self.db.rollback()
            logger.warning(f"⚠️ Could not update pending payout for business {business_id}: {e}")

    # ------------------------------------------------------------------
    # Balances & payouts
    # ------------------------------------------------------------------

    def financial(self, owner: SpaceOwner) -> dict[str, Any]:
        business = self._business(owner)
        return {
            "business_balance": self._balance_dict(business.id),
            "payouts": [
                PayoutResponse.model_validate(p).model_dump()
                for p in self.payout_repo.get_business_payouts(self.db, business.id, limit=10)
            ],
            "space_owner_payouts": [
                SpaceOwnerPayoutResponse.model_validate(p).model_dump()
                for p in self.payout_repo.get_space_owner_payouts(self.db, owner.id)[:10]
            ],
        }

    def payments_overview(self, owner: SpaceOwner) -> dict[str, Any]:
        business = owner.business_info
        total_earned = 0.0
        if business:
            total_earned = float(
                self.booking_repo.owner_bookings_query(self.db, owner.id)
                .with_entities(func.sum(Booking.owner_payout))
                .filter(Booking.status.in_(("confirmed", "completed")))
                .scalar()
                or 0
            )
        return {
            "payment_info": serialize_payment_info(owner.payment_info) if owner.payment_info else None,
            "premium_payments_enabled": owner.premium_payments_enabled,
            "business_balance": self._balance_dict(business.id) if business else BalanceResponse().model_dump(),
            "total_earned_from_bookings": round(total_earned, 2),
            "payouts": [
                PayoutResponse.model_validate(p).model_dump()
                for p in (self.payout_repo.get_business_payouts(self.db, business.id) if business else [])
            ],
        }

    def update_payment_info(self, owner: SpaceOwner, data: dict[str, Any]) -> dict[str, Any]:
        try:
            payload = PaymentInfoPayload(**data)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=e.errors()[0]["msg"]) from e

        try:
            payment_info = self.owner_repo.upsert_payment_info(self.db, owner, **payload.model_dump())
            self.db.commit()
            self.db.refresh(payment_info)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating payment info for owner {owner.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update payment information") from e

        logger.info(f"🏦 Payment info updated for owner {owner.id}")
        return serialize_payment_info(payment_info)

    def request_payout(self, owner: SpaceOwner, data: dict[str, Any]) -> dict[str, Any]:
        business = self._business(owner)
        try:
            amount = float(data.get("amount") or 0)
        except (TypeError, ValueError) as e:
            raise HTTPException(status_code=400, detail="Invalid payout amount") from e
        if amount <= 0:
            raise HTTPException(status_code=400, detail="Invalid payout amount")

        balance = self.balance_repo.get(self.db, business.id)
        if amount > self.balance_repo.available_for_payout(balance):
            raise HTTPException(status_code=400, detail="Insufficient balance for payout")

        payment_info = owner.payment_info
        method = "bank_transfer"
        if payment_info and payment_info.upi_id and not payment_info.bank_account_number:
            method = "upi"

        try:
            payout = self.payout_repo.create_payout(
                self.db,
                business_id=business.id,
                amount=amount,
                status="processing",
                payout_method=method,
                notes=data.get("notes") or "Payout requested by owner",
            )
            if self.balance_repo.withdraw(self.db, business.id, amount) == 0:
                raise HTTPException(status_code=400, detail="Insufficient balance for payout")
            balance.last_payout_date = datetime.utcnow()
            self.db.commit()
            self.db.refresh(payout)
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error requesting payout for business {business.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to request payout") from e

        logger.info(f"💰 Payout of ₹{amount} requested by owner {owner.id}")
        return PayoutResponse.model_validate(payout).model_dump()
