"""Owner service - onboarding profile, plan status and the owner dashboard"""

import logging
import math
from datetime import datetime
from typing import Any

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from ...config import BASIC_PLAN_MAX_SPACES
from ...models import SpaceOwner, SpaceOwnerPaymentInfo
from ...models_booking import Booking
from ...security_utils import mask_sensitive_data
from ..bookings.repository import BookingRepository
from ..bookings.service import serialize_booking_for_owner
from ..finance.repository import BalanceRepository
from .repository import OwnerRepository
from .schemas import BusinessInfoPayload, BusinessInfoResponse, PaymentInfoPayload, PaymentInfoResponse

logger = logging.getLogger(__name__)


def serialize_payment_info(payment_info: SpaceOwnerPaymentInfo) -> dict[str, Any]:
    return PaymentInfoResponse(
        id=payment_info.id,
        bank_account_number=mask_sensitive_data(payment_info.bank_account_number),
        bank_ifsc_code=payment_info.bank_ifsc_code,
        bank_account_holder_name=payment_info.bank_account_holder_name,
        bank_name=payment_info.bank_name,
        upi_id=payment_info.upi_id,
    ).model_dump()


def plan_features(plan: str) -> dict[str, Any]:
    premium = plan == "premium"
    return {
        "max_spaces": None if premium else BASIC_PLAN_MAX_SPACES,  # None = unlimited
        "premium_payments": premium,
        "analytics": "advanced" if premium else "basic",
        "priority_support": premium,
    }


class OwnerService:
    """Service for space owner profile operations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = OwnerRepository()
        self.booking_repo = BookingRepository()
        self.balance_repo = BalanceRepository()

    def approval_status(self, owner: SpaceOwner) -> dict[str, Any]:
        business = owner.business_info
        return {
            "approval_status": owner.approval_status,
            "onboarding_completed": owner.onboarding_completed,
            "rejection_reason": owner.rejection_reason,
            "verification_status": business.verification_status if business else None,
            "has_business_info": business is not None,
            "has_payment_info": owner.payment_info is not None,
        }

    # ------------------------------------------------------------------
    # Business info
    # ------------------------------------------------------------------

    def get_business_info(self, owner: SpaceOwner) -> dict[str, Any]:
        if not owner.business_info:
            raise HTTPException(status_code=404, detail="Business info not found")
        return BusinessInfoResponse.model_validate(owner.business_info).model_dump()

    def update_business_info(self, owner: SpaceOwner, data: BusinessInfoPayload) -> dict[str, Any]:
        """Upsert the business profile and send it back for verification"""
        try:
            business = self.repo.upsert_business_info(
                self.db,
                owner,
                **data.model_dump(),
                verification_status="pending",
                rejection_reason=None,
            )
            owner.onboarding_completed = True
            self.db.commit()
            self.db.refresh(business)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error saving business info for owner {owner.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to save business info") from e

        logger.info(f"🏢 Business info saved for owner {owner.id}: {business.business_name}")
        return BusinessInfoResponse.model_validate(business).model_dump()

    # ------------------------------------------------------------------
    # Payment settings
    # ------------------------------------------------------------------

    def get_payment_settings(self, owner: SpaceOwner) -> dict[str, Any]:
        return {
            "payment_info": serialize_payment_info(owner.payment_info) if owner.payment_info else None,
            "premium_payments_enabled": owner.premium_payments_enabled,
        }

    def update_payment_settings(self, owner: SpaceOwner, data: PaymentInfoPayload) -> dict[str, Any]:
        if not (data.bank_account_number or data.upi_id):
            raise HTTPException(status_code=400, detail="Provide a bank account or a UPI ID")
        if data.bank_account_number and not data.bank_ifsc_code:
            raise HTTPException(status_code=400, detail="IFSC code is required for bank transfers")

        try:
            payment_info = self.repo.upsert_payment_info(self.db, owner, **data.model_dump())
            self.db.commit()
            self.db.refresh(payment_info)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error saving payment info for owner {owner.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to save payment settings") from e

        logger.info(f"🏦 Payment settings updated for owner {owner.id}")
        return serialize_payment_info(payment_info)

    # ------------------------------------------------------------------
    # Premium payments flag
    # ------------------------------------------------------------------

    def set_premium_payments(self, owner: SpaceOwner, enabled: Any) -> bool:
        if not isinstance(enabled, bool):
            raise HTTPException(status_code=400, detail="enabled must be a boolean")
        try:
            owner.premium_payments_enabled = enabled
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error toggling premium payments for owner {owner.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update premium payments") from e

        logger.info(f"💎 Premium payments {'enabled' if enabled else 'disabled'} for owner {owner.id}")
        return owner.premium_payments_enabled

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscription_status(self, owner: SpaceOwner) -> dict[str, Any]:
        subscription = owner.subscription
        plan = owner.premium_plan or "basic"
        now = datetime.utcnow()

        is_expired = False
        days_until_expiry = None
        if subscription and subscription.expiry_date:
            is_expired = subscription.expiry_date < now
            days_until_expiry = math.ceil((subscription.expiry_date - now).total_seconds() / 86400)

        return {
            "current_plan": plan,
            "subscription": {
                "id": subscription.id,
                "plan_name": subscription.plan_name,
                "billing_cycle": subscription.billing_cycle,
                "status": subscription.status,
                "start_date": subscription.start_date,
                "expiry_date": subscription.expiry_date,
                "auto_renew": subscription.auto_renew,
            }
            if subscription
            else None,
            "plan_expiry_date": owner.plan_expiry_date,
            "is_expired": is_expired,
            "days_until_expiry": days_until_expiry,
            "can_upgrade": plan == "basic",
            "features": plan_features(plan),
            "payment_history": [
                {
                    "id": payment.id,
                    "amount": payment.amount,
                    "currency": payment.currency,
                    "status": payment.status,
                    "description": payment.description,
                    "payment_date": payment.payment_date,
                }
                for payment in self.repo.recent_subscription_payments(self.db, owner.id)
            ],
        }

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def dashboard(self, owner: SpaceOwner) -> dict[str, Any]:
        business = owner.business_info
        bookings_query = self.booking_repo.owner_bookings_query(self.db, owner.id)

        status_counts = dict(
            bookings_query.with_entities(Booking.status, func.count(Booking.id)).group_by(Booking.status).all()
        )
        completed_revenue = (
            bookings_query.with_entities(func.sum(Booking.total_amount))
            .filter(Booking.status == "completed")
            .scalar()
            or 0
        )
        recent = (
            bookings_query.order_by(Booking.created_at.desc(), Booking.id.desc()).limit(5).all()
        )
        balance = self.balance_repo.get(self.db, business.id) if business else None

        return {
            "owner": {
                "id": owner.id,
                "email": owner.email,
                "first_name": owner.first_name,
                "last_name": owner.last_name,
                "premium_plan": owner.premium_plan,
                "approval_status": owner.approval_status,
                "is_verified": owner.approval_status == "approved",
            },
            "business_info": BusinessInfoResponse.model_validate(business).model_dump() if business else None,
            "stats": {
                "total_spaces": self.repo.count_spaces(self.db, business.id) if business else 0,
                "total_bookings": sum(status_counts.values()),
                "pending_bookings": status_counts.get("pending", 0),
                "confirmed_bookings": status_counts.get("confirmed", 0),
                "completed_bookings": status_counts.get("completed", 0),
                "cancelled_bookings": status_counts.get("cancelled", 0),
                "total_revenue": round(float(completed_revenue), 2),
                "current_balance": round(balance.current_balance, 2) if balance else 0.0,
                "pending_amount": round(balance.pending_amount, 2) if balance else 0.0,
            },
            "recent_bookings": [serialize_booking_for_owner(b) for b in recent],
        }
