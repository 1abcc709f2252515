"""Payment service - gateway orders, payment verification and premium subscriptions"""

import logging
import time
from datetime import datetime
from typing import Any

import httpx
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import (
    ENVIRONMENT,
    PREMIUM_MONTHLY_PRICE,
    PREMIUM_YEARLY_PRICE,
    RAZORPAY_API_URL,
    RAZORPAY_KEY_ID,
    RAZORPAY_KEY_SECRET,
)
from ...models import SpaceOwner, SpaceOwnerPaymentHistory, SpaceOwnerSubscription, User
from ...payment_security import MOCK_ORDER_PREFIX, require_valid_payment
from ..bookings.schemas import BookingResponse
from ..bookings.service import BookingService
from .schemas import ProcessPaymentRequest, VerifyPaymentRequest

logger = logging.getLogger(__name__)

RECEIPT_MAX_LENGTH = 40
PLAN_PRICES = {"monthly": PREMIUM_MONTHLY_PRICE, "yearly": PREMIUM_YEARLY_PRICE}


def gateway_configured() -> bool:
    return bool(RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET)


def subscription_expiry(start: datetime, billing_cycle: str) -> datetime:
    """One calendar month or one year after start"""
    if billing_cycle == "yearly":
        try:
            return start.replace(year=start.year + 1)
        except ValueError:
            # 29 February
            return start.replace(year=start.year + 1, day=28)

    month = start.month + 1
    year = start.year + (1 if month > 12 else 0)
    month = month if month <= 12 else 1
    day = start.day
    while True:
        try:
            return start.replace(year=year, month=month, day=day)
        except ValueError:
            day -= 1


class PaymentService:
    """Service for payment operations"""

    def __init__(self, db: Session):
        self.db = db
        self.bookings = BookingService(db)

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    async def create_order(self, data: ProcessPaymentRequest, user: User) -> dict[str, Any]:
        if data.amount <= 0:
            raise HTTPException(status_code=400, detail="Invalid amount")
        if data.type == "subscription" and (not data.plan or not data.billing_cycle):
            raise HTTPException(
                status_code=400, detail="Plan and billing cycle required for subscription payments"
            )
        if data.type == "booking" and not data.space_id:
            raise HTTPException(status_code=400, detail="Space ID required for booking payments")
        if data.type == "subscription" and round(data.amount, 2) < PLAN_PRICES[data.billing_cycle]:
            raise HTTPException(status_code=400, detail="Amount does not match the plan price")

        stamp = int(time.time() * 1000)
        if data.type == "subscription":
            receipt = f"sub_{data.plan}_{data.billing_cycle}_{stamp}"
        else:
            receipt = f"booking_{data.space_id}_{stamp}"
        receipt = receipt[:RECEIPT_MAX_LENGTH]
        amount_paise = int(round(data.amount * 100))

        if not gateway_configured():
            if ENVIRONMENT == "development":
                logger.info("🔧 Development mode: creating mock order (Razorpay not configured)")
                return {
                    "success": True,
                    "order_id": f"{MOCK_ORDER_PREFIX}{stamp}",
                    "amount": amount_paise,
                    "currency": data.currency,
                    "key": "mock_key",
                    "type": data.type,
                    "receipt": receipt,
                    "is_mock": True,
                }
            logger.error("❌ Razorpay credentials not configured")
            raise HTTPException(status_code=500, detail="Payment gateway not configured")

        order_payload = {
            "amount": amount_paise,
            "currency": data.currency,
            "receipt": receipt,
            "notes": {
                "type": data.type,
                "plan": data.plan or "",
                "billing_cycle": data.billing_cycle or "",
                "space_id": str(data.space_id or ""),
                "user_id": str(user.id),
            },
        }

        try:
            async with httpx.AsyncClient(timeout=30.0) as http_client:
                response = await http_client.post(
                    f"{RAZORPAY_API_URL}/orders",
                    json=order_payload,
                    auth=(RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET),
                )
        except httpx.HTTPError as e:
            logger.error(f"❌ Razorpay order request failed: {e}")
            raise HTTPException(status_code=502, detail="Payment gateway unavailable") from e

        if response.status_code not in [200, 201]:
            logger.error(f"❌ Razorpay order creation failed: {response.status_code} {response.text}")
            raise HTTPException(status_code=502, detail="Failed to create payment order")

        order = response.json()
        logger.info(f"✅ Order created successfully: {order.get('id')}")
        return {
            "success": True,
            "order_id": order.get("id"),
            "amount": order.get("amount", amount_paise),
            "currency": order.get("currency", data.currency),
            "key": RAZORPAY_KEY_ID,
            "type": data.type,
            "receipt": receipt,
            "is_mock": False,
        }

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    async def verify_payment(self, data: VerifyPaymentRequest, user: User) -> dict[str, Any]:
        require_valid_payment(data.razorpay_order_id, data.razorpay_payment_id, data.razorpay_signature)

        if data.booking_data:
            bookings, already_processed = await self.bookings.create_paid_bookings(
                user,
                data.booking_data,
                order_id=data.razorpay_order_id,
                payment_id=data.razorpay_payment_id,
                currency=data.currency,
                paid_amount=data.amount,
            )
            return {
                "success": True,
                "message": "Booking already processed" if already_processed else "Booking confirmed",
                "bookings": [BookingResponse.model_validate(b).model_dump() for b in bookings],
                "total_amount": round(sum(b.total_amount for b in bookings), 2),
            }

        return self.activate_subscription(data, user)

    def activate_subscription(self, data: VerifyPaymentRequest, user: User) -> dict[str, Any]:
        owner = self.db.query(SpaceOwner).filter(SpaceOwner.user_id == user.id).first()
        if not owner:
            raise HTTPException(status_code=404, detail="Space owner not found")

        duplicate = (
            self.db.query(SpaceOwnerPaymentHistory)
            .filter(SpaceOwnerPaymentHistory.transaction_id == data.razorpay_payment_id)
            .first()
        )
        if duplicate:
            logger.info(f"⚠️ Subscription payment {data.razorpay_payment_id} already processed")
            return {
                "success": True,
                "message": "Payment already processed",
                "subscription": self._subscription_dict(owner.subscription),
            }

        plan = data.plan or "premium"
        billing_cycle = data.billing_cycle or "monthly"
        price = PLAN_PRICES[billing_cycle]
        if data.amount is None or round(data.amount, 2) < price:
            logger.warning(
                f"⚠️ Subscription payment {data.razorpay_payment_id} underpaid: {data.amount} < {price}"
            )
            raise HTTPException(status_code=400, detail="Payment amount does not match the plan price")
        now = datetime.utcnow()
        expiry = subscription_expiry(now, billing_cycle)

        try:
            owner.premium_plan = plan
            owner.plan_expiry_date = expiry

            subscription = owner.subscription
            if subscription:
                subscription.plan_name = plan
                subscription.billing_cycle = billing_cycle
                subscription.status = "active"
                subscription.start_date = now
                subscription.expiry_date = expiry
                subscription.auto_renew = True
            else:
                subscription = SpaceOwnerSubscription(
                    space_owner_id=owner.id,
                    plan_name=plan,
                    billing_cycle=billing_cycle,
                    status="active",
                    start_date=now,
                    expiry_date=expiry,
                    auto_renew=True,
                )
                self.db.add(subscription)
            self.db.flush()

            payment = SpaceOwnerPaymentHistory(
                space_owner_id=owner.id,
                subscription_id=subscription.id,
                amount=round(data.amount, 2),
                currency=data.currency,
                payment_method="razorpay",
                transaction_id=data.razorpay_payment_id,
                gateway_order_id=data.razorpay_order_id,
                gateway_signature=data.razorpay_signature or None,
                status="completed",
                payment_date=now,
                description=f"{plan} {billing_cycle} subscription",
            )
            self.db.add(payment)
            self.db.commit()
            self.db.refresh(subscription)
            self.db.refresh(payment)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to activate subscription for owner {owner.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to activate subscription") from e

        logger.info(f"💎 Owner {owner.id} upgraded to {plan} ({billing_cycle}) until {expiry.date()}")
        return {
            "success": True,
            "message": "Subscription activated",
            "subscription": self._subscription_dict(subscription),
            "payment": {
                "id": payment.id,
                "amount": payment.amount,
                "currency": payment.currency,
                "transaction_id": payment.transaction_id,
                "status": payment.status,
            },
        }

    @staticmethod
    def _subscription_dict(subscription) -> dict[str, Any]:
        if not subscription:
            return None
        return {
            "id": subscription.id,
            "plan": subscription.plan_name,
            "billing_cycle": subscription.billing_cycle,
            "status": subscription.status,
            "start_date": subscription.start_date,
            "expiry_date": subscription.expiry_date,
            "auto_renew": subscription.auto_renew,
        }

    def payment_history(self, owner: SpaceOwner) -> list[SpaceOwnerPaymentHistory]:
        return (
            self.db.query(SpaceOwnerPaymentHistory)
            .filter(SpaceOwnerPaymentHistory.space_owner_id == owner.id)
            .order_by(SpaceOwnerPaymentHistory.payment_date.desc(), SpaceOwnerPaymentHistory.id.desc())
            .all()
        )
