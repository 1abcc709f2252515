"""Admin service - platform oversight, verification, payouts and premium management"""

import logging
import time
from datetime import datetime, timedelta
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from ...email_service import send_payment_reminder, send_payout_notification, send_renewal_reminder
from ...models import SpaceOwner, SpaceOwnerBusinessInfo, User
from ...models_booking import Booking, Space
from ...models_support import SupportTicket
from ...schemas import UserResponse
from ...vibgyor import VIBGYOR_KEYS, summarize_counts
from ..bookings.service import serialize_booking_for_owner
from ..finance.metrics import monthly_revenue, revenue_growth, shift_month
from ..finance.repository import BalanceRepository, PayoutRepository
from ..finance.schemas import BalanceResponse, SpaceOwnerPayoutResponse
from ..owners.schemas import BusinessInfoResponse
from ..payments.service import subscription_expiry
from .schemas import PayoutCreate, PremiumAction, SpaceOwnerUpdate, VerificationUpdate

logger = logging.getLogger(__name__)

PREMIUM_ACTIONS = ("send_payment_reminder", "send_renewal_reminder", "update_premium_plan", "extend_subscription")
REVENUE_STATUSES = ("confirmed", "completed")


def owner_name(owner: SpaceOwner) -> str:
    return f"{owner.first_name or ''} {owner.last_name or ''}".strip() or owner.email


def serialize_owner(owner: SpaceOwner) -> dict[str, Any]:
    return {
        "id": owner.id,
        "user_id": owner.user_id,
        "email": owner.email,
        "first_name": owner.first_name,
        "last_name": owner.last_name,
        "phone": owner.phone,
        "premium_plan": owner.premium_plan,
        "plan_expiry_date": owner.plan_expiry_date,
        "premium_payments_enabled": owner.premium_payments_enabled,
        "approval_status": owner.approval_status,
        "rejection_reason": owner.rejection_reason,
        "onboarding_completed": owner.onboarding_completed,
        "is_active": owner.is_active,
        "created_at": owner.created_at,
    }


class AdminService:
    """Service for admin operations"""

    def __init__(self, db: Session):
        self.db = db
        self.balance_repo = BalanceRepository()
        self.payout_repo = PayoutRepository()

    def _owner(self, space_owner_id: int) -> SpaceOwner:
        owner = self.db.query(SpaceOwner).filter(SpaceOwner.id == space_owner_id).first()
        if not owner:
            raise HTTPException(status_code=404, detail="Space owner not found")
        return owner

    def _owner_revenue(self, owner_id: int) -> dict[str, Any]:
        total, tax, payout, commission, count = (
            self.db.query(
                func.sum(Booking.total_amount),
                func.sum(Booking.tax_amount),
                func.sum(Booking.owner_payout),
                func.sum(Booking.platform_commission),
                func.count(Booking.id),
            )
            .join(Space, Booking.space_id == Space.id)
            .join(SpaceOwnerBusinessInfo, Space.business_id == SpaceOwnerBusinessInfo.id)
            .filter(
                SpaceOwnerBusinessInfo.space_owner_id == owner_id,
                Booking.status.in_(REVENUE_STATUSES),
            )
            .one()
        )
        return {
            "total_revenue": round(float(total or 0), 2),
            "tax_amount": round(float(tax or 0), 2),
            "net_amount": round(float(payout or 0), 2),
            "platform_commission": round(float(commission or 0), 2),
            "bookings_count": count or 0,
        }

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def dashboard(self) -> dict[str, Any]:
        revenue, tax, commission = (
            self.db.query(
                func.sum(Booking.total_amount),
                func.sum(Booking.tax_amount),
                func.sum(Booking.platform_commission),
            )
            .filter(Booking.status.in_(REVENUE_STATUSES))
            .one()
        )
        booking_counts = dict(
            self.db.query(Booking.status, func.count(Booking.id)).group_by(Booking.status).all()
        )
        owner_counts = dict(
            self.db.query(SpaceOwner.approval_status, func.count(SpaceOwner.id))
            .group_by(SpaceOwner.approval_status)
            .all()
        )

        return {
            "total_users": self.db.query(func.count(User.id)).filter(User.role == "user").scalar() or 0,
            "total_space_owners": sum(owner_counts.values()),
            "approved_space_owners": owner_counts.get("approved", 0),
            "pending_space_owners": owner_counts.get("pending", 0),
            "premium_space_owners": self.db.query(func.count(SpaceOwner.id))
            .filter(SpaceOwner.premium_plan == "premium")
            .scalar()
            or 0,
            "pending_verifications": self.db.query(func.count(SpaceOwnerBusinessInfo.id))
            .filter(SpaceOwnerBusinessInfo.verification_status == "pending")
            .scalar()
            or 0,
            "total_spaces": self.db.query(func.count(Space.id)).scalar() or 0,
            "total_bookings": sum(booking_counts.values()),
            "bookings_by_status": booking_counts,
            "total_revenue": round(float(revenue or 0), 2),
            "total_tax_collected": round(float(tax or 0), 2),
            "platform_commission": round(float(commission or 0), 2),
            "open_support_tickets": self.db.query(func.count(SupportTicket.id))
            .filter(SupportTicket.status.in_(("open", "in_progress")))
            .scalar()
            or 0,
        }

    def analytics(self) -> dict[str, Any]:
        """
        Platform-wide analytics: booking revenue and platform commission (this month vs
        last), member growth, seat utilisation of active spaces, top cities and the
        combined VIBGYOR mix of everyone who has redeemed a booking.
        """
        today = datetime.utcnow().date()
        this_month, next_month, last_month = shift_month(today, 0), shift_month(today, 1), shift_month(today, -1)

        bookings = self.db.query(Booking).filter(Booking.status.in_(REVENUE_STATUSES)).all()

        def commission_between(start, end) -> float:
            return round(sum(float(b.platform_commission or 0) for b in bookings if start <= b.date < end), 2)

        monthly_commission = commission_between(this_month, next_month)
        previous_commission = commission_between(last_month, this_month)
        commission_growth = (
            round((monthly_commission - previous_commission) / previous_commission * 100, 1)
            if previous_commission > 0
            else 0.0
        )
        revenue_series = monthly_revenue(bookings, today)

        members = self.db.query(User).filter(User.role == "user").all()
        new_members = sum(1 for u in members if u.created_at and u.created_at.date() >= this_month)
        previous_members = sum(
            1 for u in members if u.created_at and last_month <= u.created_at.date() < this_month
        )
        member_growth = (
            round((new_members - previous_members) / previous_members * 100, 1) if previous_members > 0 else 0.0
        )
        roles = dict(
            self.db.query(User.professional_role, func.count(User.id))
            .filter(User.role == "user", User.professional_role.isnot(None))
            .group_by(User.professional_role)
            .all()
        )

        spaces = self.db.query(Space).filter(Space.status == "active").all()
        capacity = sum(s.total_seats or 0 for s in spaces)
        occupied = sum(max(0, (s.total_seats or 0) - (s.available_seats or 0)) for s in spaces)
        cities = (
            self.db.query(Space.city, func.count(Space.id))
            .filter(Space.status == "active")
            .group_by(Space.city)
            .order_by(func.count(Space.id).desc(), Space.city.asc())
            .limit(5)
            .all()
        )
        vibgyor = {key: sum(int(getattr(s, key) or 0) for s in spaces) for key in VIBGYOR_KEYS}

        return {
            "revenue": {
                "total": round(sum(float(b.total_amount or 0) for b in bookings), 2),
                "monthly": revenue_series[-1]["revenue"],
                "growth": revenue_growth(bookings, today),
                "monthly_trend": revenue_series,
            },
            "platform_revenue": {
                "total": round(sum(float(b.platform_commission or 0) for b in bookings), 2),
                "monthly": monthly_commission,
                "growth": commission_growth,
            },
            "users": {
                "total": len(members),
                "new_this_month": new_members,
                "growth": member_growth,
                "professional_roles": roles,
            },
            "spaces": {
                "total_active": len(spaces),
                "total_capacity": capacity,
                "utilization": round(occupied / capacity * 100, 1) if capacity else 0.0,
                "popular_cities": [{"name": city, "count": count} for city, count in cities],
            },
            "vibgyor": summarize_counts(vibgyor),
        }

    # ------------------------------------------------------------------
    # Spaces
    # ------------------------------------------------------------------

    def list_spaces(self, search: Optional[str] = None, status: Optional[str] = None) -> list[dict[str, Any]]:
        query = self.db.query(Space).options(joinedload(Space.business).joinedload(SpaceOwnerBusinessInfo.space_owner))
        if search:
            term = f"%{search.strip()}%"
            query = query.filter(or_(Space.name.ilike(term), Space.address.ilike(term), Space.city.ilike(term)))
        if status and status != "all":
            query = query.filter(Space.status == status)

        results = []
        for space in query.order_by(Space.created_at.desc(), Space.id.desc()):
            business = space.business
            owner = business.space_owner if business else None
            results.append(
                {
                    "id": space.id,
                    "name": space.name,
                    "description": space.description,
                    "address": space.address,
                    "city": space.city,
                    "pincode": space.pincode,
                    "total_seats": space.total_seats,
                    "available_seats": space.available_seats,
                    "price_per_hour": space.price_per_hour,
                    "price_per_day": space.price_per_day,
                    "amenities": space.amenities or [],
                    "images": space.images or [],
                    "status": space.status,
                    "created_at": space.created_at,
                    "owner_name": owner_name(owner) if owner else None,
                    "owner_email": owner.email if owner else None,
                    "owner_approval_status": owner.approval_status if owner else None,
                    "business_info": {
                        "business_name": business.business_name,
                        "business_type": business.business_type,
                        "gst_number": business.gst_number,
                        "pan_number": business.pan_number,
                    }
                    if business
                    else None,
                }
            )
        return results

    # ------------------------------------------------------------------
    # Business verification
    # ------------------------------------------------------------------

    def list_verifications(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        business_type: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        query = (
            self.db.query(SpaceOwnerBusinessInfo)
            .join(SpaceOwner, SpaceOwnerBusinessInfo.space_owner_id == SpaceOwner.id)
            .options(joinedload(SpaceOwnerBusinessInfo.space_owner))
        )
        if search:
            term = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    SpaceOwnerBusinessInfo.business_name.ilike(term),
                    SpaceOwnerBusinessInfo.gst_number.ilike(term),
                    SpaceOwnerBusinessInfo.pan_number.ilike(term),
                    SpaceOwner.email.ilike(term),
                )
            )
        if status and status != "all":
            query = query.filter(SpaceOwnerBusinessInfo.verification_status == status)
        if business_type and business_type != "all":
            query = query.filter(SpaceOwnerBusinessInfo.business_type == business_type)

        results = []
        for business in query.order_by(SpaceOwnerBusinessInfo.created_at.desc(), SpaceOwnerBusinessInfo.id.desc()):
            data = BusinessInfoResponse.model_validate(business).model_dump()
            data["verified_by"] = business.verified_by
            data["space_owner"] = serialize_owner(business.space_owner)
            data["spaces_count"] = len(business.spaces)
            results.append(data)
        return results

    def update_verification(self, admin: User, data: VerificationUpdate) -> dict[str, Any]:
        business = (
            self.db.query(SpaceOwnerBusinessInfo).filter(SpaceOwnerBusinessInfo.id == data.business_info_id).first()
        )
        if not business:
            raise HTTPException(status_code=404, detail="Business info not found")
        if data.verification_status == "rejected" and not data.rejection_reason:
            raise HTTPException(status_code=400, detail="Rejection reason is required")

        try:
            business.verification_status = data.verification_status
            if data.rejection_reason:
                business.rejection_reason = data.rejection_reason
            if data.verification_status == "verified":
                business.verified_at = datetime.utcnow()
                business.verified_by = data.verified_by or admin.email
                business.rejection_reason = None
            self.db.commit()
            self.db.refresh(business)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating verification {data.business_info_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update verification") from e

        logger.info(f"✅ Business {business.id} verification -> {business.verification_status} by admin {admin.id}")
        result = BusinessInfoResponse.model_validate(business).model_dump()
        result["verified_by"] = business.verified_by
        return result

    # ------------------------------------------------------------------
    # Space owners
    # ------------------------------------------------------------------

    def list_space_owners(
        self,
        search: Optional[str] = None,
        approval_status: Optional[str] = None,
        onboarding: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        query = self.db.query(SpaceOwner).options(joinedload(SpaceOwner.business_info))
        if search:
            term = f"%{search.strip()}%"
            query = query.filter(
                or_(SpaceOwner.first_name.ilike(term), SpaceOwner.last_name.ilike(term), SpaceOwner.email.ilike(term))
            )
        if approval_status and approval_status != "all":
            query = query.filter(SpaceOwner.approval_status == approval_status)
        if onboarding and onboarding != "all":
            query = query.filter(SpaceOwner.onboarding_completed.is_(onboarding == "completed"))

        results = []
        for owner in query.order_by(SpaceOwner.created_at.desc(), SpaceOwner.id.desc()):
            data = serialize_owner(owner)
            business = owner.business_info
            data["business_info"] = BusinessInfoResponse.model_validate(business).model_dump() if business else None
            data["revenue"] = self._owner_revenue(owner.id)
            balance = self.balance_repo.get(self.db, business.id) if business else None
            data["business_balance"] = (
                BalanceResponse.model_validate(balance).model_dump() if balance else BalanceResponse().model_dump()
            )
            data["spaces_count"] = len(business.spaces) if business else 0
            results.append(data)
        return results

    def update_space_owner(self, space_owner_id: int, data: SpaceOwnerUpdate) -> dict[str, Any]:
        owner = self._owner(space_owner_id)
        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        if not updates:
            raise HTTPException(status_code=400, detail="No changes provided")
        if updates.get("approval_status") == "rejected" and not updates.get("rejection_reason"):
            raise HTTPException(status_code=400, detail="Rejection reason is required")

        try:
            for key, value in updates.items():
                setattr(owner, key, value)
            if updates.get("approval_status") == "approved":
                owner.rejection_reason = None
            self.db.commit()
            self.db.refresh(owner)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating space owner {space_owner_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update space owner") from e

        logger.info(f"✅ Space owner {owner.id} updated: {updates}")
        return serialize_owner(owner)

    # ------------------------------------------------------------------
    # Payouts
    # ------------------------------------------------------------------

    async def create_payout(self, admin: User, data: PayoutCreate) -> dict[str, Any]:
        owner = self._owner(data.space_owner_id)
        business = owner.business_info
        if not business:
            raise HTTPException(status_code=400, detail="Business information not found")

        balance = self.balance_repo.get(self.db, business.id)
        if not balance:
            raise HTTPException(status_code=400, detail="Business balance not found")
        available = self.balance_repo.available_for_payout(balance)
        if data.amount > available:
            raise HTTPException(status_code=400, detail=f"Insufficient balance. Available: ₹{available:,.2f}")

        now = datetime.utcnow()
        try:
            payout = self.payout_repo.create_space_owner_payout(
                self.db,
                space_owner_id=owner.id,
                amount=data.amount,
                payment_method=data.payment_method,
                transaction_id=data.transaction_id or f"PAYOUT_{int(time.time() * 1000)}",
                status="completed",
                notes=data.notes or "Payout processed by admin",
                processed_by=admin.id,
                processed_at=now,
            )
            if self.balance_repo.withdraw(self.db, business.id, data.amount) == 0:
                raise HTTPException(status_code=400, detail="Insufficient balance")
            balance.last_payout_date = now
            self.db.commit()
            self.db.refresh(payout)
            self.db.refresh(balance)
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error processing payout for owner {owner.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to process payout") from e

        logger.info(f"💰 Payout {payout.transaction_id}: ₹{payout.amount} to owner {owner.id} by admin {admin.id}")

        try:
            await send_payout_notification(
                to=owner.email,
                owner_name=owner_name(owner),
                amount=payout.amount,
                payment_method=payout.payment_method,
                transaction_id=payout.transaction_id,
                remaining_pending=round(balance.pending_amount, 2),
            )
        except Exception as e:
            logger.warning(f"⚠️ Payout notification failed for owner {owner.id}: {e}")

        return SpaceOwnerPayoutResponse.model_validate(payout).model_dump()

    def list_payouts(self, space_owner_id: Optional[int] = None) -> list[dict[str, Any]]:
        return [
            SpaceOwnerPayoutResponse.model_validate(p).model_dump()
            for p in self.payout_repo.get_space_owner_payouts(self.db, space_owner_id)
        ]

    # ------------------------------------------------------------------
    # Premium analytics
    # ------------------------------------------------------------------

    def premium_analytics(self) -> dict[str, Any]:
        owners = self.db.query(SpaceOwner).all()
        premium = [o for o in owners if o.premium_plan == "premium"]
        revenue_by_owner = {o.id: self._owner_revenue(o.id) for o in owners}

        premium_revenue = round(sum(revenue_by_owner[o.id]["total_revenue"] for o in premium), 2)
        total_revenue = round(sum(r["total_revenue"] for r in revenue_by_owner.values()), 2)
        premium_share = round(premium_revenue / total_revenue * 100, 1) if total_revenue > 0 else 0.0

        now = datetime.utcnow()
        soon = now + timedelta(days=30)
        renewals = [
            {
                "space_owner_id": o.id,
                "name": owner_name(o),
                "email": o.email,
                "plan_expiry_date": o.plan_expiry_date,
                "days_until_expiry": (o.plan_expiry_date - now).days,
            }
            for o in premium
            if o.plan_expiry_date and o.plan_expiry_date <= soon
        ]
        renewals.sort(key=lambda r: r["plan_expiry_date"])

        top_owners = sorted(
            (
                {"space_owner_id": o.id, "name": owner_name(o), "plan": o.premium_plan, **revenue_by_owner[o.id]}
                for o in owners
            ),
            key=lambda row: row["total_revenue"],
            reverse=True,
        )[:10]

        completed = self.db.query(Booking).filter(Booking.status.in_(REVENUE_STATUSES)).all()

        return {
            "owners": {
                "total": len(owners),
                "premium": len(premium),
                "basic": len(owners) - len(premium),
                "premium_percentage": round(len(premium) / len(owners) * 100, 1) if owners else 0.0,
                "premium_payments_enabled": sum(1 for o in owners if o.premium_payments_enabled),
            },
            "revenue": {
                "total": total_revenue,
                "premium": premium_revenue,
                "basic": round(total_revenue - premium_revenue, 2),
                "premium_share": premium_share,
                "basic_share": round(100 - premium_share, 1) if total_revenue > 0 else 0.0,
            },
            "monthly_trend": monthly_revenue(completed, now.date()),
            "upcoming_renewals": renewals,
            "top_owners": top_owners,
        }

    async def premium_action(self, data: PremiumAction) -> dict[str, Any]:
        if data.action not in PREMIUM_ACTIONS:
            raise HTTPException(status_code=400, detail="Invalid action")
        owner = self._owner(data.space_owner_id)

        if data.action == "send_payment_reminder":
            try:
                await send_payment_reminder(to=owner.email, owner_name=owner_name(owner), plan=owner.premium_plan)
            except Exception as e:
                logger.warning(f"⚠️ Payment reminder failed for owner {owner.id}: {e}")
                return {"sent": False, "message": "Payment reminder could not be sent"}
            return {"sent": True, "message": "Payment reminder sent successfully"}

        if data.action == "send_renewal_reminder":
            expiry = owner.plan_expiry_date.date().isoformat() if owner.plan_expiry_date else None
            try:
                await send_renewal_reminder(to=owner.email, owner_name=owner_name(owner), expiry_date=expiry)
            except Exception as e:
                logger.warning(f"⚠️ Renewal reminder failed for owner {owner.id}: {e}")
                return {"sent": False, "message": "Renewal reminder could not be sent"}
            return {"sent": True, "message": "Renewal reminder sent successfully"}

        if data.action == "update_premium_plan":
            if not data.plan:
                raise HTTPException(status_code=400, detail="plan is required")
            owner.premium_plan = data.plan
            if data.plan == "premium":
                owner.plan_expiry_date = data.plan_expiry_date or subscription_expiry(datetime.utcnow(), "monthly")
            else:
                owner.plan_expiry_date = None
            message = f"Premium plan updated to {data.plan}"
        else:
            if not data.extension_days:
                raise HTTPException(status_code=400, detail="extension_days is required")
            base = owner.plan_expiry_date or datetime.utcnow()
            owner.plan_expiry_date = base + timedelta(days=data.extension_days)
            if owner.subscription:
                owner.subscription.expiry_date = owner.plan_expiry_date
            message = f"Subscription extended by {data.extension_days} days"

        try:
            self.db.commit()
            self.db.refresh(owner)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Premium action {data.action} failed for owner {owner.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to process action") from e

        logger.info(f"💎 {message} for owner {owner.id}")
        return {"message": message, "space_owner": serialize_owner(owner)}

    # ------------------------------------------------------------------
    # Bookings & users
    # ------------------------------------------------------------------

    def list_bookings(self, status: Optional[str] = None) -> list[dict[str, Any]]:
        query = self.db.query(Booking).options(joinedload(Booking.user), joinedload(Booking.space))
        if status and status != "all":
            query = query.filter(Booking.status == status)
        return [serialize_booking_for_owner(b) for b in query.order_by(Booking.created_at.desc(), Booking.id.desc())]

    def list_users(self, search: Optional[str] = None, role: Optional[str] = None) -> list[dict[str, Any]]:
        query = self.db.query(User)
        if search:
            term = f"%{search.strip()}%"
            query = query.filter(
                or_(User.email.ilike(term), User.first_name.ilike(term), User.last_name.ilike(term))
            )
        if role and role != "all":
            query = query.filter(User.role == role)
        return [
            UserResponse.model_validate(u).model_dump() for u in query.order_by(User.created_at.desc(), User.id.desc())
        ]
