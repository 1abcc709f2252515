"""Owner repository - business info, payment info and dashboard queries"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import SpaceOwner, SpaceOwnerBusinessInfo, SpaceOwnerPaymentHistory, SpaceOwnerPaymentInfo
from ...models_booking import Space


class OwnerRepository:
    """Repository for space owner profile data"""

    @staticmethod
    def get_by_id(db: Session, owner_id: int) -> Optional[SpaceOwner]:
        return db.query(SpaceOwner).filter(SpaceOwner.id == owner_id).first()

    @staticmethod
    def upsert_business_info(db: Session, owner: SpaceOwner, **data) -> SpaceOwnerBusinessInfo:
        """Create or update the business profile; does not commit"""
        business = owner.business_info
        if business:
            for key, value in data.items():
                setattr(business, key, value)
        else:
            business = SpaceOwnerBusinessInfo(space_owner_id=owner.id, **data)
            db.add(business)
        db.flush()
        return business

    @staticmethod
    def upsert_payment_info(db: Session, owner: SpaceOwner, **data) -> SpaceOwnerPaymentInfo:
        """Create or update bank/UPI details; does not commit"""
        payment_info = owner.payment_info
        if payment_info:
            for key, value in data.items():
                setattr(payment_info, key, value)
        else:
            payment_info = SpaceOwnerPaymentInfo(space_owner_id=owner.id, **data)
            db.add(payment_info)
        db.flush()
        return payment_info

    @staticmethod
    def count_spaces(db: Session, business_id: int) -> int:
        return db.query(func.count(Space.id)).filter(Space.business_id == business_id).scalar() or 0

    @staticmethod
    def recent_subscription_payments(db: Session, owner_id: int, limit: int = 10) -> list[SpaceOwnerPaymentHistory]:
        return (
            db.query(SpaceOwnerPaymentHistory)
            .filter(SpaceOwnerPaymentHistory.space_owner_id == owner_id)
            .order_by(SpaceOwnerPaymentHistory.created_at.desc(), SpaceOwnerPaymentHistory.id.desc())
            .limit(limit)
            .all()
        )
