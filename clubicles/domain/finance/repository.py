"""Finance repository - business balances, payouts and aggregates"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import BusinessBalance, Payout, SpaceOwnerPayout

BALANCE_FIELDS = (
    "current_balance",
    "total_earned",
    "total_withdrawn",
    "pending_amount",
    "commission_deducted",
    "tax_deducted",
)


class BalanceRepository:
    """Repository for the per-business running ledger"""

    @staticmethod
    def get(db: Session, business_id: int) -> Optional[BusinessBalance]:
        return db.query(BusinessBalance).filter(BusinessBalance.business_id == business_id).first()

    @staticmethod
    def get_or_create(db: Session, business_id: int) -> BusinessBalance:
        balance = BalanceRepository.get(db, business_id)
        if not balance:
            balance = BusinessBalance(business_id=business_id, **{name: 0.0 for name in BALANCE_FIELDS})
            db.add(balance)
            db.flush()
        return balance

    @staticmethod
    def apply_deltas(db: Session, business_id: int, **deltas: float) -> None:
        """
        Increment (or decrement, with negative values) ledger columns in SQL.
        Creates the ledger row on first use. Does not commit.
        """
        BalanceRepository.get_or_create(db, business_id)
        values = {}
        for name, delta in deltas.items():
            if name not in BALANCE_FIELDS:
                raise ValueError(f"Unknown balance field: {name}")
            column = getattr(BusinessBalance, name)
            values[column] = column + delta
        if values:
            db.query(BusinessBalance).filter(BusinessBalance.business_id == business_id).update(
                values, synchronize_session=False
            )

    @staticmethod
    def available_for_payout(balance: Optional[BusinessBalance]) -> float:
        """Earnings not yet paid out by either the owner or an admin"""
        if not balance:
            return 0.0
        return round(max(0.0, min(balance.current_balance or 0.0, balance.pending_amount or 0.0)), 2)

    @staticmethod
    def withdraw(db: Session, business_id: int, amount: float) -> int:
        """
        Move `amount` out of the balance and pending columns in one statement.
        Returns 0 without touching the row when either column is short.
        """
        return (
            db.query(BusinessBalance)
            .filter(
                BusinessBalance.business_id == business_id,
                BusinessBalance.current_balance >= amount,
                BusinessBalance.pending_amount >= amount,
            )
            .update(
                {
                    BusinessBalance.current_balance: BusinessBalance.current_balance - amount,
                    BusinessBalance.pending_amount: BusinessBalance.pending_amount - amount,
                    BusinessBalance.total_withdrawn: BusinessBalance.total_withdrawn + amount,
                },
                synchronize_session=False,
            )
        )


class PayoutRepository:
    """Owner payout records and admin-issued space owner payouts"""

    @staticmethod
    def get_business_payouts(db: Session, business_id: int, limit: Optional[int] = None) -> list[Payout]:
        query = db.query(Payout).filter(Payout.business_id == business_id).order_by(
            Payout.created_at.desc(), Payout.id.desc()
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def sum_business_payouts(db: Session, business_id: int, status: str) -> float:
        return float(
            db.query(func.sum(Payout.amount))
            .filter(Payout.business_id == business_id, Payout.status == status)
            .scalar()
            or 0
        )

    @staticmethod
    def latest_pending(db: Session, business_id: int) -> Optional[Payout]:
        return (
            db.query(Payout)
            .filter(Payout.business_id == business_id, Payout.status == "pending")
            .order_by(Payout.created_at.desc(), Payout.id.desc())
            .first()
        )

    @staticmethod
    def create_payout(db: Session, **data) -> Payout:
        payout = Payout(**data)
        db.add(payout)
        db.flush()
        return payout

    @staticmethod
    def get_space_owner_payouts(db: Session, space_owner_id: Optional[int] = None) -> list[SpaceOwnerPayout]:
        query = db.query(SpaceOwnerPayout)
        if space_owner_id:
            query = query.filter(SpaceOwnerPayout.space_owner_id == space_owner_id)
        return query.order_by(SpaceOwnerPayout.created_at.desc(), SpaceOwnerPayout.id.desc()).all()

    @staticmethod
    def create_space_owner_payout(db: Session, **data) -> SpaceOwnerPayout:
        payout = SpaceOwnerPayout(**data)
        db.add(payout)
        db.flush()
        return payout

    @staticmethod
    def sum_space_owner_payouts(db: Session, space_owner_id: int, status: str = "completed") -> float:
        return float(
            db.query(func.sum(SpaceOwnerPayout.amount))
            .filter(SpaceOwnerPayout.space_owner_id == space_owner_id, SpaceOwnerPayout.status == status)
            .scalar()
            or 0
        )
