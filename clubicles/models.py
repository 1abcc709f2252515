from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)
    city = Column(String(100), nullable=True)
    professional_role = Column(String(50), nullable=True)  # VIBGYOR role key, e.g. "marketer"
    role = Column(String(20), default="user", nullable=False)  # user, owner, admin, moderator
    is_active = Column(Boolean, default=True, nullable=False)
    is_email_verified = Column(Boolean, default=False, nullable=False)
    email_otp = Column(String(10), nullable=True)  # Current OTP for email verification
    email_otp_expiry = Column(DateTime, nullable=True)
    email_otp_attempts = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    space_owner = relationship("SpaceOwner", back_populates="user", uselist=False)
    bookings = relationship("Booking", back_populates="user", foreign_keys="Booking.user_id")
    reviews = relationship("Review", back_populates="user")
    support_tickets = relationship("SupportTicket", back_populates="user", foreign_keys="SupportTicket.user_id")


class SpaceOwner(Base):
    __tablename__ = "space_owners"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    email = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)
    premium_plan = Column(String(20), default="basic", nullable=False)  # basic, premium
    plan_expiry_date = Column(DateTime, nullable=True)
    premium_payments_enabled = Column(Boolean, default=False, nullable=False)  # Halves the platform fee
    approval_status = Column(String(20), default="pending", nullable=False)  # pending, approved, rejected
    rejection_reason = Column(Text, nullable=True)
    onboarding_completed = Column(Boolean, default=False, nullable=False)
    commission_rate = Column(Float, default=10.0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="space_owner")
    business_info = relationship("SpaceOwnerBusinessInfo", back_populates="space_owner", uselist=False)
    payment_info = relationship("SpaceOwnerPaymentInfo", back_populates="space_owner", uselist=False)
    subscription = relationship("SpaceOwnerSubscription", back_populates="space_owner", uselist=False)
    payment_history = relationship("SpaceOwnerPaymentHistory", back_populates="space_owner")
    space_owner_payouts = relationship("SpaceOwnerPayout", back_populates="space_owner")


class SpaceOwnerBusinessInfo(Base):
    __tablename__ = "space_owner_business_info"

    id = Column(Integer, primary_key=True, index=True)
    space_owner_id = Column(
        Integer, ForeignKey("space_owners.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    business_name = Column(String(255), nullable=False)
    business_type = Column(String(100), nullable=True)  # e.g. coworking, cafe, private_office
    gst_number = Column(String(20), nullable=True)
    pan_number = Column(String(20), nullable=True)
    business_address = Column(Text, nullable=True)
    business_city = Column(String(100), nullable=True)
    business_state = Column(String(100), nullable=True)
    business_pincode = Column(String(10), nullable=True)
    verification_status = Column(String(20), default="pending", nullable=False)  # pending, verified, rejected
    verified_by = Column(String(255), nullable=True)
    verified_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    space_owner = relationship("SpaceOwner", back_populates="business_info")
    spaces = relationship("Space", back_populates="business")
    payouts = relationship("Payout", back_populates="business")
    balance = relationship("BusinessBalance", back_populates="business", uselist=False)


class SpaceOwnerPaymentInfo(Base):
    __tablename__ = "space_owner_payment_info"

    id = Column(Integer, primary_key=True, index=True)
    space_owner_id = Column(
        Integer, ForeignKey("space_owners.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    bank_account_number = Column(String(30), nullable=True)
    bank_ifsc_code = Column(String(11), nullable=True)
    bank_account_holder_name = Column(String(255), nullable=True)
    bank_name = Column(String(255), nullable=True)
    upi_id = Column(String(100), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    space_owner = relationship("SpaceOwner", back_populates="payment_info")


class SpaceOwnerSubscription(Base):
    __tablename__ = "space_owner_subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    space_owner_id = Column(
        Integer, ForeignKey("space_owners.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    plan_name = Column(String(20), default="premium", nullable=False)
    billing_cycle = Column(String(20), default="monthly", nullable=False)  # monthly, yearly
    status = Column(String(20), default="active", nullable=False)  # active, expired, cancelled
    start_date = Column(DateTime, nullable=False)
    expiry_date = Column(DateTime, nullable=False)
    auto_renew = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    space_owner = relationship("SpaceOwner", back_populates="subscription")


class SpaceOwnerPaymentHistory(Base):
    __tablename__ = "space_owner_payment_history"

    id = Column(Integer, primary_key=True, index=True)
    space_owner_id = Column(Integer, ForeignKey("space_owners.id", ondelete="CASCADE"), nullable=False)
    subscription_id = Column(Integer, ForeignKey("space_owner_subscriptions.id"), nullable=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="INR", nullable=False)
    payment_method = Column(String(50), default="razorpay", nullable=False)
    transaction_id = Column(String(255), nullable=True)
    gateway_order_id = Column(String(255), nullable=True)
    gateway_signature = Column(String(255), nullable=True)
    status = Column(String(20), default="completed", nullable=False)
    payment_date = Column(DateTime, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    space_owner = relationship("SpaceOwner", back_populates="payment_history")


class BusinessBalance(Base):
    """Running ledger per business, updated by increments on bookings and payouts"""

    __tablename__ = "business_balances"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(
        Integer, ForeignKey("space_owner_business_info.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    current_balance = Column(Float, default=0.0, nullable=False)
    total_earned = Column(Float, default=0.0, nullable=False)
    total_withdrawn = Column(Float, default=0.0, nullable=False)
    pending_amount = Column(Float, default=0.0, nullable=False)
    commission_deducted = Column(Float, default=0.0, nullable=False)
    tax_deducted = Column(Float, default=0.0, nullable=False)
    last_payout_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    business = relationship("SpaceOwnerBusinessInfo", back_populates="balance")


class Payout(Base):
    """Owner-side payout requests and the pending payout tracked by the revenue view"""

    __tablename__ = "payouts"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(
        Integer, ForeignKey("space_owner_business_info.id", ondelete="CASCADE"), nullable=False
    )
    amount = Column(Float, nullable=False)
    status = Column(String(20), default="pending", nullable=False)  # pending, processing, completed, failed
    payout_method = Column(String(50), default="bank_transfer", nullable=False)
    notes = Column(Text, nullable=True)
    processed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    business = relationship("SpaceOwnerBusinessInfo", back_populates="payouts")


class SpaceOwnerPayout(Base):
    """Payouts issued by an admin to a space owner"""

    __tablename__ = "space_owner_payouts"

    id = Column(Integer, primary_key=True, index=True)
    space_owner_id = Column(Integer, ForeignKey("space_owners.id", ondelete="CASCADE"), nullable=False)
    amount = Column(Float, nullable=False)
    payment_method = Column(String(50), nullable=False)  # bank_transfer, upi
    transaction_id = Column(String(255), nullable=True)
    status = Column(String(20), default="completed", nullable=False)
    notes = Column(Text, nullable=True)
    processed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    processed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    space_owner = relationship("SpaceOwner", back_populates="space_owner_payouts")
