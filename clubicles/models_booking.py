from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
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


class Space(Base):
    __tablename__ = "spaces"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(
        Integer, ForeignKey("space_owner_business_info.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    address = Column(Text, nullable=False)
    city = Column(String(100), nullable=False, index=True)
    pincode = Column(String(10), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    total_seats = Column(Integer, nullable=False)
    available_seats = Column(Integer, nullable=False)
    price_per_hour = Column(Float, nullable=True)
    price_per_day = Column(Float, nullable=True)
    amenities = Column(JSON, default=list, nullable=True)  # e.g. ["wifi", "coffee"]
    images = Column(JSON, default=list, nullable=True)  # Image URLs
    company_name = Column(String(255), nullable=True)
    contact_number = Column(String(20), nullable=True)
    status = Column(String(20), default="active", nullable=False)  # active, inactive
    # VIBGYOR counters, incremented on redemption
    violet = Column(Integer, default=0, nullable=False)
    indigo = Column(Integer, default=0, nullable=False)
    blue = Column(Integer, default=0, nullable=False)
    green = Column(Integer, default=0, nullable=False)
    yellow = Column(Integer, default=0, nullable=False)
    orange = Column(Integer, default=0, nullable=False)
    red = Column(Integer, default=0, nullable=False)
    grey = Column(Integer, default=0, nullable=False)
    white = Column(Integer, default=0, nullable=False)
    black = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    business = relationship("SpaceOwnerBusinessInfo", back_populates="spaces")
    bookings = relationship("Booking", back_populates="space")
    reviews = relationship("Review", back_populates="space", cascade="all, delete-orphan")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    space_id = Column(Integer, ForeignKey("spaces.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)  # HH:MM
    booking_type = Column(String(10), default="hourly", nullable=False)  # hourly, daily
    seats_booked = Column(Integer, default=1, nullable=False)
    base_amount = Column(Float, nullable=False)
    tax_amount = Column(Float, default=0.0, nullable=False)
    total_amount = Column(Float, nullable=False)
    owner_payout = Column(Float, default=0.0, nullable=False)
    platform_commission = Column(Float, default=0.0, nullable=False)
    status = Column(String(20), default="pending", nullable=False)  # pending, confirmed, cancelled, completed
    payment_id = Column(String(255), nullable=True, index=True)
    redemption_code = Column(String(50), unique=True, nullable=True, index=True)
    qr_code_data = Column(Text, nullable=True)  # JSON payload encoded in the QR code
    is_redeemed = Column(Boolean, default=False, nullable=False)
    redeemed_at = Column(DateTime, nullable=True)
    redeemed_by = Column(Integer, ForeignKey("space_owners.id"), nullable=True)
    roles = Column(JSON, default=list, nullable=True)  # Professional roles of the attendees
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="bookings", foreign_keys=[user_id])
    space = relationship("Space", back_populates="bookings")
    taxes = relationship("BookingTax", back_populates="booking", cascade="all, delete-orphan")
    payments = relationship("BookingPayment", back_populates="booking", cascade="all, delete-orphan")
    review = relationship("Review", back_populates="booking", uselist=False)


class TaxConfiguration(Base):
    __tablename__ = "tax_configurations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)  # e.g. "GST", "Platform Fee"
    percentage = Column(Float, nullable=False)  # 0-100
    is_enabled = Column(Boolean, default=True, nullable=False)
    applies_to = Column(String(50), default="booking", nullable=False)  # booking, subscription, all
    description = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    booking_taxes = relationship("BookingTax", back_populates="tax_configuration")


class BookingTax(Base):
    __tablename__ = "booking_taxes"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    tax_configuration_id = Column(Integer, ForeignKey("tax_configurations.id"), nullable=False)
    tax_name = Column(String(100), nullable=False)
    tax_percentage = Column(Float, nullable=False)  # Effective rate after premium discount
    tax_amount = Column(Float, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    booking = relationship("Booking", back_populates="taxes")
    tax_configuration = relationship("TaxConfiguration", back_populates="booking_taxes")


class BookingPayment(Base):
    __tablename__ = "booking_payments"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="INR", nullable=False)
    payment_method = Column(String(50), default="razorpay", nullable=False)
    transaction_id = Column(String(255), nullable=True)
    gateway_order_id = Column(String(255), nullable=True)
    status = Column(String(20), default="completed", nullable=False)
    payment_date = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    booking = relationship("Booking", back_populates="payments")


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    space_id = Column(Integer, ForeignKey("spaces.id", ondelete="CASCADE"), nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True)
    rating = Column(Integer, nullable=False)  # 1-5
    review_text = Column(Text, nullable=False)
    # Detailed ratings (1-5, optional)
    overall_experience = Column(Integer, nullable=True)
    cleanliness = Column(Integer, nullable=True)
    restroom_hygiene = Column(Integer, nullable=True)
    amenities = Column(Integer, nullable=True)
    staff_service = Column(Integer, nullable=True)
    wifi_quality = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="reviews")
    space = relationship("Space", back_populates="reviews")
    booking = relationship("Booking", back_populates="review")
