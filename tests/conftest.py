import os
from datetime import date, datetime
from uuid import uuid4

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENVIRONMENT"] = "development"
os.environ["RAZORPAY_KEY_ID"] = ""
os.environ["RAZORPAY_KEY_SECRET"] = "test_secret"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ["SECURITY_HEADERS_ENABLED"] = "true"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from clubicles import email_service  # noqa: E402
from clubicles.database import Base, get_db  # noqa: E402
from clubicles.main import app  # noqa: E402
from clubicles.models import (  # noqa: E402
    BusinessBalance,
    SpaceOwner,
    SpaceOwnerBusinessInfo,
    SpaceOwnerPaymentInfo,
    User,
)
from clubicles.models_booking import Booking, Space, TaxConfiguration  # noqa: E402
from clubicles.rate_limiter import reset_rate_limits  # noqa: E402
from clubicles.security_utils import build_token_claims, create_jwt_token, hash_password  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "supersecret1"


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture(autouse=True)
def fresh_rate_limits():
    reset_rate_limits()
    yield
    reset_rate_limits()


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Capture outgoing mail instead of calling Resend"""
    outbox = []

    async def fake_send_email(to, subject, mjml_content, from_address=None):
        outbox.append({"to": to, "subject": subject, "body": mjml_content})
        return {"id": f"email_{len(outbox)}"}

    monkeypatch.setattr(email_service, "send_email", fake_send_email)
    return outbox


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_jwt_token(build_token_claims(user))}"}


# ============================================================================
# FACTORIES
# ============================================================================


def make_user(db, email="member@example.com", role="user", verified=True, **fields) -> User:
    user = User(
        email=email,
        password_hash=hash_password(PASSWORD),
        first_name=fields.pop("first_name", "Asha"),
        last_name=fields.pop("last_name", "Rao"),
        role=role,
        is_active=True,
        is_email_verified=verified,
        **fields,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_owner(db, email="owner@example.com", with_business=True, **fields) -> SpaceOwner:
    user = make_user(db, email=email, role="owner", first_name="Vikram", last_name="Shah")
    owner = SpaceOwner(
        user_id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        premium_plan=fields.pop("premium_plan", "basic"),
        premium_payments_enabled=fields.pop("premium_payments_enabled", False),
        approval_status=fields.pop("approval_status", "approved"),
        onboarding_completed=True,
        **fields,
    )
    db.add(owner)
    db.flush()
    if with_business:
        db.add(
            SpaceOwnerBusinessInfo(
                space_owner_id=owner.id,
                business_name="Hub Works",
                business_type="coworking",
                business_city="Bengaluru",
                verification_status="verified",
            )
        )
    db.commit()
    db.refresh(owner)
    return owner


def make_payment_info(db, owner: SpaceOwner, **fields) -> SpaceOwnerPaymentInfo:
    info = SpaceOwnerPaymentInfo(space_owner_id=owner.id, **fields)
    db.add(info)
    db.commit()
    return info


def make_space(db, owner: SpaceOwner, **fields) -> Space:
    seats = fields.pop("total_seats", 10)
    space = Space(
        business_id=owner.business_info.id,
        name=fields.pop("name", "Indiranagar Desk Club"),
        description=fields.pop("description", "Quiet desks near the metro"),
        address=fields.pop("address", "12 100ft Road"),
        city=fields.pop("city", "Bengaluru"),
        total_seats=seats,
        available_seats=fields.pop("available_seats", seats),
        price_per_hour=fields.pop("price_per_hour", 100.0),
        price_per_day=fields.pop("price_per_day", 600.0),
        amenities=fields.pop("amenities", ["wifi", "coffee"]),
        images=[],
        status=fields.pop("status", "active"),
        **fields,
    )
    db.add(space)
    db.commit()
    db.refresh(space)
    return space


def make_tax(db, name="GST", percentage=18.0, enabled=True) -> TaxConfiguration:
    config = TaxConfiguration(name=name, percentage=percentage, is_enabled=enabled, applies_to="booking")
    db.add(config)
    db.commit()
    db.refresh(config)
    return config


def make_balance(db, owner: SpaceOwner, **fields) -> BusinessBalance:
    balance = BusinessBalance(
        business_id=owner.business_info.id,
        current_balance=fields.get("current_balance", 0.0),
        total_earned=fields.get("total_earned", 0.0),
        total_withdrawn=fields.get("total_withdrawn", 0.0),
        pending_amount=fields.get("pending_amount", 0.0),
        commission_deducted=0.0,
        tax_deducted=0.0,
    )
    db.add(balance)
    db.commit()
    db.refresh(balance)
    return balance


def checkout(client, user, space, dates, amount, payment_id="pay_test_1", order_id="mock_order_1"):
    """Verify a mock-gateway booking payment of `amount` and return the response"""
    return client.post(
        "/api/payment/verify",
        json={
            "razorpay_order_id": order_id,
            "razorpay_payment_id": payment_id,
            "razorpay_signature": "",
            "amount": amount,
            "booking_data": {"space_id": space.id, "dates": dates},
        },
        headers=auth_headers(user),
    )


def make_booking(db, user: User, space: Space, **fields) -> Booking:
    """A booking row written straight to the database; redeemed bookings are completed"""
    redeemed = fields.pop("redeemed", False)
    amount = fields.pop("total_amount", 1000.0)
    booking = Booking(
        user_id=user.id,
        space_id=space.id,
        date=fields.pop("date", date.today()),
        start_time=fields.pop("start_time", "10:00"),
        end_time=fields.pop("end_time", "12:00"),
        booking_type="hourly",
        seats_booked=fields.pop("seats_booked", 1),
        base_amount=amount,
        tax_amount=fields.pop("tax_amount", 0.0),
        total_amount=amount,
        owner_payout=fields.pop("owner_payout", amount),
        platform_commission=fields.pop("platform_commission", 0.0),
        status=fields.pop("status", "completed" if redeemed else "confirmed"),
        redemption_code=fields.pop("redemption_code", f"CLB-{uuid4().hex[:12].upper()}"),
        is_redeemed=redeemed,
        redeemed_at=datetime.utcnow() if redeemed else None,
        roles=fields.pop("roles", ["marketer"]),
        **fields,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking
