from datetime import datetime, timedelta

from conftest import PASSWORD, auth_headers, make_user

from clubicles.config import AUTH_COOKIE_NAME
from clubicles.models import SpaceOwner, User
from clubicles.routes.auth import MAX_OTP_ATTEMPTS
from clubicles.security_utils import generate_password_reset_token


def register(client, **overrides):
    payload = {
        "email": "New.Member@Example.com",
        "password": PASSWORD,
        "first_name": "Meera",
        "phone": "98765 43210",
        "professional_role": "marketer",
    }
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload)


def test_register_creates_unverified_user_and_emails_otp(client, db, sent_emails):
    response = register(client)

    assert response.status_code == 201
    user_data = response.json()["user"]
    assert user_data["email"] == "new.member@example.com"
    assert user_data["phone"] == "+919876543210"
    assert user_data["is_email_verified"] is False
    assert AUTH_COOKIE_NAME in response.cookies

    user = db.query(User).filter(User.email == "new.member@example.com").one()
    assert user.email_otp and len(user.email_otp) == 6
    assert any(user.email_otp in mail["body"] for mail in sent_emails)


def test_register_rejects_duplicate_email(client):
    assert register(client).status_code == 201
    response = register(client)
    assert response.status_code == 400


def test_register_rejects_short_password(client):
    response = register(client, password="short")
    assert response.status_code == 400


def test_register_rejects_invalid_phone(client):
    response = register(client, phone="12345")
    assert response.status_code == 422


def test_register_rejects_unknown_professional_role(client):
    response = register(client, professional_role="astronaut")
    assert response.status_code == 422


def test_signin_requires_verified_email(client, db):
    register(client)
    client.cookies.clear()

    response = client.post("/api/auth/signin", json={"email": "new.member@example.com", "password": PASSWORD})
    assert response.status_code == 401

    user = db.query(User).filter(User.email == "new.member@example.com").one()
    verify = client.post("/api/auth/verify-otp", json={"email": user.email, "otp": user.email_otp})
    assert verify.status_code == 200

    response = client.post("/api/auth/signin", json={"email": "new.member@example.com", "password": PASSWORD})
    assert response.status_code == 200
    assert response.json()["user"]["is_email_verified"] is True

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["user"]["email"] == "new.member@example.com"


def test_verify_otp_rejects_wrong_code(client, db):
    register(client)
    response = client.post("/api/auth/verify-otp", json={"email": "new.member@example.com", "otp": "000000"})
    assert response.status_code == 400


def test_verify_otp_locks_after_repeated_wrong_codes(client, db):
    register(client)
    user = db.query(User).filter(User.email == "new.member@example.com").one()
    code = user.email_otp
    wrong = "000000" if code != "000000" else "111111"

    for _ in range(MAX_OTP_ATTEMPTS - 1):
        response = client.post("/api/auth/verify-otp", json={"email": user.email, "otp": wrong})
        assert response.json()["detail"] == "Invalid OTP"
    response = client.post("/api/auth/verify-otp", json={"email": user.email, "otp": wrong})
    assert response.status_code == 400
    assert response.json()["detail"].startswith("Too many attempts")

    response = client.post("/api/auth/verify-otp", json={"email": user.email, "otp": code})
    assert response.status_code == 400
    db.refresh(user)
    assert user.is_email_verified is False
    assert user.email_otp is None


def test_verify_otp_rejects_expired_code(client, db):
    register(client)
    user = db.query(User).filter(User.email == "new.member@example.com").one()
    user.email_otp_expiry = datetime.utcnow() - timedelta(minutes=1)
    db.commit()

    response = client.post("/api/auth/verify-otp", json={"email": user.email, "otp": user.email_otp})

    assert response.status_code == 400
    assert response.json()["detail"] == "OTP has expired"


def test_send_otp_refuses_verified_accounts(client, db):
    make_user(db, email="member@example.com")
    response = client.post("/api/auth/send-otp", json={"email": "member@example.com"})
    assert response.status_code == 400


def test_signin_is_rate_limited_per_client(client, db):
    make_user(db, email="member@example.com")
    attempt = {"email": "member@example.com", "password": "wrong-password"}

    for _ in range(10):
        assert client.post("/api/auth/signin", json=attempt).status_code == 401

    response = client.post("/api/auth/signin", json=attempt)
    assert response.status_code == 429
    assert int(response.headers["Retry-After"]) > 0

    correct = {"email": "member@example.com", "password": PASSWORD}
    assert client.post("/api/auth/signin", json=correct).status_code == 429


def test_password_reset_requests_are_rate_limited(client):
    for _ in range(5):
        assert client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"}).status_code == 200
    assert client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"}).status_code == 429


def test_signin_wrong_password(client, db):
    make_user(db, email="member@example.com")
    response = client.post("/api/auth/signin", json={"email": "member@example.com", "password": "wrong-password"})
    assert response.status_code == 401


def test_signin_updates_professional_role(client, db):
    make_user(db, email="member@example.com", professional_role="marketer")
    response = client.post(
        "/api/auth/signin",
        json={"email": "member@example.com", "password": PASSWORD, "professional_role": "nomad"},
    )
    assert response.status_code == 200
    assert response.json()["user"]["professional_role"] == "nomad"


def test_me_requires_authentication(client):
    assert client.get("/api/auth/me").status_code == 401


def test_me_accepts_bearer_token(client, db):
    user = make_user(db)
    response = client.get("/api/auth/me", headers=auth_headers(user))
    assert response.status_code == 200
    assert response.json()["user"]["id"] == user.id


def test_register_owner_creates_pending_space_owner(client, db, sent_emails):
    response = client.post(
        "/api/auth/register-owner",
        json={
            "email": "host@example.com",
            "password": PASSWORD,
            "first_name": "Kiran",
            "business_info": {"business_name": "Desk Bay", "pan_number": "abcde1234f"},
        },
    )

    assert response.status_code == 201
    assert response.json()["user"]["role"] == "owner"

    owner = db.query(SpaceOwner).filter(SpaceOwner.email == "host@example.com").one()
    assert owner.approval_status == "pending"
    assert owner.premium_plan == "basic"
    assert owner.business_info.business_name == "Desk Bay"
    assert owner.business_info.pan_number == "ABCDE1234F"
    assert owner.business_info.verification_status == "pending"
    assert {mail["to"] for mail in sent_emails} == {"host@example.com"}


def test_forgot_password_does_not_reveal_accounts(client):
    response = client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})
    assert response.status_code == 200


def test_reset_password_flow(client, db):
    make_user(db, email="member@example.com")
    token = generate_password_reset_token("member@example.com")

    assert client.get("/api/auth/validate-reset-token", params={"token": token}).json()["valid"] is True

    response = client.post("/api/auth/reset-password", json={"token": token, "password": "brand-new-pass"})
    assert response.status_code == 200

    signin = client.post("/api/auth/signin", json={"email": "member@example.com", "password": "brand-new-pass"})
    assert signin.status_code == 200


def test_reset_password_rejects_bad_token(client):
    response = client.post("/api/auth/reset-password", json={"token": "garbage", "password": "brand-new-pass"})
    assert response.status_code == 400
