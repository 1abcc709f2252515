import pytest
from conftest import (
    auth_headers,
    make_balance,
    make_booking,
    make_owner,
    make_payment_info,
    make_space,
    make_tax,
    make_user,
)

from clubicles.models import BusinessBalance, Payout


@pytest.fixture
def owner(db):
    return make_owner(db)


@pytest.fixture
def taxed_bookings(db, owner):
    make_tax(db, "GST", 18)
    make_tax(db, "Platform Fee", 10)
    space = make_space(db, owner)
    member = make_user(db)
    make_booking(db, member, space, redeemed=True)
    make_booking(db, member, space, redeemed=True)
    make_booking(db, member, space)
    return space


# ============================================================================
# PROFILE
# ============================================================================


def test_approval_status(client, db):
    owner = make_owner(db, approval_status="pending", with_business=False)

    body = client.get("/api/owner/approval-status", headers=auth_headers(owner.user)).json()

    assert body["approval_status"] == "pending"
    assert body["has_business_info"] is False
    assert body["has_payment_info"] is False
    assert body["verification_status"] is None


def test_owner_endpoints_need_an_owner_profile(client, db):
    stray = make_user(db, email="stray-owner@example.com", role="owner")
    assert client.get("/api/owner/approval-status", headers=auth_headers(stray)).status_code == 404


def test_business_info_update_goes_back_to_review(client, owner):
    response = client.put(
        "/api/owner/business-info",
        json={"business_name": "Hub Works Two", "pan_number": "abcde1234f", "business_pincode": "560001"},
        headers=auth_headers(owner.user),
    )

    assert response.status_code == 200
    business = response.json()["business_info"]
    assert business["business_name"] == "Hub Works Two"
    assert business["pan_number"] == "ABCDE1234F"
    assert business["verification_status"] == "pending"

    fetched = client.get("/api/owner/business-info", headers=auth_headers(owner.user)).json()
    assert fetched["business_info"]["business_name"] == "Hub Works Two"


def test_business_info_validation(client, owner):
    response = client.put(
        "/api/owner/business-info",
        json={"business_name": "Hub Works", "gst_number": "not-a-gst"},
        headers=auth_headers(owner.user),
    )
    assert response.status_code == 422


def test_missing_business_info_is_404(client, db):
    owner = make_owner(db, with_business=False)
    assert client.get("/api/owner/business-info", headers=auth_headers(owner.user)).status_code == 404


def test_payment_settings(client, owner):
    headers = auth_headers(owner.user)

    assert client.put("/api/owner/payment-settings", json={}, headers=headers).status_code == 400
    assert (
        client.put("/api/owner/payment-settings", json={"bank_account_number": "123456789012"}, headers=headers)
        .status_code
        == 400
    )
    assert (
        client.put(
            "/api/owner/payment-settings",
            json={"bank_account_number": "123456789012", "bank_ifsc_code": "BAD"},
            headers=headers,
        ).status_code
        == 422
    )

    response = client.put(
        "/api/owner/payment-settings",
        json={"bank_account_number": "123456789012", "bank_ifsc_code": "hdfc0001234", "bank_name": "HDFC"},
        headers=headers,
    )
    assert response.status_code == 200
    info = response.json()["payment_info"]
    assert info["bank_ifsc_code"] == "HDFC0001234"
    assert info["bank_account_number"].endswith("9012")
    assert info["bank_account_number"] != "123456789012"

    settings = client.get("/api/owner/payment-settings", headers=headers).json()
    assert settings["payment_info"]["bank_name"] == "HDFC"
    assert settings["premium_payments_enabled"] is False


def test_premium_payments_toggle(client, owner):
    headers = auth_headers(owner.user)

    assert client.post("/api/owner/premium-payments", json={"enabled": "yes"}, headers=headers).status_code == 400

    response = client.post("/api/owner/premium-payments", json={"enabled": True}, headers=headers)
    assert response.status_code == 200
    assert response.json()["enabled"] is True
    assert client.get("/api/owner/premium-payments", headers=headers).json()["enabled"] is True


def test_subscription_status_for_basic_plan(client, owner):
    body = client.get("/api/owner/subscription", headers=auth_headers(owner.user)).json()

    assert body["current_plan"] == "basic"
    assert body["subscription"] is None
    assert body["can_upgrade"] is True
    assert body["features"]["max_spaces"] == 5
    assert body["payment_history"] == []


def test_dashboard(client, db, owner):
    space = make_space(db, owner)
    member = make_user(db)
    make_booking(db, member, space, total_amount=500)
    make_booking(db, member, space, redeemed=True, total_amount=800)
    make_booking(db, member, space, status="cancelled")

    data = client.get("/api/owner/dashboard", headers=auth_headers(owner.user)).json()["data"]

    assert data["stats"]["total_spaces"] == 1
    assert data["stats"]["total_bookings"] == 3
    assert data["stats"]["confirmed_bookings"] == 1
    assert data["stats"]["cancelled_bookings"] == 1
    assert data["stats"]["total_revenue"] == 800.0
    assert len(data["recent_bookings"]) == 3
    assert data["owner"]["is_verified"] is True


# ============================================================================
# REVENUE & ANALYTICS
# ============================================================================


def test_revenue_counts_redeemed_bookings_and_tracks_pending_payout(client, db, owner, taxed_bookings):
    data = client.get("/api/owner/revenue", headers=auth_headers(owner.user)).json()["data"]

    summary = data["summary"]
    assert summary["total_revenue"] == 2000.0
    assert summary["total_tax_collected"] == 560.0
    assert summary["total_platform_commission"] == 200.0
    assert summary["total_owner_payout"] == 1440.0
    assert summary["effective_tax_rate"] == 28.0
    assert summary["completed_bookings"] == 2
    assert summary["total_bookings"] == 3
    assert data["financial_overview"]["pending_payout"]["amount"] == 1440.0
    assert data["financial_overview"]["pending_payout"]["next_payout_date"].endswith("-15")
    assert {item["name"]: item["amount"] for item in data["tax_breakdown"]} == {"GST": 360.0, "Platform Fee": 200.0}

    # A second read keeps a single pending row
    client.get("/api/owner/revenue", headers=auth_headers(owner.user))
    assert db.query(Payout).filter(Payout.status == "pending").count() == 1


def test_revenue_pending_payout_excludes_paid_amounts(client, db, owner, taxed_bookings):
    db.add(Payout(business_id=owner.business_info.id, amount=440.0, status="completed", payout_method="upi"))
    db.commit()

    data = client.get("/api/owner/revenue", headers=auth_headers(owner.user)).json()["data"]

    assert data["financial_overview"]["pending_payout"]["amount"] == 1000.0
    assert data["summary"]["total_payouts"] == 440.0


def test_analytics(client, db, owner, taxed_bookings):
    data = client.get("/api/owner/analytics", headers=auth_headers(owner.user)).json()["data"]

    assert data["total_revenue"] == 2000.0
    assert data["net_earnings"] == 1440.0
    # Ledger is empty so the balance falls back to net earnings
    assert data["current_balance"] == 1440.0
    assert data["total_capacity"] == 10
    assert data["occupancy_rate"] == 30.0
    assert data["average_booking_duration"] == 2.0
    assert data["peak_hours"] == {"start": "10:00", "end": "12:00"}
    assert len(data["monthly_revenue"]) == 6
    assert data["monthly_revenue"][-1]["revenue"] == 2000.0
    assert len(data["booking_trends"]) == 7
    assert data["booking_trends"][-1]["bookings"] == 3
    assert data["vibgyor"]["total"] == 0


def test_financial_overview(client, db, owner):
    make_balance(db, owner, current_balance=750.0, total_earned=900.0)

    data = client.get("/api/owner/financial", headers=auth_headers(owner.user)).json()["data"]

    assert data["business_balance"]["current_balance"] == 750.0
    assert data["payouts"] == []
    assert data["space_owner_payouts"] == []


# ============================================================================
# PAYOUT REQUESTS
# ============================================================================


def test_payout_request_needs_enough_balance(client, db, owner):
    make_balance(db, owner, current_balance=100.0)

    response = client.post(
        "/api/owner/payments",
        json={"action": "request_payout", "data": {"amount": 250}},
        headers=auth_headers(owner.user),
    )
    assert response.status_code == 400


def test_payout_request_moves_balance(client, db, owner):
    make_balance(db, owner, current_balance=500.0, pending_amount=500.0)
    make_payment_info(db, owner, upi_id="hubworks@upi")

    response = client.post(
        "/api/owner/payments",
        json={"action": "request_payout", "data": {"amount": 200}},
        headers=auth_headers(owner.user),
    )

    assert response.status_code == 200
    payout = response.json()["data"]
    assert payout["status"] == "processing"
    assert payout["payout_method"] == "upi"

    db.expire_all()
    balance = db.query(BusinessBalance).filter(BusinessBalance.business_id == owner.business_info.id).one()
    assert balance.current_balance == 300.0
    assert balance.pending_amount == 300.0
    assert balance.total_withdrawn == 200.0
    assert balance.last_payout_date is not None


def test_payments_update_info_and_invalid_action(client, owner):
    headers = auth_headers(owner.user)

    response = client.post(
        "/api/owner/payments",
        json={"action": "update_payment_info", "data": {"upi_id": "hub@okaxis"}},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["upi_id"] == "hub@okaxis"

    overview = client.get("/api/owner/payments", headers=headers).json()["data"]
    assert overview["payment_info"]["upi_id"] == "hub@okaxis"
    assert overview["total_earned_from_bookings"] == 0.0

    assert client.post("/api/owner/payments", json={"action": "withdraw_all"}, headers=headers).status_code == 400


def test_payout_request_is_capped_by_pending_earnings(client, db, owner):
    make_balance(db, owner, current_balance=500.0, pending_amount=100.0)

    response = client.post(
        "/api/owner/payments",
        json={"action": "request_payout", "data": {"amount": 200}},
        headers=auth_headers(owner.user),
    )
    assert response.status_code == 400


def test_owner_and_admin_cannot_pay_out_the_same_earnings(client, db, owner):
    admin = make_user(db, email="admin@example.com", role="admin")
    make_balance(db, owner, current_balance=400.0, pending_amount=400.0)

    requested = client.post(
        "/api/owner/payments",
        json={"action": "request_payout", "data": {"amount": 400}},
        headers=auth_headers(owner.user),
    )
    assert requested.status_code == 200

    response = client.post(
        "/api/admin/space-owners/payout",
        json={"space_owner_id": owner.id, "amount": 400, "payment_method": "upi"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 400

    db.expire_all()
    balance = db.query(BusinessBalance).filter(BusinessBalance.business_id == owner.business_info.id).one()
    assert balance.current_balance == 0.0
    assert balance.pending_amount == 0.0
    assert balance.total_withdrawn == 400.0
