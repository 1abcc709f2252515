from types import SimpleNamespace

import pytest
from conftest import auth_headers, make_booking, make_owner, make_space, make_tax, make_user

from clubicles.domain.taxes.calculator import PLATFORM_FEE_NAME, apportion, calculate_taxes, effective_rate
from clubicles.models_booking import BookingTax


def config(id, name, percentage):
    return SimpleNamespace(id=id, name=name, percentage=percentage)


# ============================================================================
# CALCULATOR
# ============================================================================


def test_calculate_taxes_sums_every_enabled_config():
    breakdown = calculate_taxes(1000, [config(1, "GST", 18), config(2, PLATFORM_FEE_NAME, 10)])

    assert [line.amount for line in breakdown.lines] == [180.0, 100.0]
    assert breakdown.total_tax == 280.0
    assert breakdown.platform_commission == 100.0
    assert breakdown.owner_payout == 720.0


def test_premium_payments_halve_only_the_platform_fee():
    gst = config(1, "GST", 18)
    fee = config(2, PLATFORM_FEE_NAME, 10)

    assert effective_rate(gst, True) == 18
    assert effective_rate(fee, True) == 5

    breakdown = calculate_taxes(1000, [gst, fee], premium_payments_enabled=True)
    assert breakdown.total_tax == 230.0
    assert breakdown.owner_payout == 770.0


def test_calculate_taxes_without_configs():
    breakdown = calculate_taxes(500, [])
    assert breakdown.total_tax == 0
    assert breakdown.owner_payout == 500


def test_apportion():
    assert apportion(90, 200, 600) == 30.0
    assert apportion(90, 200, 0) == 0.0


# ============================================================================
# ADMIN CRUD
# ============================================================================


@pytest.fixture
def admin(db):
    return make_user(db, email="admin@example.com", role="admin")


def test_public_list_only_shows_enabled(client, db):
    make_tax(db, "GST", 18)
    make_tax(db, "Cess", 1, enabled=False)

    response = client.get("/api/tax-configurations/public")

    assert response.status_code == 200
    assert [item["name"] for item in response.json()] == ["GST"]


def test_admin_creates_tax_configuration(client, admin):
    response = client.post(
        "/api/admin/tax-configurations",
        json={"name": " GST ", "percentage": 18, "applies_to": "booking"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "GST"
    assert body["created_by"] == admin.id
    assert body["is_enabled"] is True


def test_create_rejects_out_of_range_percentage(client, admin):
    response = client.post(
        "/api/admin/tax-configurations",
        json={"name": "GST", "percentage": 120, "applies_to": "booking"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 400


def test_create_rejects_duplicate_name(client, db, admin):
    make_tax(db, "GST", 18)
    response = client.post(
        "/api/admin/tax-configurations",
        json={"name": "GST", "percentage": 12, "applies_to": "booking"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 400


def test_create_requires_all_fields(client, admin):
    response = client.post(
        "/api/admin/tax-configurations",
        json={"name": "GST"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 422


def test_update_and_delete(client, db, admin):
    tax = make_tax(db, "GST", 18)

    response = client.put(
        f"/api/admin/tax-configurations/{tax.id}",
        json={"percentage": 12, "is_enabled": False},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    assert response.json()["percentage"] == 12
    assert response.json()["is_enabled"] is False

    response = client.delete(f"/api/admin/tax-configurations/{tax.id}", headers=auth_headers(admin))
    assert response.status_code == 200
    assert client.get(f"/api/admin/tax-configurations/{tax.id}", headers=auth_headers(admin)).status_code == 404


def test_tax_used_by_bookings_cannot_be_deleted(client, db, admin):
    tax = make_tax(db, "GST", 18)
    booking = make_booking(db, make_user(db, email="guest@example.com"), make_space(db, make_owner(db)))
    db.add(
        BookingTax(
            booking_id=booking.id,
            tax_configuration_id=tax.id,
            tax_name="GST",
            tax_percentage=18,
            tax_amount=180,
        )
    )
    db.commit()

    response = client.delete(f"/api/admin/tax-configurations/{tax.id}", headers=auth_headers(admin))

    assert response.status_code == 400
    assert client.get(f"/api/admin/tax-configurations/{tax.id}", headers=auth_headers(admin)).status_code == 200


def test_non_admin_is_forbidden(client, db):
    member = make_user(db)
    response = client.get("/api/admin/tax-configurations", headers=auth_headers(member))
    assert response.status_code == 403
