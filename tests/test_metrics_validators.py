from datetime import date
from types import SimpleNamespace

import pytest

from clubicles.domain.finance import metrics
from clubicles.shared.validators import (
    validate_gst,
    validate_ifsc,
    validate_indian_phone,
    validate_pan,
    validate_pincode,
    validate_time,
)

TODAY = date(2025, 3, 10)


def booking(day, amount=100.0, seats=1, start="09:00", end="11:00"):
    return SimpleNamespace(date=day, total_amount=amount, seats_booked=seats, start_time=start, end_time=end)


# ============================================================================
# METRICS
# ============================================================================


def test_shift_month_crosses_years():
    assert metrics.shift_month(date(2025, 1, 31), -1) == date(2024, 12, 1)
    assert metrics.shift_month(date(2024, 12, 5), 1) == date(2025, 1, 1)


def test_monthly_revenue_series():
    bookings = [booking(date(2025, 3, 1), 200), booking(date(2025, 2, 28), 50), booking(date(2024, 9, 1), 999)]

    series = metrics.monthly_revenue(bookings, TODAY)

    assert [point["month"] for point in series] == ["2024-10", "2024-11", "2024-12", "2025-01", "2025-02", "2025-03"]
    assert series[-1]["revenue"] == 200.0
    assert series[-2]["revenue"] == 50.0
    assert series[-1]["label"] == "Mar 2025"


def test_revenue_growth():
    bookings = [booking(date(2025, 2, 3), 100), booking(date(2025, 3, 4), 150)]
    assert metrics.revenue_growth(bookings, TODAY) == 50.0
    assert metrics.revenue_growth([booking(date(2025, 3, 4), 150)], TODAY) == 0.0


def test_booking_patterns_use_weekday_names():
    patterns = metrics.booking_patterns([booking(TODAY, 80)], TODAY)

    assert len(patterns) == 7
    assert patterns[-1] == {"day": "Mon", "date": "2025-03-10", "bookings": 1, "revenue": 80.0}
    assert patterns[0]["day"] == "Tue"


def test_occupancy_rate_is_capped():
    assert metrics.occupancy_rate([booking(TODAY, seats=3)], 10) == 30.0
    assert metrics.occupancy_rate([booking(TODAY, seats=30)], 10) == 100.0
    assert metrics.occupancy_rate([booking(TODAY)], 0) == 0.0


def test_average_duration_and_peak_hours():
    bookings = [booking(TODAY, start="14:00", end="15:30"), booking(TODAY, start="14:00", end="16:30")]
    assert metrics.average_duration(bookings) == 2.0
    assert metrics.peak_hours(bookings) == {"start": "14:00", "end": "16:00"}
    assert metrics.peak_hours([]) == {"start": "09:00", "end": "11:00"}


def test_next_payout_date():
    assert metrics.next_payout_date(TODAY) == date(2025, 4, 15)
    assert metrics.next_payout_date(date(2025, 12, 20)) == date(2026, 1, 15)


def test_tax_summary_with_premium_payments():
    configs = [
        SimpleNamespace(id=1, name="GST", percentage=18.0, description=None),
        SimpleNamespace(id=2, name="Platform Fee", percentage=10.0, description="Service fee"),
    ]
    bookings = [booking(TODAY, 1000), booking(TODAY, 500)]

    summary = metrics.tax_summary(bookings, configs, premium_payments_enabled=True)

    assert summary["total_revenue"] == 1500.0
    assert summary["platform_commission"] == 75.0
    assert summary["total_tax"] == 345.0
    assert summary["owner_payout"] == 1155.0
    assert summary["effective_rate"] == 23.0
    gst, fee = summary["breakdown"]
    assert gst["description"] == "18% of revenue"
    assert fee["rate"] == 5.0
    assert fee["description"] == "Service fee"


def test_tax_summary_without_bookings():
    summary = metrics.tax_summary([], [SimpleNamespace(id=1, name="GST", percentage=18.0, description=None)], False)
    assert summary["total_tax"] == 0.0
    assert summary["effective_rate"] == 0.0
    assert summary["breakdown"][0]["percentage"] == 0.0


# ============================================================================
# VALIDATORS
# ============================================================================


@pytest.mark.parametrize(
    "raw",
    ["9876543210", "+91 98765 43210", "09876543210", "919876543210"],
)
def test_phone_numbers_are_normalized(raw):
    assert validate_indian_phone(raw) == "+919876543210"


@pytest.mark.parametrize("raw", ["12345", "5876543210", "+1 415 555 0100"])
def test_invalid_phone_numbers(raw):
    with pytest.raises(ValueError):
        validate_indian_phone(raw)


def test_business_identifiers():
    assert validate_ifsc(" sbin0001234 ") == "SBIN0001234"
    assert validate_pan("abcde1234f") == "ABCDE1234F"
    assert validate_gst("29abcde1234f1z5") == "29ABCDE1234F1Z5"
    assert validate_pincode("560001") == "560001"
    assert validate_gst(None) is None

    for check, value in ((validate_ifsc, "SBIN1001234"), (validate_pan, "ABCD1234F"), (validate_pincode, "060001")):
        with pytest.raises(ValueError):
            check(value)


def test_time_format():
    assert validate_time(" 09:30 ") == "09:30"
    for value in ("24:00", "9:30", "09:60"):
        with pytest.raises(ValueError):
            validate_time(value)
