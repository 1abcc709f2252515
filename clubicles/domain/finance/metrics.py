"""
Revenue and booking metrics over lists of bookings.

Pure functions; the finance service feeds them query results.
"""

from collections import Counter
from datetime import date, timedelta
from typing import Any, Iterable

from ..bookings.service import booking_hours
from ..taxes.calculator import PLATFORM_FEE_NAME, calculate_taxes, effective_rate

WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
DEFAULT_PEAK_HOUR = 9


def shift_month(day: date, months: int) -> date:
    """First day of the month `months` away from `day`'s month"""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def total_revenue(bookings: Iterable) -> float:
    return round(sum(float(b.total_amount or 0) for b in bookings), 2)


def revenue_between(bookings: Iterable, start: date, end: date) -> float:
    """Revenue of bookings dated in [start, end)"""
    return total_revenue(b for b in bookings if start <= b.date < end)


def monthly_revenue(bookings: list, today: date, months: int = 6) -> list[dict[str, Any]]:
    """Revenue per calendar month, oldest first, ending with the current month"""
    series = []
    for offset in range(months - 1, -1, -1):
        start = shift_month(today, -offset)
        end = shift_month(start, 1)
        series.append(
            {
                "month": start.strftime("%Y-%m"),
                "label": start.strftime("%b %Y"),
                "revenue": revenue_between(bookings, start, end),
            }
        )
    return series


def revenue_growth(bookings: list, today: date) -> float:
    """Current month vs previous month, in percent (0 when there is no previous revenue)"""
    this_month = shift_month(today, 0)
    current = revenue_between(bookings, this_month, shift_month(today, 1))
    previous = revenue_between(bookings, shift_month(today, -1), this_month)
    if previous <= 0:
        return 0.0
    return round((current - previous) / previous * 100, 1)


def booking_patterns(bookings: list, today: date, days: int = 7) -> list[dict[str, Any]]:
    """Bookings and revenue per day for the last `days` days, today last"""
    patterns = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        day_bookings = [b for b in bookings if b.date == day]
        patterns.append(
            {
                "day": WEEKDAY_NAMES[day.weekday()],
                "date": day.isoformat(),
                "bookings": len(day_bookings),
                "revenue": total_revenue(day_bookings),
            }
        )
    return patterns


def occupancy_rate(bookings: Iterable, total_capacity: int) -> float:
    """Seats booked over seat capacity in percent, capped at 100"""
    if total_capacity <= 0:
        return 0.0
    seats = sum(int(b.seats_booked or 0) for b in bookings)
    return round(min(100.0, seats / total_capacity * 100), 1)


def average_duration(bookings: list) -> float:
    """Average booked hours, one decimal"""
    if not bookings:
        return 0.0
    hours = [max(0.0, booking_hours(b.start_time, b.end_time)) for b in bookings]
    return round(sum(hours) / len(hours), 1)


def peak_hours(bookings: Iterable) -> dict[str, str]:
    """Two-hour window starting at the most common start hour"""
    counts = Counter(int(b.start_time.split(":")[0]) for b in bookings if b.start_time)
    hour = counts.most_common(1)[0][0] if counts else DEFAULT_PEAK_HOUR
    return {"start": f"{hour:02d}:00", "end": f"{min(hour + 2, 24):02d}:00"}


def tax_summary(bookings: list, tax_configs: list, premium_payments_enabled: bool) -> dict[str, Any]:
    """
    Apply the enabled tax configurations to every booking and aggregate per configuration.

    total_tax is the sum of the rounded line totals, so the breakdown always adds up.
    """
    revenue = total_revenue(bookings)
    per_config: dict[int, float] = {config.id: 0.0 for config in tax_configs}
    for booking in bookings:
        for line in calculate_taxes(booking.total_amount or 0, tax_configs, premium_payments_enabled).lines:
            per_config[line.tax_configuration_id] += line.amount

    breakdown = []
    for config in tax_configs:
        amount = round(per_config[config.id], 2)
        rate = effective_rate(config, premium_payments_enabled)
        breakdown.append(
            {
                "id": config.id,
                "name": config.name,
                "rate": rate,
                "amount": amount,
                "percentage": round(amount / revenue * 100, 2) if revenue > 0 else 0.0,
                "description": config.description or f"{rate:g}% of revenue",
            }
        )

    total_tax = round(sum(item["amount"] for item in breakdown), 2)
    platform_commission = round(
        sum(item["amount"] for item in breakdown if item["name"] == PLATFORM_FEE_NAME), 2
    )
    return {
        "total_revenue": revenue,
        "breakdown": breakdown,
        "total_tax": total_tax,
        "platform_commission": platform_commission,
        "owner_payout": round(revenue - total_tax, 2),
        "effective_rate": round(total_tax / revenue * 100, 1) if revenue > 0 else 0.0,
    }


def next_payout_date(today: date) -> date:
    """Payouts run on the 15th of the following month"""
    return shift_month(today, 1).replace(day=15)
