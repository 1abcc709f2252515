"""
VIBGYOR professional-role categories.

Every space keeps one counter per category; redeeming a booking bumps the
counter of the attendee's category.
"""

from typing import Any, Optional

DEFAULT_PROFESSIONAL_ROLE = "marketer"

VIBGYOR_CATEGORIES: dict[str, dict[str, str]] = {
    "violet": {"label": "Visionaries & Venture Capitalists", "color": "#8B5CF6"},
    "indigo": {"label": "IT & Industrialists", "color": "#6366F1"},
    "blue": {"label": "Branding & Marketing", "color": "#3B82F6"},
    "green": {"label": "Green Footprint & EV", "color": "#10B981"},
    "yellow": {"label": "Young Entrepreneurs (<23 Years)", "color": "#F59E0B"},
    "orange": {"label": "Oracle of Bharat (Culture & Philosophy)", "color": "#F97316"},
    "red": {"label": "Real Estate & Recreationists", "color": "#EF4444"},
    "grey": {"label": "Nomads (Multi-talented Individuals)", "color": "#6B7280"},
    "white": {"label": "Policy Makers & Health Professionals", "color": "#F3F4F6"},
    "black": {"label": "Prefer Not to Say", "color": "#1F2937"},
}

VIBGYOR_KEYS = list(VIBGYOR_CATEGORIES.keys())

# Professional role (or the category key itself) -> category column
ROLE_TO_CATEGORY = {
    "visionary": "violet",
    "violet": "violet",
    "industrialist": "indigo",
    "indigo": "indigo",
    "marketer": "blue",
    "blue": "blue",
    "green_ev": "green",
    "green": "green",
    "young_entrepreneur": "yellow",
    "yellow": "yellow",
    "oracle": "orange",
    "orange": "orange",
    "real_estate": "red",
    "red": "red",
    "nomad": "grey",
    "grey": "grey",
    "policy_maker": "white",
    "white": "white",
    "prefer_not_to_say": "black",
    "black": "black",
}


def role_to_category(role: Optional[str]) -> Optional[str]:
    if not role:
        return None
    return ROLE_TO_CATEGORY.get(role.strip().lower())


def is_valid_professional_role(role: Optional[str]) -> bool:
    return role_to_category(role) is not None


def space_counts(space) -> dict[str, int]:
    return {key: int(getattr(space, key) or 0) for key in VIBGYOR_KEYS}


def summarize_counts(counts: dict[str, int]) -> dict[str, Any]:
    """Percentages, active categories and the dominant category for a counter set"""
    total = sum(counts.values())
    if total == 0:
        return {
            "has_redeemed_bookings": False,
            "total": 0,
            "counts": counts,
            "percentages": {key: 0 for key in VIBGYOR_KEYS},
            "categories": [],
            "dominant_type": None,
        }

    percentages = {key: round(count / total * 100) for key, count in counts.items()}
    categories = [
        {
            "key": key,
            "label": VIBGYOR_CATEGORIES[key]["label"],
            "color": VIBGYOR_CATEGORIES[key]["color"],
            "count": counts[key],
            "percentage": percentages[key],
        }
        for key in VIBGYOR_KEYS
        if counts[key] > 0
    ]
    categories.sort(key=lambda c: c["count"], reverse=True)
    dominant = categories[0]

    return {
        "has_redeemed_bookings": True,
        "total": total,
        "counts": counts,
        "percentages": percentages,
        "categories": categories,
        "dominant_type": {
            "key": dominant["key"],
            "label": dominant["label"],
            "count": dominant["count"],
            "percentage": dominant["percentage"],
        },
    }
