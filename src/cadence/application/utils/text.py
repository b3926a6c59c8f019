import math
from datetime import datetime

from cadence.application.sm2 import round_half_up
from cadence.domain.scheduling.models import Card

# ---------- Rating labels ----------

QUALITY_LABELS: dict[int, str] = {
    0: "Complete blackout",
    1: "Incorrect, but recognized",
    2: "Incorrect, but easy to recall",
    3: "Hard",
    4: "Good",
    5: "Easy",
}


# ---------- Interval helpers ----------


def _plural(count: int, unit: str) -> str:
    return f"1 {unit}" if count == 1 else f"{count} {unit}s"


def format_interval(days: int) -> str:
    """Human-readable interval: Now, 3 days, 2 weeks, 4 months, 1 year."""
    if days == 0:
        return "Now"
    if days < 7:
        return _plural(days, "day")
    if days < 30:
        return _plural(int(round_half_up(days / 7)), "week")
    if days < 365:
        return _plural(int(round_half_up(days / 30)), "month")
    return _plural(int(round_half_up(days / 365)), "year")


def days_until_review(card: Card, now: datetime) -> int:
    """Whole days until the card is due, rounded up. Negative when overdue."""
    seconds = (card.next_review_date - now).total_seconds()
    return math.ceil(seconds / 86400)
