# Domain Scheduling Package
from .models import (
    Card,
    CardCounts,
    CardStatus,
    Classification,
    DailyQuota,
    NextState,
    ReviewEntry,
    SchedulerSettings,
    SchedulingState,
)
from .ports import ReviewRepository

__all__ = [
    "Card",
    "CardCounts",
    "CardStatus",
    "Classification",
    "DailyQuota",
    "NextState",
    "ReviewEntry",
    "ReviewRepository",
    "SchedulerSettings",
    "SchedulingState",
]
