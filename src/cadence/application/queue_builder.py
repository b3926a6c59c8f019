"""
Queue builder for daily review sessions.

Builds ordered study queues by:
1. Dropping inactive cards
2. Splitting the rest into due cards and not-yet-due new cards
3. Sorting each bucket by priority (starred first, then earliest due)
4. Truncating to today's weekday/weekend quotas
5. Placing due cards before new cards
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, tzinfo

from cadence.application.classifier import active_cards, is_due, is_new
from cadence.domain.constants import DEFAULT_MAX_NEW, DEFAULT_MAX_REVIEW, WEEKEND_DAYS
from cadence.domain.scheduling.models import Card, DailyQuota, SchedulerSettings

logger = logging.getLogger(__name__)


@dataclass
class QueueBuildResult:
    """Result of queue building operation."""

    queue: list[Card]  # Due cards first, then new cards
    due_total: int  # Due cards before truncation
    new_total: int  # New (not due) cards before truncation
    quota: DailyQuota

    @property
    def due_in_queue(self) -> int:
        return min(self.due_total, self.quota.max_review)

    @property
    def new_in_queue(self) -> int:
        return min(self.new_total, self.quota.max_new)


def is_weekend(now: datetime, tz: tzinfo | None = None) -> bool:
    """
    Whether `now` falls on Saturday or Sunday.

    With `tz`, aware datetimes are converted into that zone first. Without
    it, the wall-clock fields of `now` are used as given.
    """
    if tz is not None and now.tzinfo is not None:
        now = now.astimezone(tz)
    return now.weekday() in WEEKEND_DAYS


def daily_quota(
    settings: SchedulerSettings, now: datetime, tz: tzinfo | None = None
) -> DailyQuota:
    """
    Select today's new/review limits.

    Fixed defaults unless weekend learner mode is on, in which case the
    weekday or weekend pair applies.
    """
    if not settings.weekend_learner_mode:
        return DailyQuota(max_new=DEFAULT_MAX_NEW, max_review=DEFAULT_MAX_REVIEW)

    if is_weekend(now, tz):
        return DailyQuota(
            max_new=settings.weekend_new_cards,
            max_review=settings.weekend_review_cards,
        )
    return DailyQuota(
        max_new=settings.weekday_new_cards,
        max_review=settings.weekday_review_cards,
    )


def sort_by_priority(cards: Iterable[Card], prioritize_starred: bool = True) -> list[Card]:
    """
    Stable sort: starred cards first (if enabled), then earliest next_review_date.
    """
    if prioritize_starred:
        return sorted(cards, key=lambda c: (not c.is_starred, c.next_review_date))
    return sorted(cards, key=lambda c: c.next_review_date)


def build_queue_result(
    cards: Iterable[Card],
    settings: SchedulerSettings,
    now: datetime,
    tz: tzinfo | None = None,
) -> QueueBuildResult:
    """
    Build today's review queue with diagnostics.

    Args:
        cards: Snapshot of candidate cards. Not mutated.
        settings: Queue policy (quotas, starred priority).
        now: Reference time for due checks and weekday selection.
        tz: Zone used to decide whether `now` is a weekend day.

    Returns:
        QueueBuildResult whose queue is deterministic for identical inputs.
    """
    active = active_cards(cards)

    # A fresh card is due at creation; it belongs to the due bucket only.
    due = [c for c in active if is_due(c, now)]
    new = [c for c in active if is_new(c) and not is_due(c, now)]

    quota = daily_quota(settings, now, tz)

    sorted_due = sort_by_priority(due, settings.prioritize_starred)
    sorted_new = sort_by_priority(new, settings.prioritize_starred)

    queue = sorted_due[: quota.max_review] + sorted_new[: quota.max_new]

    logger.debug(
        f"Built queue: {len(queue)} cards "
        f"(due {len(due)}/{quota.max_review}, new {len(new)}/{quota.max_new})"
    )

    return QueueBuildResult(
        queue=queue,
        due_total=len(due),
        new_total=len(new),
        quota=quota,
    )


def build_queue(
    cards: Iterable[Card],
    settings: SchedulerSettings,
    now: datetime,
    tz: tzinfo | None = None,
) -> list[Card]:
    """Ordered, quota-bounded study queue: truncated due cards, then truncated new cards."""
    return build_queue_result(cards, settings, now, tz).queue
