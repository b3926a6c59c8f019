"""
Metrics calculator for deriving progress from the review log.

This is a pure computation module with no I/O.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo

from cadence.application.sm2 import round_half_up
from cadence.domain.constants import DEFAULT_STATS_DAYS
from cadence.domain.scheduling.models import ReviewEntry


@dataclass
class DailyStats:
    """
    Review counts for one calendar day.
    """

    date: date
    cards_reviewed: int = 0
    cards_learned: int = 0  # previous_interval == 0 and new_interval > 0
    correct_answers: int = 0  # quality >= 3
    total_answers: int = 0


@dataclass
class WeeklyProgress:
    cards_learned: int
    target: int
    days_remaining: int


class MetricsCalculator:
    """
    Computes progress metrics from ReviewEntry objects.

    Stateless and side-effect free. All day boundaries are taken in `tz`
    when given, else from the datetimes as they are.
    """

    def __init__(self, tz: tzinfo | None = None):
        self._tz = tz

    def _local(self, moment: datetime) -> datetime:
        if self._tz is not None and moment.tzinfo is not None:
            return moment.astimezone(self._tz)
        return moment

    def daily_stats(
        self,
        reviews: Iterable[ReviewEntry],
        now: datetime,
        days: int = DEFAULT_STATS_DAYS,
    ) -> list[DailyStats]:
        """
        Bucket reviews into the last `days` calendar days, oldest first.

        Reviews outside the window are ignored.
        """
        today = self._local(now).date()
        buckets: dict[date, DailyStats] = {}
        for offset in range(days - 1, -1, -1):
            day = today - timedelta(days=offset)
            buckets[day] = DailyStats(date=day)

        for review in reviews:
            stats = buckets.get(self._local(review.reviewed_at).date())
            if stats is None:
                continue
            stats.cards_reviewed += 1
            stats.total_answers += 1
            if review.is_correct:
                stats.correct_answers += 1
            if review.is_learned:
                stats.cards_learned += 1

        return list(buckets.values())

    def weekly_progress(
        self, reviews: Iterable[ReviewEntry], now: datetime, target: int
    ) -> WeeklyProgress:
        """
        Cards learned since the start of the week (Sunday 00:00).
        """
        local_now = self._local(now)
        days_since_sunday = (local_now.weekday() + 1) % 7
        start_day = local_now.date() - timedelta(days=days_since_sunday)
        week_start = datetime.combine(start_day, time.min, tzinfo=local_now.tzinfo)

        learned = sum(
            1
            for r in reviews
            if self._local(r.reviewed_at) >= week_start and r.is_learned
        )
        return WeeklyProgress(
            cards_learned=learned,
            target=target,
            days_remaining=7 - days_since_sunday,
        )

    def session_accuracy(self, reviews: Iterable[ReviewEntry]) -> int:
        """Percent of correct ratings, rounded; 0 for an empty session."""
        entries = list(reviews)
        if not entries:
            return 0
        correct = sum(1 for r in entries if r.is_correct)
        return int(round_half_up(correct * 100 / len(entries)))
