"""
Review Stats Service: Application layer orchestrator.

Coordinates fetching the review log from the repository and computing progress metrics.
"""

import logging
from datetime import datetime

from cadence.domain.constants import DEFAULT_STATS_DAYS
from cadence.domain.scheduling.models import SchedulerSettings
from cadence.domain.scheduling.ports import ReviewRepository

from .metrics_calculator import DailyStats, MetricsCalculator, WeeklyProgress

logger = logging.getLogger(__name__)


class ReviewStatsService:
    """
    Application service for progress statistics.

    Follows Dependency Inversion: depends on ReviewRepository abstraction,
    not concrete adapter implementations.
    """

    def __init__(
        self,
        repo: ReviewRepository,
        settings: SchedulerSettings | None = None,
        calculator: MetricsCalculator | None = None,
    ):
        """
        Args:
            repo: The repository (port) for the review log.
            settings: Provides the weekly learning target.
            calculator: Optional custom calculator; uses default if not provided.
        """
        self._repo = repo
        self._settings = settings or SchedulerSettings()
        self._calc = calculator or MetricsCalculator()

    async def get_daily_stats(
        self, now: datetime, days: int = DEFAULT_STATS_DAYS
    ) -> list[DailyStats]:
        if days <= 0:
            return []
        reviews = await self._repo.list_reviews()
        return self._calc.daily_stats(reviews, now, days)

    async def get_weekly_progress(self, now: datetime) -> WeeklyProgress:
        reviews = await self._repo.list_reviews()
        return self._calc.weekly_progress(reviews, now, self._settings.weekly_card_target)
