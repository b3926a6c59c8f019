# Application Stats Package
from .metrics_calculator import DailyStats, MetricsCalculator, WeeklyProgress
from .service import ReviewStatsService

__all__ = ["MetricsCalculator", "DailyStats", "WeeklyProgress", "ReviewStatsService"]
