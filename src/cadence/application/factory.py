"""
Repository Factory
Centralizes the logic for selecting the storage adapter.
"""

import logging

from cadence.application.config import AppConfig
from cadence.domain.scheduling.ports import ReviewRepository
from cadence.infrastructure.adapters.memory_store import InMemoryReviewRepository
from cadence.infrastructure.adapters.sqlite_store import SqliteReviewRepository

logger = logging.getLogger(__name__)


def get_review_repository(config: AppConfig) -> ReviewRepository:
    """
    Returns the ReviewRepository implementation selected by config.backend.
    """
    if config.backend == "memory":
        logger.debug("Backend: in-memory")
        return InMemoryReviewRepository()

    logger.debug(f"Backend: sqlite ({config.database_path})")
    return SqliteReviewRepository(config.database_path)
