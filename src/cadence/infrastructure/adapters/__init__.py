# Infrastructure Storage Adapters Package
from .memory_store import InMemoryReviewRepository
from .sqlite_store import SqliteReviewRepository

__all__ = ["InMemoryReviewRepository", "SqliteReviewRepository"]
