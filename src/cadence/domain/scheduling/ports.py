"""
Ports (interfaces) for card and review-log storage.

The scheduling core never talks to storage; the review service depends on
this abstraction, not on concrete adapters.
"""

from abc import ABC, abstractmethod

from .models import Card, ReviewEntry


class ReviewRepository(ABC):
    """
    Port for persisting cards and their review log.

    Implementations:
        - InMemoryReviewRepository: Process-local dictionaries.
        - SqliteReviewRepository: A SQLite database file.
    """

    @abstractmethod
    async def add_card(self, card: Card) -> Card:
        pass

    @abstractmethod
    async def get_card(self, card_id: str) -> Card | None:
        pass

    @abstractmethod
    async def list_cards(self, deck_id: str | None = None) -> list[Card]:
        """
        List cards, optionally restricted to one deck, in insertion order.
        """
        pass

    @abstractmethod
    async def update_card_content(self, card: Card) -> Card:
        """
        Persist content fields only (front, back, is_starred, is_active).

        Scheduling fields and version are left exactly as stored.

        Raises:
            CardNotFoundError: If the card does not exist.
        """
        pass

    @abstractmethod
    async def record_review(
        self, card: Card, entry: ReviewEntry, expected_version: int
    ) -> Card:
        """
        Atomically persist a rated card and append its review entry.

        Args:
            card: The card carrying its new scheduling state.
            entry: The log entry for this rating.
            expected_version: The version the caller read before computing.

        Returns:
            The stored card with its version bumped.

        Raises:
            CardNotFoundError: If the card does not exist.
            ConcurrentReviewError: If the stored version differs from expected_version.
                Nothing is written in that case.
        """
        pass

    @abstractmethod
    async def list_reviews(self, card_id: str | None = None) -> list[ReviewEntry]:
        """
        List review entries, sorted by reviewed_at ascending.
        """
        pass
