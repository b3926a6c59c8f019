"""
In-Memory Review Repository: process-local storage adapter.

Implements ReviewRepository with plain dictionaries. Nothing survives the process.
"""

import asyncio
import dataclasses
import logging

from cadence.domain.errors import CardNotFoundError, ConcurrentReviewError
from cadence.domain.scheduling.models import Card, ReviewEntry
from cadence.domain.scheduling.ports import ReviewRepository

logger = logging.getLogger(__name__)


class InMemoryReviewRepository(ReviewRepository):
    """
    Keeps cards and the review log in memory.

    Version check and log append share one lock, so concurrent ratings of
    the same card cannot both succeed.
    """

    def __init__(self, cards: list[Card] | None = None):
        self._cards: dict[str, Card] = {c.id: c for c in cards or []}
        self._reviews: list[ReviewEntry] = []
        self._lock = asyncio.Lock()

    async def add_card(self, card: Card) -> Card:
        async with self._lock:
            if card.id in self._cards:
                raise ValueError(f"Card already exists: {card.id}")
            self._cards[card.id] = card
        logger.debug(f"Added card {card.id} to deck {card.deck_id}")
        return card

    async def get_card(self, card_id: str) -> Card | None:
        return self._cards.get(card_id)

    async def list_cards(self, deck_id: str | None = None) -> list[Card]:
        cards = list(self._cards.values())
        if deck_id is not None:
            cards = [c for c in cards if c.deck_id == deck_id]
        return cards

    async def update_card_content(self, card: Card) -> Card:
        async with self._lock:
            stored = self._cards.get(card.id)
            if stored is None:
                raise CardNotFoundError(card.id)
            updated = dataclasses.replace(
                stored,
                front=card.front,
                back=card.back,
                is_starred=card.is_starred,
                is_active=card.is_active,
            )
            self._cards[card.id] = updated
        return updated

    async def record_review(
        self, card: Card, entry: ReviewEntry, expected_version: int
    ) -> Card:
        async with self._lock:
            stored = self._cards.get(card.id)
            if stored is None:
                raise CardNotFoundError(card.id)
            if stored.version != expected_version:
                raise ConcurrentReviewError(card.id, expected_version)

            updated = dataclasses.replace(
                stored,
                ease_factor=card.ease_factor,
                interval=card.interval,
                repetitions=card.repetitions,
                next_review_date=card.next_review_date,
                last_review_date=card.last_review_date,
                version=stored.version + 1,
            )
            self._cards[card.id] = updated
            self._reviews.append(entry)
        return updated

    async def list_reviews(self, card_id: str | None = None) -> list[ReviewEntry]:
        reviews = self._reviews
        if card_id is not None:
            reviews = [r for r in reviews if r.card_id == card_id]
        return sorted(reviews, key=lambda r: r.reviewed_at)
