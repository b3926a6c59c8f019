"""
Review Service: Application layer orchestrator for study sessions.

Builds the session queue from stored cards and turns a rating into an
updated card plus one review log entry, persisted as a single unit.
"""

import dataclasses
import logging
from datetime import datetime, tzinfo

from cadence.application.cards import edit_card_content
from cadence.application.classifier import count_cards
from cadence.application.id_service import generate_review_id
from cadence.application.queue_builder import QueueBuildResult, build_queue_result
from cadence.application.sm2 import calculate_next_state
from cadence.domain.constants import MAX_QUALITY, MIN_QUALITY
from cadence.domain.errors import CardNotFoundError, ConcurrentReviewError, InvalidQualityError
from cadence.domain.scheduling.models import Card, CardCounts, ReviewEntry, SchedulerSettings
from cadence.domain.scheduling.ports import ReviewRepository

logger = logging.getLogger(__name__)


def validate_quality(value: object) -> int:
    """
    Reject anything that is not an integer rating in 0..5.

    bool is rejected even though it subclasses int.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidQualityError(value)
    if not MIN_QUALITY <= value <= MAX_QUALITY:
        raise InvalidQualityError(value)
    return value


def apply_rating(card: Card, quality: int, now: datetime) -> tuple[Card, ReviewEntry]:
    """
    Apply one rating to a card.

    Only the scheduling fields and last_review_date change. The returned
    entry records the interval transition for stats.
    """
    result = calculate_next_state(card.scheduling, quality, now)

    updated = dataclasses.replace(
        card,
        ease_factor=result.ease_factor,
        interval=result.interval,
        repetitions=result.repetitions,
        next_review_date=result.next_review_date,
        last_review_date=now,
    )
    entry = ReviewEntry(
        id=generate_review_id(),
        card_id=card.id,
        quality=quality,
        reviewed_at=now,
        previous_interval=card.interval,
        new_interval=result.interval,
    )
    return updated, entry


class ReviewService:
    """
    Application service for review sessions.

    Depends on the ReviewRepository abstraction, not concrete adapters.
    """

    def __init__(
        self,
        repo: ReviewRepository,
        settings: SchedulerSettings | None = None,
        tz: tzinfo | None = None,
    ):
        """
        Args:
            repo: Storage port for cards and the review log.
            settings: Queue policy; defaults apply if not provided.
            tz: Zone for weekend detection; None means `now` is already local.
        """
        self._repo = repo
        self._settings = settings or SchedulerSettings()
        self._tz = tz

    @property
    def settings(self) -> SchedulerSettings:
        return self._settings

    async def build_session_queue(
        self, now: datetime, deck_id: str | None = None
    ) -> QueueBuildResult:
        cards = await self._repo.list_cards(deck_id)
        result = build_queue_result(cards, self._settings, now, self._tz)
        logger.info(
            f"Session queue for deck={deck_id or '*'}: "
            f"{result.due_in_queue} due, {result.new_in_queue} new"
        )
        return result

    async def rate_card(self, card_id: str, quality: object, now: datetime) -> Card:
        """
        Rate a card and persist the result.

        Raises:
            InvalidQualityError: quality is not an integer 0-5.
            CardNotFoundError: No such card.
            ConcurrentReviewError: The card was rated by someone else meanwhile.
        """
        rating = validate_quality(quality)

        card = await self._repo.get_card(card_id)
        if card is None:
            raise CardNotFoundError(card_id)

        updated, entry = apply_rating(card, rating, now)

        try:
            stored = await self._repo.record_review(
                updated, entry, expected_version=card.version
            )
        except ConcurrentReviewError:
            logger.warning(f"Concurrent rating rejected for card {card_id}")
            raise

        logger.info(
            f"Rated {card_id} q={rating}: interval {entry.previous_interval} -> "
            f"{entry.new_interval}, ease {stored.ease_factor}"
        )
        return stored

    async def get_counts(self, now: datetime, deck_id: str | None = None) -> CardCounts:
        cards = await self._repo.list_cards(deck_id)
        return count_cards(cards, now)

    async def edit_card(
        self,
        card_id: str,
        front: str | None = None,
        back: str | None = None,
        is_starred: bool | None = None,
        is_active: bool | None = None,
    ) -> Card:
        """
        Change a card's content or flags. Scheduling state and version are kept.

        Raises:
            CardNotFoundError: No such card.
        """
        card = await self._repo.get_card(card_id)
        if card is None:
            raise CardNotFoundError(card_id)

        edited = edit_card_content(
            card, front=front, back=back, is_starred=is_starred, is_active=is_active
        )
        stored = await self._repo.update_card_content(edited)
        logger.info(
            f"Edited {card_id}: starred={stored.is_starred} active={stored.is_active}"
        )
        return stored

    async def list_reviews(self, card_id: str | None = None) -> list[ReviewEntry]:
        return await self._repo.list_reviews(card_id)
