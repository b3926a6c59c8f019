"""
Domain models for review scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from cadence.domain.constants import (
    DEFAULT_WEEKDAY_NEW_CARDS,
    DEFAULT_WEEKDAY_REVIEW_CARDS,
    DEFAULT_WEEKEND_NEW_CARDS,
    DEFAULT_WEEKEND_REVIEW_CARDS,
    DEFAULT_WEEKLY_CARD_TARGET,
)


class CardStatus(str, Enum):
    """Display label for a card. Never used as a scheduling input."""

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    GRADUATED = "graduated"


@dataclass(frozen=True)
class SchedulingState:
    """
    The SM-2 inputs of a card.

    Attributes:
        ease_factor: Interval growth multiplier (>= 1.3, no upper bound).
        interval: Days until the next review.
        repetitions: Consecutive successful reviews since the last lapse.
    """

    ease_factor: float
    interval: int
    repetitions: int


@dataclass(frozen=True)
class NextState:
    """Output of the SM-2 calculator."""

    ease_factor: float
    interval: int
    repetitions: int
    next_review_date: datetime


@dataclass(frozen=True)
class Card:
    """
    A flashcard with its scheduling fields.

    Only a rating action changes ease_factor, interval, repetitions,
    next_review_date and last_review_date. `version` is bumped by storage
    on every persisted rating.
    """

    id: str
    deck_id: str
    front: str
    back: str
    ease_factor: float
    interval: int
    repetitions: int
    next_review_date: datetime
    created_at: datetime
    last_review_date: datetime | None = None
    is_starred: bool = False
    is_active: bool = True
    version: int = 0

    @property
    def scheduling(self) -> SchedulingState:
        return SchedulingState(
            ease_factor=self.ease_factor,
            interval=self.interval,
            repetitions=self.repetitions,
        )


@dataclass(frozen=True)
class ReviewEntry:
    """
    A single review log entry. Created once per rating, never mutated.

    Attributes:
        id: Entry identifier.
        card_id: The card that was rated.
        quality: Rating 0-5.
        reviewed_at: When the rating happened.
        previous_interval: Card interval before the rating (days).
        new_interval: Card interval after the rating (days).
    """

    id: str
    card_id: str
    quality: int
    reviewed_at: datetime
    previous_interval: int
    new_interval: int

    @property
    def is_learned(self) -> bool:
        # Heuristic used by progress stats: the card left the zero-interval state.
        return self.previous_interval == 0 and self.new_interval > 0

    @property
    def is_correct(self) -> bool:
        return self.quality >= 3


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Per-project queue policy, consumed read-only by the queue builder.
    """

    weekend_learner_mode: bool = False
    weekday_new_cards: int = DEFAULT_WEEKDAY_NEW_CARDS
    weekend_new_cards: int = DEFAULT_WEEKEND_NEW_CARDS
    weekday_review_cards: int = DEFAULT_WEEKDAY_REVIEW_CARDS
    weekend_review_cards: int = DEFAULT_WEEKEND_REVIEW_CARDS
    prioritize_starred: bool = True
    weekly_card_target: int = DEFAULT_WEEKLY_CARD_TARGET

    def __post_init__(self):
        for name in (
            "weekday_new_cards",
            "weekend_new_cards",
            "weekday_review_cards",
            "weekend_review_cards",
            "weekly_card_target",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")


@dataclass(frozen=True)
class DailyQuota:
    max_new: int
    max_review: int


@dataclass(frozen=True)
class Classification:
    is_new: bool
    is_due: bool
    status: CardStatus


@dataclass(frozen=True)
class CardCounts:
    """Badge counts for a set of cards. `due` and `new` cover active cards only."""

    total: int
    active: int
    due: int
    new: int
    starred: int
    inactive: int
