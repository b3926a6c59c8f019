"""
Card classifier: stateless predicates deriving study status from scheduling state.
"""

from collections.abc import Iterable
from datetime import datetime

from cadence.domain.constants import GRADUATED_INTERVAL, LEARNING_REPETITIONS
from cadence.domain.scheduling.models import Card, CardCounts, CardStatus, Classification


def is_new(card: Card) -> bool:
    """
    A card never reviewed.

    A lapsed card also has repetitions == 0 but keeps its last_review_date,
    so it is not new.
    """
    return card.repetitions == 0 and card.last_review_date is None


def is_due(card: Card, now: datetime) -> bool:
    return card.next_review_date <= now


def card_status(card: Card) -> CardStatus:
    if is_new(card):
        return CardStatus.NEW
    if card.repetitions < LEARNING_REPETITIONS:
        return CardStatus.LEARNING
    if card.interval >= GRADUATED_INTERVAL:
        return CardStatus.GRADUATED
    return CardStatus.REVIEW


def classify(card: Card, now: datetime) -> Classification:
    return Classification(
        is_new=is_new(card),
        is_due=is_due(card, now),
        status=card_status(card),
    )


def active_cards(cards: Iterable[Card]) -> list[Card]:
    """Inactive cards never enter due/new counts or queues."""
    return [c for c in cards if c.is_active]


def count_cards(cards: Iterable[Card], now: datetime) -> CardCounts:
    """
    Count cards for deck badges.

    New cards that are already due are counted as due only, matching the
    queue's bucketing.
    """
    all_cards = list(cards)
    active = active_cards(all_cards)
    due = [c for c in active if is_due(c, now)]
    new = [c for c in active if is_new(c) and not is_due(c, now)]

    return CardCounts(
        total=len(all_cards),
        active=len(active),
        due=len(due),
        new=len(new),
        starred=sum(1 for c in all_cards if c.is_starred),
        inactive=len(all_cards) - len(active),
    )
