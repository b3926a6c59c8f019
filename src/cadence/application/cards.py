"""Card lifecycle helpers: creation in the new state and content edits."""

import dataclasses
from datetime import datetime

from cadence.application.id_service import generate_card_id
from cadence.domain.constants import DEFAULT_EASE_FACTOR
from cadence.domain.scheduling.models import Card


def new_card(
    deck_id: str,
    front: str,
    back: str,
    now: datetime,
    is_starred: bool = False,
    card_id: str | None = None,
) -> Card:
    """
    Create a card in the "new" state: due immediately, never reviewed.
    """
    return Card(
        id=card_id or generate_card_id(),
        deck_id=deck_id,
        front=front,
        back=back,
        ease_factor=DEFAULT_EASE_FACTOR,
        interval=0,
        repetitions=0,
        next_review_date=now,
        created_at=now,
        last_review_date=None,
        is_starred=is_starred,
        is_active=True,
    )


def edit_card_content(
    card: Card,
    front: str | None = None,
    back: str | None = None,
    is_starred: bool | None = None,
    is_active: bool | None = None,
) -> Card:
    """
    Return a copy with content/flag changes. Scheduling fields are never touched.
    """
    changes: dict[str, object] = {}
    if front is not None:
        changes["front"] = front
    if back is not None:
        changes["back"] = back
    if is_starred is not None:
        changes["is_starred"] = is_starred
    if is_active is not None:
        changes["is_active"] = is_active
    return dataclasses.replace(card, **changes)
