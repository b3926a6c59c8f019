import dataclasses
import os
from datetime import datetime, timedelta, timezone

import pytest

from cadence.application.cards import new_card
from cadence.domain.scheduling.models import Card
from cadence.infrastructure.adapters.memory_store import InMemoryReviewRepository

# Wednesday
NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_card():
    """Factory for cards; defaults to a brand-new card created at NOW."""
    counter = {"n": 0}

    def _make(**overrides) -> Card:
        counter["n"] += 1
        card = new_card(
            deck_id=overrides.pop("deck_id", "deck-1"),
            front=overrides.pop("front", f"front {counter['n']}"),
            back=overrides.pop("back", f"back {counter['n']}"),
            now=overrides.pop("created_at", NOW),
            card_id=overrides.pop("id", f"c{counter['n']}"),
        )
        return dataclasses.replace(card, **overrides)

    return _make


@pytest.fixture
def reviewed_card(make_card):
    """A card in review: studied before and due yesterday."""

    def _make(**overrides) -> Card:
        defaults = {
            "repetitions": 3,
            "interval": 10,
            "ease_factor": 2.5,
            "last_review_date": NOW - timedelta(days=11),
            "next_review_date": NOW - timedelta(days=1),
        }
        defaults.update(overrides)
        return make_card(**defaults)

    return _make


@pytest.fixture
def memory_repo():
    return InMemoryReviewRepository()


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config files
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith("CADENCE_"):
            monkeypatch.delenv(key)
    return home
