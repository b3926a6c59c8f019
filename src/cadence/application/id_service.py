"""Identifiers for cards and review log entries."""

from ulid import ULID


def generate_card_id() -> str:
    """Generate a sortable card ID using ULID."""
    return f"card_{ULID()}"


def generate_review_id() -> str:
    return f"rev_{ULID()}"
