"""Error types raised at the boundary of the scheduling core.

The calculator, classifier and queue builder never raise; these are for the
review service and the storage adapters.
"""


class CadenceError(Exception):
    """Base class for all cadence errors."""


class InvalidQualityError(CadenceError, ValueError):
    """A rating outside the closed integer range 0-5."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"quality must be an integer 0-5, got {value!r}")


class CardNotFoundError(CadenceError, LookupError):
    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(f"Card not found: {card_id}")


class ConcurrentReviewError(CadenceError):
    """
    The card's scheduling state changed between read and write.

    Raised by storage adapters when the optimistic version check fails,
    e.g. a duplicated network retry rating the same card twice.
    """

    def __init__(self, card_id: str, expected_version: int):
        self.card_id = card_id
        self.expected_version = expected_version
        super().__init__(
            f"Card {card_id} was modified concurrently (expected version {expected_version})"
        )
