"""
SM-2 calculator.

Pure computation: given a card's scheduling state and a 0-5 quality rating,
return the next state. No I/O; the current time is passed in.
"""

import math
from datetime import datetime, timedelta

from cadence.domain.constants import (
    EASE_DECIMALS,
    FIRST_INTERVAL,
    LAPSE_INTERVAL,
    MIN_EASE_FACTOR,
    PASSING_QUALITY,
    SECOND_INTERVAL,
)
from cadence.domain.scheduling.models import NextState, SchedulingState


def round_half_up(value: float, decimals: int = 0) -> float:
    """
    Round half away from zero for non-negative values.

    Python's round() is banker's rounding (round(12.5) == 12), which would
    shorten some intervals by a day.
    """
    factor = 10**decimals
    return math.floor(value * factor + 0.5) / factor


def ease_delta(quality: int) -> float:
    """EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))"""
    miss = 5 - quality
    return 0.1 - miss * (0.08 + miss * 0.02)


def calculate_next_state(
    current: SchedulingState, quality: int, now: datetime
) -> NextState:
    """
    Compute the next scheduling state after a rating.

    Args:
        current: The card's ease factor, interval and repetitions.
        quality: Rating in 0..5. Assumed valid; callers validate first.
        now: The time of the rating. next_review_date = now + interval days.

    Returns:
        NextState with the rounded ease factor as the new canonical value.
    """
    ease_factor = current.ease_factor
    interval = current.interval
    repetitions = current.repetitions

    if quality < PASSING_QUALITY:
        repetitions = 0
        interval = LAPSE_INTERVAL
    else:
        if repetitions == 0:
            interval = FIRST_INTERVAL
        elif repetitions == 1:
            interval = SECOND_INTERVAL
        else:
            interval = int(round_half_up(interval * ease_factor))
        repetitions += 1

    # Applied on both branches, from the original quality input.
    ease_factor = max(ease_factor + ease_delta(quality), MIN_EASE_FACTOR)

    return NextState(
        ease_factor=round_half_up(ease_factor, EASE_DECIMALS),
        interval=interval,
        repetitions=repetitions,
        next_review_date=now + timedelta(days=interval),
    )
