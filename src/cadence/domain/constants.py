"""Centralized constants for the cadence scheduler.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- SM-2 ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
PASSING_QUALITY = 3
MIN_QUALITY = 0
MAX_QUALITY = 5
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6
LAPSE_INTERVAL = 1  # a lapsed card comes back tomorrow, never in the same session
EASE_DECIMALS = 2

# ---------- Card status ----------
LEARNING_REPETITIONS = 3
GRADUATED_INTERVAL = 21

# ---------- Queue Builder ----------
DEFAULT_MAX_NEW = 10
DEFAULT_MAX_REVIEW = 50
WEEKEND_DAYS = (5, 6)  # datetime.weekday(): Saturday, Sunday

# ---------- Scheduler settings defaults ----------
DEFAULT_WEEKDAY_NEW_CARDS = 5
DEFAULT_WEEKEND_NEW_CARDS = 15
DEFAULT_WEEKDAY_REVIEW_CARDS = 20
DEFAULT_WEEKEND_REVIEW_CARDS = 50
DEFAULT_WEEKLY_CARD_TARGET = 50

# ---------- Stats ----------
DEFAULT_STATS_DAYS = 7
