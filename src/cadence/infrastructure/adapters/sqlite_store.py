"""
SQLite Review Repository: Infrastructure adapter for a local database file.

Implements ReviewRepository on top of the standard sqlite3 module.
"""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from cadence.domain.errors import CardNotFoundError, ConcurrentReviewError
from cadence.domain.scheduling.models import Card, ReviewEntry
from cadence.domain.scheduling.ports import ReviewRepository

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS cards (
    id TEXT PRIMARY KEY,
    deck_id TEXT NOT NULL,
    front TEXT NOT NULL,
    back TEXT NOT NULL,
    ease_factor REAL NOT NULL DEFAULT 2.5,
    interval INTEGER NOT NULL DEFAULT 0,
    repetitions INTEGER NOT NULL DEFAULT 0,
    next_review_date TEXT NOT NULL,
    last_review_date TEXT,
    is_starred INTEGER NOT NULL DEFAULT 0,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    version INTEGER NOT NULL DEFAULT 0,
    seq INTEGER
);
CREATE TABLE IF NOT EXISTS reviews (
    id TEXT PRIMARY KEY,
    card_id TEXT NOT NULL REFERENCES cards(id) ON DELETE CASCADE,
    quality INTEGER NOT NULL,
    reviewed_at TEXT NOT NULL,
    previous_interval INTEGER NOT NULL,
    new_interval INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_cards_deck ON cards(deck_id);
CREATE INDEX IF NOT EXISTS idx_reviews_card ON reviews(card_id);
"""

CARD_COLUMNS = (
    "id, deck_id, front, back, ease_factor, interval, repetitions, "
    "next_review_date, last_review_date, is_starred, is_active, created_at, version"
)


def _to_text(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _from_text(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value is not None else None


def _row_to_card(row: sqlite3.Row) -> Card:
    return Card(
        id=row["id"],
        deck_id=row["deck_id"],
        front=row["front"],
        back=row["back"],
        ease_factor=row["ease_factor"],
        interval=row["interval"],
        repetitions=row["repetitions"],
        next_review_date=datetime.fromisoformat(row["next_review_date"]),
        last_review_date=_from_text(row["last_review_date"]),
        is_starred=bool(row["is_starred"]),
        is_active=bool(row["is_active"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        version=row["version"],
    )


def _row_to_review(row: sqlite3.Row) -> ReviewEntry:
    return ReviewEntry(
        id=row["id"],
        card_id=row["card_id"],
        quality=row["quality"],
        reviewed_at=datetime.fromisoformat(row["reviewed_at"]),
        previous_interval=row["previous_interval"],
        new_interval=row["new_interval"],
    )


class SqliteReviewRepository(ReviewRepository):
    """
    Stores cards and reviews in a SQLite file (or ":memory:").

    A rating is one transaction: a version-guarded UPDATE of the card and
    the INSERT of its review entry.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(
            self.db_path, isolation_level=None, check_same_thread=False
        )
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._conn.executescript(SCHEMA)
        logger.debug(f"Opened review database at {self.db_path}")

    def close(self) -> None:
        self._conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    async def add_card(self, card: Card) -> Card:
        try:
            self._conn.execute(
                f"INSERT INTO cards ({CARD_COLUMNS}, seq) VALUES "
                "(?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, "
                "(SELECT COALESCE(MAX(seq), 0) + 1 FROM cards))",
                (
                    card.id,
                    card.deck_id,
                    card.front,
                    card.back,
                    card.ease_factor,
                    card.interval,
                    card.repetitions,
                    _to_text(card.next_review_date),
                    _to_text(card.last_review_date),
                    int(card.is_starred),
                    int(card.is_active),
                    _to_text(card.created_at),
                    card.version,
                ),
            )
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Card already exists: {card.id}") from e
        return card

    async def get_card(self, card_id: str) -> Card | None:
        row = self._conn.execute(
            f"SELECT {CARD_COLUMNS} FROM cards WHERE id = ?", (card_id,)
        ).fetchone()
        return _row_to_card(row) if row else None

    async def list_cards(self, deck_id: str | None = None) -> list[Card]:
        if deck_id is not None:
            rows = self._conn.execute(
                f"SELECT {CARD_COLUMNS} FROM cards WHERE deck_id = ? ORDER BY seq",
                (deck_id,),
            )
        else:
            rows = self._conn.execute(f"SELECT {CARD_COLUMNS} FROM cards ORDER BY seq")
        return [_row_to_card(r) for r in rows]

    async def update_card_content(self, card: Card) -> Card:
        cursor = self._conn.execute(
            "UPDATE cards SET front = ?, back = ?, is_starred = ?, is_active = ? "
            "WHERE id = ?",
            (card.front, card.back, int(card.is_starred), int(card.is_active), card.id),
        )
        if cursor.rowcount == 0:
            raise CardNotFoundError(card.id)
        stored = await self.get_card(card.id)
        if stored is None:
            raise CardNotFoundError(card.id)
        return stored

    async def record_review(
        self, card: Card, entry: ReviewEntry, expected_version: int
    ) -> Card:
        conn = self._conn
        conn.execute("BEGIN IMMEDIATE")
        try:
            cursor = conn.execute(
                "UPDATE cards SET ease_factor = ?, interval = ?, repetitions = ?, "
                "next_review_date = ?, last_review_date = ?, version = version + 1 "
                "WHERE id = ? AND version = ?",
                (
                    card.ease_factor,
                    card.interval,
                    card.repetitions,
                    _to_text(card.next_review_date),
                    _to_text(card.last_review_date),
                    card.id,
                    expected_version,
                ),
            )
            if cursor.rowcount == 0:
                exists = conn.execute(
                    "SELECT 1 FROM cards WHERE id = ?", (card.id,)
                ).fetchone()
                if exists is None:
                    raise CardNotFoundError(card.id)
                raise ConcurrentReviewError(card.id, expected_version)

            conn.execute(
                "INSERT INTO reviews (id, card_id, quality, reviewed_at, "
                "previous_interval, new_interval) VALUES (?, ?, ?, ?, ?, ?)",
                (
                    entry.id,
                    entry.card_id,
                    entry.quality,
                    _to_text(entry.reviewed_at),
                    entry.previous_interval,
                    entry.new_interval,
                ),
            )
        except Exception:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")

        stored = await self.get_card(card.id)
        if stored is None:
            raise CardNotFoundError(card.id)
        return stored

    async def list_reviews(self, card_id: str | None = None) -> list[ReviewEntry]:
        # ISO text sorts chronologically only within one UTC offset; sort in Python.
        if card_id is not None:
            rows = self._conn.execute(
                "SELECT * FROM reviews WHERE card_id = ?", (card_id,)
            )
        else:
            rows = self._conn.execute("SELECT * FROM reviews")
        return sorted((_row_to_review(r) for r in rows), key=lambda r: r.reviewed_at)
