import asyncio
from datetime import timedelta
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from cadence.application.config import AppConfig
from cadence.consts import VERSION
from cadence.domain.errors import ConcurrentReviewError
from cadence.infrastructure.adapters.memory_store import InMemoryReviewRepository
from cadence.server import app, get_clock, get_config, get_repository


@pytest.fixture
def repo():
    return InMemoryReviewRepository()


@pytest.fixture
def client(repo, mock_home, now):
    app.dependency_overrides[get_repository] = lambda: repo
    app.dependency_overrides[get_clock] = lambda: now
    app.dependency_overrides[get_config] = lambda: AppConfig(
        backend="memory", weekend_learner_mode=True, weekday_review_cards=1
    )
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(repo, make_card, reviewed_card, now):
    cards = [
        reviewed_card(id="due-1", next_review_date=now - timedelta(days=2)),
        reviewed_card(id="due-2", next_review_date=now - timedelta(days=1), is_starred=True),
        make_card(id="new-1", next_review_date=now + timedelta(hours=1)),
        make_card(id="gone", is_active=False),
    ]
    for card in cards:
        asyncio.run(repo.add_card(card))
    return cards


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == VERSION


def test_get_version(client):
    response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": VERSION}


def test_queue(client, seeded):
    response = client.get("/queue")
    assert response.status_code == 200
    data = response.json()
    # weekday review quota is 1; the starred card wins
    assert [c["id"] for c in data["cards"]] == ["due-2", "new-1"]
    assert data["due_total"] == 2
    assert data["new_total"] == 1
    assert data["max_review"] == 1
    assert data["max_new"] == 5
    assert data["cards"][1]["status"] == "new"
    assert data["cards"][1]["is_due"] is False


def test_review_card(client, seeded):
    response = client.post("/cards/new-1/review", json={"quality": 4})
    assert response.status_code == 200
    data = response.json()
    assert data["interval"] == 1
    assert data["repetitions"] == 1
    assert data["version"] == 1
    assert data["status"] == "learning"


@pytest.mark.parametrize("quality", [6, -1])
def test_review_out_of_range(client, seeded, quality):
    response = client.post("/cards/new-1/review", json={"quality": quality})
    assert response.status_code == 422
    assert "quality must be an integer 0-5" in response.json()["detail"]


@pytest.mark.parametrize("quality", ["4", 4.5, True, None])
def test_review_wrong_type(client, seeded, quality):
    response = client.post("/cards/new-1/review", json={"quality": quality})
    assert response.status_code == 422


def test_review_unknown_card(client):
    response = client.post("/cards/nope/review", json={"quality": 3})
    assert response.status_code == 404


def test_review_conflict(client, repo, seeded):
    with patch.object(
        repo, "record_review", side_effect=ConcurrentReviewError("new-1", 0)
    ):
        response = client.post("/cards/new-1/review", json={"quality": 3})
    assert response.status_code == 409


def test_counts(client, seeded):
    response = client.get("/counts")
    assert response.status_code == 200
    assert response.json() == {
        "total": 4,
        "active": 3,
        "due": 2,
        "new": 1,
        "starred": 1,
        "inactive": 1,
    }


def test_stats(client, seeded):
    client.post("/cards/new-1/review", json={"quality": 5})

    daily = client.get("/stats/daily", params={"days": 3}).json()
    assert len(daily) == 3
    assert daily[-1]["date"] == "2025-01-15"
    assert daily[-1]["cards_learned"] == 1

    weekly = client.get("/stats/weekly").json()
    assert weekly == {"cards_learned": 1, "target": 50, "days_remaining": 4}


def test_stats_days_bounds(client):
    assert client.get("/stats/daily", params={"days": 0}).status_code == 422


def test_edit_card_keeps_schedule(client, repo, seeded):
    before = asyncio.run(repo.get_card("due-1"))

    response = client.patch("/cards/due-1", json={"front": "updated", "is_starred": True})
    assert response.status_code == 200
    data = response.json()
    assert data["front"] == "updated"
    assert data["back"] == before.back
    assert data["is_starred"] is True
    assert data["interval"] == before.interval
    assert data["repetitions"] == before.repetitions
    assert data["ease_factor"] == before.ease_factor
    assert data["version"] == before.version

    stored = asyncio.run(repo.get_card("due-1"))
    assert stored.scheduling == before.scheduling
    assert stored.next_review_date == before.next_review_date


def test_deactivated_card_leaves_queue(client, seeded):
    assert client.patch("/cards/due-2", json={"is_active": False}).status_code == 200

    data = client.get("/queue").json()
    assert [c["id"] for c in data["cards"]] == ["due-1", "new-1"]
    assert data["due_total"] == 1


def test_edit_unknown_card(client):
    assert client.patch("/cards/nope", json={"front": "x"}).status_code == 404


def test_edit_rejects_non_bool_flag(client, seeded):
    response = client.patch("/cards/due-1", json={"is_active": "maybe"})
    assert response.status_code == 422


def test_reviews_log(client, seeded):
    client.post("/cards/new-1/review", json={"quality": 5})
    client.post("/cards/due-1/review", json={"quality": 1})

    everything = client.get("/reviews").json()
    assert len(everything["reviews"]) == 2
    assert everything["accuracy"] == 50

    one = client.get("/reviews", params={"card_id": "new-1"}).json()
    assert [r["card_id"] for r in one["reviews"]] == ["new-1"]
    assert one["reviews"][0]["is_learned"] is True
    assert one["accuracy"] == 100


def test_reviews_empty(client):
    assert client.get("/reviews").json() == {"reviews": [], "accuracy": 0}
