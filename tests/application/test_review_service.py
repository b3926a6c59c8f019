"""Tests for rating actions and session orchestration."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from cadence.application.classifier import card_status, is_new
from cadence.application.review_service import ReviewService, apply_rating, validate_quality
from cadence.domain.errors import CardNotFoundError, ConcurrentReviewError, InvalidQualityError
from cadence.domain.scheduling.models import CardStatus, SchedulerSettings


class TestValidateQuality:
    @pytest.mark.parametrize("value", [0, 1, 2, 3, 4, 5])
    def test_accepts_range(self, value):
        assert validate_quality(value) == value

    @pytest.mark.parametrize("value", [-1, 6, 4.0, "4", None, True, False])
    def test_rejects_invalid(self, value):
        with pytest.raises(InvalidQualityError, match="quality must be an integer 0-5"):
            validate_quality(value)

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_quality(9)


class TestApplyRating:
    def test_first_success(self, make_card, now):
        card = make_card()
        updated, entry = apply_rating(card, 4, now)

        assert updated.interval == 1
        assert updated.repetitions == 1
        assert updated.last_review_date == now
        assert updated.next_review_date == now + timedelta(days=1)

        assert entry.card_id == card.id
        assert entry.quality == 4
        assert entry.reviewed_at == now
        assert entry.previous_interval == 0
        assert entry.new_interval == 1
        assert entry.is_learned

    def test_only_scheduling_fields_change(self, reviewed_card, now):
        card = reviewed_card(is_starred=True, front="hola", back="hello")
        updated, _ = apply_rating(card, 5, now)
        assert updated.front == "hola"
        assert updated.back == "hello"
        assert updated.is_starred is True
        assert updated.is_active is True
        assert updated.deck_id == card.deck_id
        assert updated.id == card.id
        assert updated.created_at == card.created_at
        assert updated.version == card.version

    def test_lapse_leaves_card_not_new(self, reviewed_card, now):
        updated, entry = apply_rating(reviewed_card(), 1, now)
        assert updated.repetitions == 0
        assert not is_new(updated)
        assert card_status(updated) == CardStatus.LEARNING
        assert not entry.is_learned


class TestReviewService:
    @pytest.mark.asyncio
    async def test_rate_card_persists_card_and_log(self, memory_repo, make_card, now):
        card = await memory_repo.add_card(make_card())
        service = ReviewService(memory_repo)

        stored = await service.rate_card(card.id, 4, now)

        assert stored.interval == 1
        assert stored.version == 1
        assert await memory_repo.get_card(card.id) == stored
        reviews = await memory_repo.list_reviews(card.id)
        assert len(reviews) == 1
        assert reviews[0].previous_interval == 0
        assert reviews[0].new_interval == 1

    @pytest.mark.asyncio
    async def test_successive_ratings(self, memory_repo, make_card, now):
        card = await memory_repo.add_card(make_card())
        service = ReviewService(memory_repo)

        await service.rate_card(card.id, 4, now)
        await service.rate_card(card.id, 4, now + timedelta(days=1))
        third = await service.rate_card(card.id, 4, now + timedelta(days=7))

        assert third.interval == 15
        assert third.repetitions == 3
        assert len(await memory_repo.list_reviews()) == 3

    @pytest.mark.asyncio
    async def test_invalid_quality_writes_nothing(self, memory_repo, make_card, now):
        card = await memory_repo.add_card(make_card())
        service = ReviewService(memory_repo)

        with pytest.raises(InvalidQualityError):
            await service.rate_card(card.id, 7, now)

        assert await memory_repo.list_reviews() == []
        assert (await memory_repo.get_card(card.id)).version == 0

    @pytest.mark.asyncio
    async def test_missing_card(self, memory_repo, now):
        with pytest.raises(CardNotFoundError):
            await ReviewService(memory_repo).rate_card("nope", 3, now)

    @pytest.mark.asyncio
    async def test_concurrent_rating_propagates(self, make_card, now):
        card = make_card()
        repo = AsyncMock()
        repo.get_card.return_value = card
        repo.record_review.side_effect = ConcurrentReviewError(card.id, 0)

        with pytest.raises(ConcurrentReviewError):
            await ReviewService(repo).rate_card(card.id, 4, now)

        _, kwargs = repo.record_review.call_args
        assert kwargs["expected_version"] == 0

    @pytest.mark.asyncio
    async def test_build_session_queue_filters_deck(
        self, memory_repo, make_card, reviewed_card, now
    ):
        await memory_repo.add_card(reviewed_card(deck_id="a"))
        await memory_repo.add_card(make_card(deck_id="b"))
        service = ReviewService(memory_repo, SchedulerSettings())

        result = await service.build_session_queue(now, deck_id="a")
        assert [c.deck_id for c in result.queue] == ["a"]

        everything = await service.build_session_queue(now)
        assert len(everything.queue) == 2

    @pytest.mark.asyncio
    async def test_rated_card_leaves_queue(self, memory_repo, make_card, now):
        card = await memory_repo.add_card(make_card())
        service = ReviewService(memory_repo)

        await service.rate_card(card.id, 0, now)
        result = await service.build_session_queue(now)
        assert result.queue == []

    @pytest.mark.asyncio
    async def test_get_counts(self, memory_repo, make_card, reviewed_card, now):
        await memory_repo.add_card(make_card())
        await memory_repo.add_card(reviewed_card(is_active=False))
        counts = await ReviewService(memory_repo).get_counts(now)
        assert counts.total == 2
        assert counts.due == 1
        assert counts.inactive == 1

    @pytest.mark.asyncio
    async def test_edit_card_keeps_scheduling(self, memory_repo, reviewed_card, now):
        card = await memory_repo.add_card(reviewed_card())
        service = ReviewService(memory_repo)
        rated = await service.rate_card(card.id, 4, now)

        edited = await service.edit_card(card.id, front="new front", is_starred=True)

        assert edited.front == "new front"
        assert edited.back == card.back
        assert edited.is_starred is True
        assert edited.scheduling == rated.scheduling
        assert edited.next_review_date == rated.next_review_date
        assert edited.last_review_date == rated.last_review_date
        assert edited.version == rated.version

    @pytest.mark.asyncio
    async def test_deactivated_card_leaves_queue(self, memory_repo, make_card, now):
        card = await memory_repo.add_card(make_card())
        service = ReviewService(memory_repo)

        await service.edit_card(card.id, is_active=False)

        result = await service.build_session_queue(now)
        assert result.queue == []
        assert (await service.get_counts(now)).inactive == 1

    @pytest.mark.asyncio
    async def test_edit_missing_card(self, memory_repo):
        with pytest.raises(CardNotFoundError):
            await ReviewService(memory_repo).edit_card("nope", front="x")

    @pytest.mark.asyncio
    async def test_list_reviews_by_card(self, memory_repo, make_card, now):
        first = await memory_repo.add_card(make_card())
        second = await memory_repo.add_card(make_card())
        service = ReviewService(memory_repo)
        await service.rate_card(first.id, 4, now)
        await service.rate_card(second.id, 2, now)

        reviews = await service.list_reviews(first.id)
        assert [r.card_id for r in reviews] == [first.id]
        assert len(await service.list_reviews()) == 2
