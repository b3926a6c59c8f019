import dataclasses
import logging
import time
from contextlib import asynccontextmanager
from datetime import date, datetime
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, StrictInt

from cadence.application.classifier import classify
from cadence.application.config import AppConfig, resolve_config
from cadence.application.factory import get_review_repository
from cadence.application.review_service import ReviewService
from cadence.application.stats.metrics_calculator import MetricsCalculator
from cadence.application.stats.service import ReviewStatsService
from cadence.clock import local_now
from cadence.consts import VERSION
from cadence.domain.errors import CardNotFoundError, ConcurrentReviewError, InvalidQualityError
from cadence.domain.scheduling.models import Card, ReviewEntry
from cadence.domain.scheduling.ports import ReviewRepository

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cadence.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Cadence Server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("Cadence Server shutting down...")


app = FastAPI(
    title="Cadence Server",
    description="Review scheduling API: daily queues, ratings and progress stats.",
    version=VERSION,
    lifespan=lifespan,
)

start_time = time.time()


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


@lru_cache
def get_config() -> AppConfig:
    return resolve_config()


@lru_cache
def get_repository() -> ReviewRepository:
    return get_review_repository(get_config())


def get_clock() -> datetime:
    return local_now()


def get_review_service(
    config: AppConfig = Depends(get_config),
    repo: ReviewRepository = Depends(get_repository),
) -> ReviewService:
    return ReviewService(repo, config.scheduler_settings(), config.tzinfo())


def get_stats_service(
    config: AppConfig = Depends(get_config),
    repo: ReviewRepository = Depends(get_repository),
) -> ReviewStatsService:
    return ReviewStatsService(
        repo, config.scheduler_settings(), MetricsCalculator(config.tzinfo())
    )


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class CardResponse(BaseModel):
    id: str
    deck_id: str
    front: str
    back: str
    ease_factor: float
    interval: int
    repetitions: int
    next_review_date: datetime
    last_review_date: datetime | None
    is_starred: bool
    is_active: bool
    created_at: datetime
    version: int
    status: str
    is_new: bool
    is_due: bool


def _card_response(card: Card, now: datetime) -> CardResponse:
    c = classify(card, now)
    return CardResponse(
        **dataclasses.asdict(card),
        status=c.status.value,
        is_new=c.is_new,
        is_due=c.is_due,
    )


class QueueResponse(BaseModel):
    cards: list[CardResponse]
    due_total: int
    new_total: int
    max_review: int
    max_new: int


class ReviewRequest(BaseModel):
    quality: StrictInt


class CardEditRequest(BaseModel):
    front: str | None = None
    back: str | None = None
    is_starred: bool | None = None
    is_active: bool | None = None


class ReviewEntryResponse(BaseModel):
    id: str
    card_id: str
    quality: int
    reviewed_at: datetime
    previous_interval: int
    new_interval: int
    is_learned: bool


class ReviewLogResponse(BaseModel):
    reviews: list[ReviewEntryResponse]
    accuracy: int


class CountsResponse(BaseModel):
    total: int
    active: int
    due: int
    new: int
    starred: int
    inactive: int


class DailyStatsResponse(BaseModel):
    date: date
    cards_reviewed: int
    cards_learned: int
    correct_answers: int
    total_answers: int


class WeeklyProgressResponse(BaseModel):
    cards_learned: int
    target: int
    days_remaining: int


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.get("/queue", response_model=QueueResponse)
async def get_queue(
    deck_id: str | None = None,
    service: ReviewService = Depends(get_review_service),
    now: datetime = Depends(get_clock),
):
    """
    Build today's review queue: due cards first, then new cards.
    """
    result = await service.build_session_queue(now, deck_id)
    return QueueResponse(
        cards=[_card_response(c, now) for c in result.queue],
        due_total=result.due_total,
        new_total=result.new_total,
        max_review=result.quota.max_review,
        max_new=result.quota.max_new,
    )


@app.post("/cards/{card_id}/review", response_model=CardResponse)
async def review_card(
    card_id: str,
    req: ReviewRequest,
    service: ReviewService = Depends(get_review_service),
    now: datetime = Depends(get_clock),
):
    """Record a 0-5 rating and return the rescheduled card."""
    try:
        card = await service.rate_card(card_id, req.quality, now)
    except InvalidQualityError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except CardNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ConcurrentReviewError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return _card_response(card, now)


@app.get("/counts", response_model=CountsResponse)
async def get_counts(
    deck_id: str | None = None,
    service: ReviewService = Depends(get_review_service),
    now: datetime = Depends(get_clock),
):
    counts = await service.get_counts(now, deck_id)
    return CountsResponse(**dataclasses.asdict(counts))


@app.get("/stats/daily", response_model=list[DailyStatsResponse])
async def get_daily_stats(
    days: int = Query(default=7, ge=1, le=366),
    service: ReviewStatsService = Depends(get_stats_service),
    now: datetime = Depends(get_clock),
):
    stats = await service.get_daily_stats(now, days)
    return [DailyStatsResponse(**dataclasses.asdict(s)) for s in stats]


@app.get("/stats/weekly", response_model=WeeklyProgressResponse)
async def get_weekly_stats(
    service: ReviewStatsService = Depends(get_stats_service),
    now: datetime = Depends(get_clock),
):
    progress = await service.get_weekly_progress(now)
    return WeeklyProgressResponse(**dataclasses.asdict(progress))


@app.patch("/cards/{card_id}", response_model=CardResponse)
async def edit_card(
    card_id: str,
    req: CardEditRequest,
    service: ReviewService = Depends(get_review_service),
    now: datetime = Depends(get_clock),
):
    """Edit content or flags. Scheduling state is not affected."""
    try:
        card = await service.edit_card(card_id, **req.model_dump(exclude_none=True))
    except CardNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return _card_response(card, now)


def _entry_response(entry: ReviewEntry) -> ReviewEntryResponse:
    return ReviewEntryResponse(**dataclasses.asdict(entry), is_learned=entry.is_learned)


@app.get("/reviews", response_model=ReviewLogResponse)
async def list_reviews(
    card_id: str | None = None,
    config: AppConfig = Depends(get_config),
    service: ReviewService = Depends(get_review_service),
):
    """Review log, oldest first, optionally for one card."""
    reviews = await service.list_reviews(card_id)
    return ReviewLogResponse(
        reviews=[_entry_response(r) for r in reviews],
        accuracy=MetricsCalculator(config.tzinfo()).session_accuracy(reviews),
    )
