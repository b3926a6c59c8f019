"""Cadence CLI: review queue, ratings, card edits, history, stats, config and server."""

import asyncio
import dataclasses
import json
import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from cadence.application.cards import new_card
from cadence.application.classifier import card_status
from cadence.application.config import AppConfig, resolve_config
from cadence.application.factory import get_review_repository
from cadence.application.review_service import ReviewService
from cadence.application.stats.metrics_calculator import MetricsCalculator
from cadence.application.stats.service import ReviewStatsService
from cadence.application.utils.text import QUALITY_LABELS, days_until_review, format_interval
from cadence.clock import local_now
from cadence.domain.errors import CadenceError

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="cadence: SM-2 spaced-repetition review scheduler.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage cadence configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


class Backend(str, Enum):
    sqlite = "sqlite"
    memory = "memory"


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    backend: Annotated[
        Backend | None,
        typer.Option(help="Storage backend. memory keeps nothing between invocations."),
    ] = None,
    database: Annotated[
        Path | None, typer.Option("--database", "-d", help="SQLite database path.")
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for cadence."""
    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {
        "backend": backend.value if backend else None,
        "database_path": database,
        "verbose": verbose or None,
    }


def _config(ctx: typer.Context) -> AppConfig:
    config = resolve_config(ctx.obj.get("overrides") if ctx.obj else None)
    if config.verbose:
        logging.getLogger("cadence").setLevel(
            logging.DEBUG if config.verbose > 1 else logging.INFO
        )
    return config


def _fail(error: Exception) -> typer.Exit:
    typer.secho(f"Error: {error}", fg="red", err=True)
    return typer.Exit(1)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def add(
    ctx: typer.Context,
    deck: Annotated[str, typer.Argument(help="Deck ID.")],
    front: Annotated[str, typer.Argument(help="Prompt side.")],
    back: Annotated[str, typer.Argument(help="Answer side.")],
    starred: Annotated[bool, typer.Option("--starred", help="Mark as difficult.")] = False,
):
    """Add a card in the [bold]new[/bold] state (due immediately)."""
    config = _config(ctx)

    async def run():
        repo = get_review_repository(config)
        return await repo.add_card(new_card(deck, front, back, local_now(), is_starred=starred))

    card = asyncio.run(run())
    typer.echo(card.id)


@app.command()
def queue(
    ctx: typer.Context,
    deck: Annotated[str | None, typer.Option(help="Filter by deck ID.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show today's review queue: due cards first, then new cards."""
    config = _config(ctx)
    now = local_now()

    async def run():
        service = ReviewService(
            get_review_repository(config), config.scheduler_settings(), config.tzinfo()
        )
        return await service.build_session_queue(now, deck)

    result = asyncio.run(run())

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "due_total": result.due_total,
                    "new_total": result.new_total,
                    "max_review": result.quota.max_review,
                    "max_new": result.quota.max_new,
                    "cards": [c.id for c in result.queue],
                },
                indent=2,
            )
        )
        return

    if not result.queue:
        typer.secho("No cards to review. All caught up!", fg="green")
        return

    typer.echo(
        f"Due: {result.due_in_queue}/{result.due_total}  "
        f"New: {result.new_in_queue}/{result.new_total}"
    )
    for card in result.queue:
        star = "*" if card.is_starred else " "
        typer.echo(f"{star} {card.id}  [{card_status(card).value}]  {card.front}")


@app.command()
def review(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card to rate.")],
    quality: Annotated[int, typer.Argument(help="Recall quality 0-5.")],
):
    """[bold green]Rate[/bold green] a card and reschedule it."""
    config = _config(ctx)
    now = local_now()

    async def run():
        service = ReviewService(
            get_review_repository(config), config.scheduler_settings(), config.tzinfo()
        )
        return await service.rate_card(card_id, quality, now)

    try:
        card = asyncio.run(run())
    except CadenceError as e:
        raise _fail(e) from e

    typer.echo(f"Rated {quality} ({QUALITY_LABELS[quality]}).")
    typer.echo(
        f"Next review in {format_interval(days_until_review(card, now))} "
        f"({card.next_review_date.date().isoformat()}), ease {card.ease_factor:.2f}"
    )


@app.command()
def edit(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card to edit.")],
    front: Annotated[str | None, typer.Option(help="New prompt side.")] = None,
    back: Annotated[str | None, typer.Option(help="New answer side.")] = None,
    star: Annotated[
        bool | None, typer.Option("--star/--unstar", help="Mark or unmark as difficult.")
    ] = None,
    active: Annotated[
        bool | None,
        typer.Option("--active/--inactive", help="Inactive cards are never queued."),
    ] = None,
):
    """Edit a card's content or flags. Its schedule is left untouched."""
    config = _config(ctx)

    async def run():
        service = ReviewService(
            get_review_repository(config), config.scheduler_settings(), config.tzinfo()
        )
        return await service.edit_card(
            card_id, front=front, back=back, is_starred=star, is_active=active
        )

    try:
        card = asyncio.run(run())
    except CadenceError as e:
        raise _fail(e) from e

    flags = []
    if card.is_starred:
        flags.append("starred")
    if not card.is_active:
        flags.append("inactive")
    typer.echo(f"{card.id}  {card.front}" + (f"  [{', '.join(flags)}]" if flags else ""))


@app.command()
def history(
    ctx: typer.Context,
    card_id: Annotated[str | None, typer.Argument(help="Only this card's reviews.")] = None,
):
    """Show the review log, oldest first, with overall accuracy."""
    config = _config(ctx)

    async def run():
        service = ReviewService(get_review_repository(config))
        return await service.list_reviews(card_id)

    reviews = asyncio.run(run())

    if not reviews:
        typer.echo("No reviews yet.")
        return

    for r in reviews:
        typer.echo(
            f"{r.reviewed_at.isoformat(timespec='minutes')}  {r.card_id}  "
            f"q={r.quality} {QUALITY_LABELS[r.quality]:<30} "
            f"{r.previous_interval} -> {r.new_interval} days"
        )
    accuracy = MetricsCalculator(config.tzinfo()).session_accuracy(reviews)
    typer.echo(f"Accuracy: {accuracy}% of {len(reviews)} reviews")


@app.command()
def stats(
    ctx: typer.Context,
    days: Annotated[int, typer.Option(help="Number of days to report.", min=1)] = 7,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Daily review counts and weekly learning progress."""
    config = _config(ctx)
    now = local_now()

    async def run():
        service = ReviewStatsService(
            get_review_repository(config),
            config.scheduler_settings(),
            MetricsCalculator(config.tzinfo()),
        )
        return await service.get_daily_stats(now, days), await service.get_weekly_progress(now)

    daily, weekly = asyncio.run(run())

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "daily": [
                        {**dataclasses.asdict(d), "date": d.date.isoformat()} for d in daily
                    ],
                    "weekly": dataclasses.asdict(weekly),
                },
                indent=2,
            )
        )
        return

    for d in daily:
        typer.echo(
            f"{d.date.isoformat()}  reviewed {d.cards_reviewed:>3}  "
            f"learned {d.cards_learned:>3}  correct {d.correct_answers}/{d.total_answers}"
        )
    typer.echo(
        f"This week: {weekly.cards_learned}/{weekly.target} learned, "
        f"{weekly.days_remaining} days left"
    )


@app.command()
def server(
    host: Annotated[str, typer.Option(help="Bind address.")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Bind port.")] = 8777,
    reload: Annotated[bool, typer.Option("--reload", help="Auto-reload on changes.")] = False,
):
    """Run the review API server."""
    import uvicorn

    uvicorn.run("cadence.server:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _config(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


def main():
    app()


if __name__ == "__main__":
    main()
