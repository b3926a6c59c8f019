from pathlib import Path
from typing import Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from cadence.domain.constants import (
    DEFAULT_WEEKDAY_NEW_CARDS,
    DEFAULT_WEEKDAY_REVIEW_CARDS,
    DEFAULT_WEEKEND_NEW_CARDS,
    DEFAULT_WEEKEND_REVIEW_CARDS,
    DEFAULT_WEEKLY_CARD_TARGET,
)
from cadence.domain.scheduling.models import SchedulerSettings


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/cadence/config.toml",
        Path.home() / ".cadence.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for cadence.
    Supports loading from:
    1. Environment variables (CADENCE_*)
    2. Config file (~/.config/cadence/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="CADENCE_",
        extra="ignore",
    )

    # Storage
    backend: Literal["memory", "sqlite"] = "sqlite"
    database_path: Path = Field(
        default_factory=lambda: Path.home() / ".local/share/cadence/cadence.db"
    )

    # Weekend detection zone (IANA name). None = server local time.
    timezone: str | None = None

    # Scheduler settings
    weekend_learner_mode: bool = False
    weekday_new_cards: int = Field(default=DEFAULT_WEEKDAY_NEW_CARDS, ge=0)
    weekend_new_cards: int = Field(default=DEFAULT_WEEKEND_NEW_CARDS, ge=0)
    weekday_review_cards: int = Field(default=DEFAULT_WEEKDAY_REVIEW_CARDS, ge=0)
    weekend_review_cards: int = Field(default=DEFAULT_WEEKEND_REVIEW_CARDS, ge=0)
    prioritize_starred: bool = True
    weekly_card_target: int = Field(default=DEFAULT_WEEKLY_CARD_TARGET, ge=0)

    # Log level for the CLI: 0 warnings, 1 info, 2 debug
    verbose: int = Field(default=0, ge=0)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins
        toml_file = next((f for f in config_files() if f.exists()), None)

        # Earlier sources take priority: overrides, then env, then TOML.
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: str | None) -> str | None:
        if v is None:
            return None
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @field_validator("database_path", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path:
        return Path(v).expanduser()

    def tzinfo(self) -> ZoneInfo | None:
        return ZoneInfo(self.timezone) if self.timezone else None

    def scheduler_settings(self) -> SchedulerSettings:
        return SchedulerSettings(
            weekend_learner_mode=self.weekend_learner_mode,
            weekday_new_cards=self.weekday_new_cards,
            weekend_new_cards=self.weekend_new_cards,
            weekday_review_cards=self.weekday_review_cards,
            weekend_review_cards=self.weekend_review_cards,
            prioritize_starred=self.prioritize_starred,
            weekly_card_target=self.weekly_card_target,
        )


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/cadence/config.toml (if exists)
    3. Environment variables (CADENCE_*)
    4. cli_overrides (passed from Typer), None values dropped
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
