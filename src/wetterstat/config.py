"""JSON configuration file for credentials, station details and thresholds."""

from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator

from wetterstat.report.composer import (
    DEFAULT_DETAILS_URL,
    DEFAULT_STATION_NAME,
    DRY_SPELL_THRESHOLD,
)
from wetterstat.stats import MAX_LOOKBACK_DAYS, RAIN_UNIT_SCALE, SUN_THRESHOLD

log = structlog.get_logger()

DEFAULT_CONFIG_PATH = Path("config.json")

# Placeholder password written into fresh config files
PASSWORD_PLACEHOLDER = "CHANGEME"


class ConfigError(Exception):
    """The configuration file exists but cannot be used."""


class Config(BaseModel):
    """Contents of config.json. Unknown keys are ignored."""

    lemmy_server: str = "https://natur.23.nu"
    lemmy_community: str = "wetter"
    lemmy_username: str = "wetterbot"
    lemmy_password: str = PASSWORD_PLACEHOLDER
    lemmy_token: str = ""
    lemmy_token_exp: datetime | None = None

    mastodon_server: str = ""
    mastodon_token: str = ""
    mastodon_visibility: str = "unlisted"

    timezone: str = "Europe/Berlin"
    station_name: str = DEFAULT_STATION_NAME
    details_url: str = DEFAULT_DETAILS_URL
    post_hour: int = Field(default=4, ge=0, le=23)

    sun_threshold: float = Field(default=SUN_THRESHOLD, gt=0)
    rain_unit_scale: float = Field(default=RAIN_UNIT_SCALE, gt=0)
    dry_spell_threshold: int = Field(default=DRY_SPELL_THRESHOLD, ge=1)
    max_lookback_days: int = Field(default=MAX_LOOKBACK_DAYS, ge=1)

    retry_interval_minutes: float = Field(default=30, ge=0)
    max_retries: int = Field(default=48, ge=1)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone: {v}") from e
        return v

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def lemmy_enabled(self) -> bool:
        return bool(self.lemmy_server) and self.lemmy_password != PASSWORD_PLACEHOLDER

    @property
    def mastodon_enabled(self) -> bool:
        return bool(self.mastodon_server) and bool(self.mastodon_token)


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> Config:
    """Load the configuration, falling back to defaults if the file is missing.

    Raises:
        ConfigError: If the file exists but cannot be read, is not valid JSON
            or holds invalid values.
    """
    if not path.exists():
        log.info("config_missing_using_defaults", path=str(path))
        return Config()

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read configuration {path}: {e}") from e

    try:
        return Config.model_validate_json(text)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e


def save_config(config: Config, path: Path = DEFAULT_CONFIG_PATH) -> None:
    """Write the configuration as indented JSON."""
    path.write_text(config.model_dump_json(indent=2) + "\n", encoding="utf-8")
    log.info("config_saved", path=str(path))
