"""Data models for the wetterstat pipeline."""

import math
from datetime import date, datetime, time, timedelta
from enum import Enum
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field


class QualityStatus(str, Enum):
    """Quality check result status."""

    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"


class TimeWindow(BaseModel):
    """Half-open interval [start, end) of epoch seconds covering one local day."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int
    tz: str

    @classmethod
    def for_day(cls, day: date, tz: ZoneInfo) -> "TimeWindow":
        """Window from local midnight of ``day`` to local midnight of the next day.

        Both ends are computed from wall-clock midnights, so DST days span
        23 or 25 hours.
        """
        start = datetime.combine(day, time.min, tzinfo=tz)
        end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
        return cls(start=int(start.timestamp()), end=int(end.timestamp()), tz=tz.key)

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.tz)

    @property
    def day(self) -> date:
        return datetime.fromtimestamp(self.start, self.zone).date()

    @property
    def midnight(self) -> int:
        """Local-midnight timestamp of the window's start day."""
        start = datetime.combine(self.day, time.min, tzinfo=self.zone)
        return int(start.timestamp())


class RawReading(BaseModel):
    """Single archive row. ``None`` marks a missing sensor value."""

    timestamp: int
    out_temp: float | None = None
    rain: float | None = None
    solar_radiation: float | None = None


class DayStats(BaseModel):
    """Derived statistics for one calendar day."""

    model_config = ConfigDict(frozen=True)

    t_max: float
    t_min: float
    rain_sum: float = Field(ge=0)
    sun_hours: int = Field(ge=0, le=24)

    @property
    def is_valid(self) -> bool:
        """False when either temperature extreme is NaN."""
        return not (math.isnan(self.t_max) or math.isnan(self.t_min))


class StreakState(BaseModel):
    """Dry and wet streak lengths counted backward from a reference day."""

    model_config = ConfigDict(frozen=True)

    days_since_rain: int = Field(default=0, ge=0)
    consecutive_rain_days: int = Field(default=0, ge=0)


class Report(BaseModel):
    """Composed post, handed unchanged to every publisher."""

    model_config = ConfigDict(frozen=True)

    title: str
    body: str

    def as_status(self) -> str:
        """Single-text rendering for platforms without a separate title."""
        return f"{self.title}\n{self.body}"


class QualityCheckResult(BaseModel):
    """Result of a data quality check."""

    check_name: str
    status: QualityStatus
    metric_value: float | None = None
    threshold: float | None = None
    message: str
    checked_at: datetime = Field(default_factory=datetime.now)
