"""Daily statistics from raw archive readings."""

import math
from collections.abc import Sequence
from datetime import datetime
from zoneinfo import ZoneInfo

import structlog

from wetterstat.archive import ArchiveReader
from wetterstat.models import DayStats, RawReading, TimeWindow

log = structlog.get_logger()

# Solar radiation (W/m²) from which an hour counts as a sunshine hour
SUN_THRESHOLD = 120.0

# Factor from the stored archive_day_rain sum to millimetres
RAIN_UNIT_SCALE = 10.0


def sunshine_hours(
    readings: Sequence[RawReading], tz: ZoneInfo, threshold: float = SUN_THRESHOLD
) -> int:
    """Number of distinct local hours with at least one reading at or above threshold."""
    hours = {
        datetime.fromtimestamp(r.timestamp, tz).hour
        for r in readings
        if r.solar_radiation is not None and r.solar_radiation >= threshold
    }
    return len(hours)


def compute_day_stats(
    window: TimeWindow,
    extremes: tuple[float | None, float | None],
    rain_raw: float | None,
    readings: Sequence[RawReading],
    tz: ZoneInfo,
    sun_threshold: float = SUN_THRESHOLD,
    rain_scale: float = RAIN_UNIT_SCALE,
) -> DayStats:
    """Turn the reader's three result sets into a DayStats value."""
    t_max, t_min = extremes
    if t_max is None:
        log.warning("temperature_max_missing", start=window.start, end=window.end)
    if t_min is None:
        log.warning("temperature_min_missing", start=window.start, end=window.end)

    rain_sum = rain_raw * rain_scale if rain_raw is not None else 0.0
    if rain_sum < 0:
        log.warning("rain_rollup_negative", day=window.day.isoformat(), raw=rain_raw)
        rain_sum = 0.0

    return DayStats(
        t_max=t_max if t_max is not None else math.nan,
        t_min=t_min if t_min is not None else math.nan,
        rain_sum=rain_sum,
        sun_hours=sunshine_hours(readings, tz, sun_threshold),
    )


class DailyStatsAggregator:
    """Computes DayStats for one local calendar day from the archive."""

    def __init__(
        self,
        reader: ArchiveReader,
        tz: ZoneInfo,
        sun_threshold: float = SUN_THRESHOLD,
        rain_scale: float = RAIN_UNIT_SCALE,
    ) -> None:
        self._reader = reader
        self._tz = tz
        self._sun_threshold = sun_threshold
        self._rain_scale = rain_scale

    def aggregate(self, window: TimeWindow) -> DayStats:
        """Query the archive for ``window`` and derive the day's statistics.

        Raises:
            ArchiveError: If any of the queries fails to execute.
        """
        stats = compute_day_stats(
            window,
            self._reader.temperature_extremes(window),
            self._reader.day_rain(window),
            self._reader.readings(window),
            self._tz,
            sun_threshold=self._sun_threshold,
            rain_scale=self._rain_scale,
        )
        log.info(
            "day_aggregated",
            day=window.day.isoformat(),
            t_max=stats.t_max,
            t_min=stats.t_min,
            rain_sum=stats.rain_sum,
            sun_hours=stats.sun_hours,
        )
        return stats
