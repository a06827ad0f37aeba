"""Dry and wet streaks from the daily rain rollup."""

from datetime import date, timedelta
from zoneinfo import ZoneInfo

import structlog

from wetterstat.archive import ArchiveError, ArchiveReader
from wetterstat.models import StreakState, TimeWindow
from wetterstat.stats.daily import RAIN_UNIT_SCALE

log = structlog.get_logger()

# Scan horizon in days
MAX_LOOKBACK_DAYS = 30


class StreakAnalyzer:
    """Walks backward through the rollup to count dry or wet days in a row."""

    def __init__(
        self,
        reader: ArchiveReader,
        tz: ZoneInfo,
        rain_scale: float = RAIN_UNIT_SCALE,
    ) -> None:
        self._reader = reader
        self._tz = tz
        self._rain_scale = rain_scale

    def streaks(
        self, reference_day: date, max_lookback: int = MAX_LOOKBACK_DAYS
    ) -> StreakState:
        """Count streaks ending the day before ``reference_day``.

        One scan serves both counters. The first day decides whether a dry or
        a wet streak is counted, and the scan stops at the first day of the
        other kind. A missing or unreadable rollup row ends the history.
        """
        dry = 0
        wet = 0
        for offset in range(1, max_lookback + 1):
            day = reference_day - timedelta(days=offset)
            midnight = TimeWindow.for_day(day, self._tz).start
            try:
                found, value = self._reader.rollup_rain_at(midnight)
            except ArchiveError as e:
                log.warning("streak_scan_aborted", day=day.isoformat(), error=str(e))
                break
            if not found:
                log.info("streak_history_ends", day=day.isoformat())
                break

            rained = value is not None and value * self._rain_scale > 0
            if rained:
                if dry:
                    break
                wet += 1
            else:
                if wet:
                    break
                dry += 1

        state = StreakState(days_since_rain=dry, consecutive_rain_days=wet)
        log.info(
            "streaks_computed",
            reference_day=reference_day.isoformat(),
            days_since_rain=state.days_since_rain,
            consecutive_rain_days=state.consecutive_rain_days,
        )
        return state
