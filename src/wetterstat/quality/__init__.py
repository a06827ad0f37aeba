"""Data quality checks."""

from wetterstat.quality.noaa import NoaaReportError, compare_rain, parse_noaa_rain

__all__ = ["NoaaReportError", "compare_rain", "parse_noaa_rain"]
