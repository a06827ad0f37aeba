"""Cross-check the database rain total against a WeeWX NOAA month report."""

from datetime import date
from pathlib import Path

import structlog

from wetterstat.models import QualityCheckResult, QualityStatus

log = structlog.get_logger()

# Maximum difference (mm) at which both sources are considered equal
RAIN_TOLERANCE_MM = 0.01

# Zero-based column holding the day's rain in the report template
_RAIN_FIELD = 3


class NoaaReportError(Exception):
    """The report has no usable line for the requested day."""


def parse_noaa_rain(path: Path, day: date) -> float:
    """Rain (mm) for ``day`` from a NOAA report whose rows start with ``DD.MM``.

    Raises:
        OSError: If the file cannot be read.
        NoaaReportError: If no row for the day exists or its rain field is malformed.
    """
    prefix = day.strftime("%d.%m") + " "
    for line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        if not line.startswith(prefix):
            continue
        fields = line.split()
        if len(fields) <= _RAIN_FIELD:
            continue
        try:
            return float(fields[_RAIN_FIELD])
        except ValueError as e:
            raise NoaaReportError(
                f"Ungültige Regenmenge {fields[_RAIN_FIELD]!r} für {prefix.strip()} im NOAA-Report"
            ) from e
    raise NoaaReportError(f"Kein Eintrag für {prefix.strip()} in NOAA-Report")


def compare_rain(db_rain: float, noaa_rain: float, day: date) -> QualityCheckResult:
    """Compare the corrected database rain total with the NOAA figure."""
    diff = abs(noaa_rain - db_rain)

    if diff < RAIN_TOLERANCE_MM:
        status = QualityStatus.PASS
        message = f"Werte stimmen überein ({db_rain:.1f} mm am {day:%d.%m.%Y})"
    else:
        status = QualityStatus.FAIL
        message = (
            f"Werte unterscheiden sich! (DB: {db_rain:.2f} mm, NOAA: {noaa_rain:.2f} mm)"
        )

    log.info("noaa_rain_compared", day=day.isoformat(), status=status.value, diff=diff)
    return QualityCheckResult(
        check_name="noaa_rain_match",
        status=status,
        metric_value=diff,
        threshold=RAIN_TOLERANCE_MM,
        message=message,
    )
