"""Read-only DuckDB access to a WeeWX station archive."""

from pathlib import Path

import duckdb
import structlog

from wetterstat.models import RawReading, TimeWindow

log = structlog.get_logger()

DEFAULT_DB_PATH = Path("/var/lib/weewx/weewx.sdb")

# Alias under which a SQLite archive is attached
_ATTACH_ALIAS = "weewx"


class ArchiveError(Exception):
    """A query against the archive could not be executed."""


class ArchiveReader:
    """Queries the ``archive`` and ``archive_day_rain`` tables of a WeeWX database.

    ``.duckdb`` files are opened directly. Anything else is treated as the
    SQLite database WeeWX writes and is attached through DuckDB's sqlite
    extension. Both are opened read-only.
    """

    def __init__(self, db_path: Path | str = DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)
        if not self._db_path.exists():
            raise ArchiveError(f"Archive not found: {self._db_path}")
        try:
            if self._db_path.suffix == ".duckdb":
                self._con = duckdb.connect(str(self._db_path), read_only=True)
            else:
                self._con = duckdb.connect()
                self._load_sqlite_extension()
                path = str(self._db_path).replace("'", "''")
                self._con.execute(
                    f"ATTACH '{path}' AS {_ATTACH_ALIAS} (TYPE sqlite, READ_ONLY)"
                )
                self._con.execute(f"USE {_ATTACH_ALIAS}")
        except duckdb.Error as e:
            raise ArchiveError(f"Cannot open archive {self._db_path}: {e}") from e
        log.info("archive_opened", db_path=str(self._db_path))

    def _load_sqlite_extension(self) -> None:
        """Load DuckDB's sqlite extension, installing it only if it is not present yet.

        Raises:
            ArchiveError: If the extension is neither installed nor downloadable.
        """
        try:
            self._con.execute("LOAD sqlite")
            return
        except duckdb.Error as e:
            log.info("sqlite_extension_not_loaded", error=str(e))

        try:
            self._con.execute("INSTALL sqlite")
            self._con.execute("LOAD sqlite")
        except duckdb.Error as e:
            self._con.close()
            raise ArchiveError(
                f"Cannot open archive {self._db_path}: the duckdb sqlite extension is "
                f"missing and could not be installed ({e})"
            ) from e

    def _fetchone(self, query: str, params: list[object]) -> tuple[object, ...] | None:
        try:
            return self._con.execute(query, params).fetchone()
        except duckdb.Error as e:
            raise ArchiveError(f"Archive query failed: {e}") from e

    def temperature_extremes(self, window: TimeWindow) -> tuple[float | None, float | None]:
        """Max and min ``outTemp`` inside the window, ``None`` without samples."""
        row = self._fetchone(
            """
            SELECT MAX(outTemp), MIN(outTemp)
            FROM archive
            WHERE dateTime >= ? AND dateTime < ?
            """,
            [window.start, window.end],
        )
        if row is None:
            return None, None
        t_max, t_min = row
        return (
            float(t_max) if t_max is not None else None,
            float(t_min) if t_min is not None else None,
        )

    def rollup_rain_at(self, midnight: int) -> tuple[bool, float | None]:
        """Exact lookup of the daily rain rollup at a local-midnight timestamp.

        Returns ``(found, value)``. ``value`` is the raw stored figure and may
        be ``None`` when the row exists with a NULL sum.
        """
        row = self._fetchone(
            'SELECT "sum" FROM archive_day_rain WHERE dateTime = ?',
            [midnight],
        )
        if row is None:
            return False, None
        return True, float(row[0]) if row[0] is not None else None

    def day_rain(self, window: TimeWindow) -> float | None:
        """Raw daily rain rollup for the window's day.

        Rollup rows are normally stamped at local midnight. Some databases
        stamp them elsewhere inside the day, so a row anywhere in the window
        is accepted as a fallback.
        """
        found, value = self.rollup_rain_at(window.midnight)
        if not found:
            row = self._fetchone(
                """
                SELECT "sum" FROM archive_day_rain
                WHERE dateTime >= ? AND dateTime < ?
                ORDER BY dateTime
                LIMIT 1
                """,
                [window.start, window.end],
            )
            if row is None:
                log.warning(
                    "rain_rollup_missing",
                    day=window.day.isoformat(),
                    timestamp=window.midnight,
                )
                return None
            value = float(row[0]) if row[0] is not None else None

        if value is None:
            log.warning("rain_rollup_null", day=window.day.isoformat())
        return value

    def readings(self, window: TimeWindow) -> list[RawReading]:
        """All sub-daily rows inside the window, oldest first."""
        try:
            result = self._con.execute(
                """
                SELECT dateTime, rain, maxSolarRad
                FROM archive
                WHERE dateTime >= ? AND dateTime < ?
                ORDER BY dateTime
                """,
                [window.start, window.end],
            ).fetchall()
        except duckdb.Error as e:
            raise ArchiveError(f"Archive query failed: {e}") from e

        return [
            RawReading(timestamp=row[0], rain=row[1], solar_radiation=row[2])
            for row in result
        ]

    def close(self) -> None:
        """Close database connection."""
        self._con.close()

    def __enter__(self) -> "ArchiveReader":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
