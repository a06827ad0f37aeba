"""Shared fixtures: a temporary archive with the WeeWX schema."""

import sqlite3
from collections.abc import Callable, Iterable
from pathlib import Path

import duckdb
import pytest

ArchiveFactory = Callable[..., Path]


@pytest.fixture
def make_archive(tmp_path: Path) -> ArchiveFactory:
    """Build a DuckDB archive file.

    ``readings`` rows are ``(dateTime, outTemp, rain, maxSolarRad)``,
    ``day_rain`` rows are ``(dateTime, sum)``.
    """

    def _make(
        readings: Iterable[tuple[int, float | None, float | None, float | None]] = (),
        day_rain: Iterable[tuple[int, float | None]] = (),
        with_rollup_table: bool = True,
        name: str = "weewx.duckdb",
    ) -> Path:
        path = tmp_path / name
        con = duckdb.connect(str(path))
        con.execute("""
            CREATE TABLE archive (
                dateTime BIGINT PRIMARY KEY,
                outTemp DOUBLE,
                rain DOUBLE,
                maxSolarRad DOUBLE
            )
        """)
        rows = list(readings)
        if rows:
            con.executemany("INSERT INTO archive VALUES (?, ?, ?, ?)", rows)

        if with_rollup_table:
            con.execute("""
                CREATE TABLE archive_day_rain (
                    dateTime BIGINT PRIMARY KEY,
                    "min" DOUBLE,
                    "max" DOUBLE,
                    "sum" DOUBLE,
                    "count" INTEGER
                )
            """)
            rollups = list(day_rain)
            if rollups:
                con.executemany(
                    'INSERT INTO archive_day_rain (dateTime, "sum") VALUES (?, ?)', rollups
                )
        con.close()
        return path

    return _make


@pytest.fixture
def make_sqlite_archive(tmp_path: Path) -> ArchiveFactory:
    """Build a SQLite archive as WeeWX writes it (``weewx.sdb``).

    Row layout matches ``make_archive``.
    """

    def _make(
        readings: Iterable[tuple[int, float | None, float | None, float | None]] = (),
        day_rain: Iterable[tuple[int, float | None]] = (),
        name: str = "weewx.sdb",
    ) -> Path:
        path = tmp_path / name
        con = sqlite3.connect(path)
        with con:
            con.execute(
                "CREATE TABLE archive (dateTime INTEGER NOT NULL UNIQUE PRIMARY KEY, "
                "usUnits INTEGER NOT NULL, interval INTEGER NOT NULL, "
                "outTemp REAL, rain REAL, maxSolarRad REAL)"
            )
            con.executemany(
                "INSERT INTO archive (dateTime, usUnits, interval, outTemp, rain, maxSolarRad) "
                "VALUES (?, 17, 5, ?, ?, ?)",
                list(readings),
            )
            con.execute(
                "CREATE TABLE archive_day_rain (dateTime INTEGER NOT NULL UNIQUE PRIMARY KEY, "
                "min REAL, mintime INTEGER, max REAL, maxtime INTEGER, "
                "sum REAL, count INTEGER, wsum REAL, sumtime INTEGER)"
            )
            con.executemany(
                "INSERT INTO archive_day_rain (dateTime, sum) VALUES (?, ?)", list(day_rain)
            )
        con.close()
        return path

    return _make
