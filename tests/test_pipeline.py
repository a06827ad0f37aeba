"""Tests for the reporting cycle and the daily schedule."""

import io
from datetime import date, datetime, time, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from rich.console import Console

from wetterstat.archive import ArchiveError, ArchiveReader
from wetterstat.config import Config
from wetterstat.models import Report, TimeWindow
from wetterstat.pipeline import build_cycle, next_run_at, run_cycle, run_forever

BERLIN = ZoneInfo("Europe/Berlin")
NOW = datetime(2025, 6, 26, 4, 0, tzinfo=BERLIN)


def at(day: date, hour: int) -> int:
    return int(datetime.combine(day, time(hour), tzinfo=BERLIN).timestamp())


def midnight(day: date) -> int:
    return TimeWindow.for_day(day, BERLIN).start


class RecordingPublisher:
    def __init__(self) -> None:
        self.reports: list[Report] = []

    def publish(self, report: Report) -> dict[str, bool]:
        self.reports.append(report)
        return {"lemmy": True}


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=120)


@pytest.fixture
def archive(make_archive) -> Path:
    yesterday, day_before = date(2025, 6, 25), date(2025, 6, 24)
    readings = [
        (at(yesterday, 5), 19.3, 0.0, 10.0),
        (at(yesterday, 11), 26.0, 0.0, 500.0),
        (at(yesterday, 15), 29.2, 0.0, 700.0),
        (at(day_before, 4), 10.7, 0.0, 0.0),
        (at(day_before, 14), 22.4, 0.0, 300.0),
    ]
    day_rain = [
        (midnight(yesterday), 0.0),
        (midnight(day_before), 0.0),
        (midnight(date(2025, 6, 23)), 0.0),
        (midnight(date(2025, 6, 22)), 0.03),
    ]
    return make_archive(readings=readings, day_rain=day_rain)


def output(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]


class TestBuildCycle:
    def test_reports_yesterday_against_day_before(self, archive: Path) -> None:
        with ArchiveReader(archive) as reader:
            cycle = build_cycle(reader, Config(), NOW)

        assert cycle is not None
        assert cycle.day == date(2025, 6, 25)
        assert (cycle.stats_today.t_max, cycle.stats_today.t_min) == (29.2, 19.3)
        assert (cycle.stats_prior.t_max, cycle.stats_prior.t_min) == (22.4, 10.7)
        assert cycle.stats_today.sun_hours == 2
        assert cycle.streaks.days_since_rain == 3
        assert cycle.report.title == (
            "☀️ Wetterstatistik für Overath 25.06.2025: "
            "Temperatur 29.2 bis 19.3 °C (Vortag: 22.4 bis 10.7°C)"
        )
        assert cycle.report.body.endswith("\nEs hat seit 3 Tagen nicht mehr geregnet.")

    def test_missing_prior_day_skips(self, make_archive) -> None:
        path = make_archive(readings=[(at(date(2025, 6, 25), 12), 20.0, 0.0, 0.0)])
        with ArchiveReader(path) as reader:
            assert build_cycle(reader, Config(), NOW) is None

    def test_uses_configured_station(self, archive: Path) -> None:
        with ArchiveReader(archive) as reader:
            cycle = build_cycle(reader, Config(station_name="Much"), NOW)
        assert cycle is not None
        assert "Wetterstatistik für Much 25.06.2025" in cycle.report.title


class TestRunCycle:
    def test_test_mode_only_prints(self, archive: Path, console: Console) -> None:
        publisher = RecordingPublisher()
        cycle = run_cycle(archive, Config(), console, test_mode=True, publisher=publisher, now=NOW)

        assert cycle is not None
        assert publisher.reports == []
        text = output(console)
        assert "TEST-MODUS: Lemmy-Post" in text
        assert cycle.report.title in text

    def test_publishes_report(self, archive: Path, console: Console) -> None:
        publisher = RecordingPublisher()
        cycle = run_cycle(archive, Config(), console, publisher=publisher, now=NOW)

        assert cycle is not None
        assert publisher.reports == [cycle.report]

    def test_invalid_data_publishes_nothing(self, make_archive, console: Console) -> None:
        publisher = RecordingPublisher()
        result = run_cycle(make_archive(), Config(), console, publisher=publisher, now=NOW)

        assert result is None
        assert publisher.reports == []
        assert "Posting wird übersprungen" in output(console)

    def test_noaa_comparison_in_test_mode(
        self, archive: Path, console: Console, tmp_path: Path
    ) -> None:
        noaa = tmp_path / "NOAA-2025-06.txt"
        noaa.write_text("25.06  24.1  29.2   0.0   19.3\n", encoding="utf-8")
        run_cycle(archive, Config(), console, test_mode=True, noaa_file=noaa, now=NOW)

        assert "Werte stimmen überein" in output(console)

    def test_missing_archive(self, tmp_path: Path, console: Console) -> None:
        with pytest.raises(ArchiveError):
            run_cycle(tmp_path / "weewx.sdb", Config(), console, now=NOW)


class TestNextRunAt:
    def test_later_today(self) -> None:
        now = datetime(2025, 6, 26, 2, 30, tzinfo=BERLIN)
        assert next_run_at(now, 4) == datetime(2025, 6, 26, 4, 0, tzinfo=BERLIN)

    def test_tomorrow_when_hour_has_passed(self) -> None:
        now = datetime(2025, 6, 26, 9, 0, tzinfo=BERLIN)
        assert next_run_at(now, 4) == datetime(2025, 6, 27, 4, 0, tzinfo=BERLIN)

    def test_exact_hour_moves_to_tomorrow(self) -> None:
        assert next_run_at(NOW, 4) == datetime(2025, 6, 27, 4, 0, tzinfo=BERLIN)

    def test_spring_forward_night(self) -> None:
        now = datetime(2025, 3, 29, 5, 0, tzinfo=BERLIN)
        next_run = next_run_at(now, 4)
        assert next_run.timestamp() - now.timestamp() == timedelta(hours=22).total_seconds()


class TestRunForever:
    def test_runs_cycle_then_sleeps_until_post_hour(self, make_archive, console: Console) -> None:
        saves, sleeps = [], []
        run_forever(
            make_archive(),
            Config(),
            console,
            test_mode=True,
            after_cycle=lambda: saves.append(1),
            sleep=sleeps.append,
            max_cycles=1,
        )

        assert saves == [1]
        assert len(sleeps) == 1
        assert 0 < sleeps[0] <= 25 * 3600
