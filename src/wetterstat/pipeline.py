"""One reporting cycle: archive -> statistics -> report -> publish."""

import time
from collections.abc import Callable
from datetime import date, datetime, timedelta
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict
from rich.console import Console
from rich.table import Table

from wetterstat.archive import ArchiveReader
from wetterstat.config import Config
from wetterstat.models import DayStats, Report, StreakState, TimeWindow
from wetterstat.publishing import Publisher
from wetterstat.quality import NoaaReportError, compare_rain, parse_noaa_rain
from wetterstat.report import ReportComposer
from wetterstat.stats import DailyStatsAggregator, StreakAnalyzer

log = structlog.get_logger()


class CycleResult(BaseModel):
    """Everything computed for one reporting day."""

    model_config = ConfigDict(frozen=True)

    day: date
    stats_today: DayStats
    stats_prior: DayStats
    streaks: StreakState
    report: Report


def build_cycle(reader: ArchiveReader, config: Config, now: datetime) -> CycleResult | None:
    """Compute the report for the day before ``now``.

    Returns ``None`` when either day has no valid temperature data, in which
    case nothing must be published.

    Raises:
        ArchiveError: If an archive query fails.
    """
    tz = config.zone
    today = now.astimezone(tz).date()
    yesterday = today - timedelta(days=1)
    day_before = today - timedelta(days=2)

    aggregator = DailyStatsAggregator(
        reader, tz, sun_threshold=config.sun_threshold, rain_scale=config.rain_unit_scale
    )
    stats_today = aggregator.aggregate(TimeWindow.for_day(yesterday, tz))
    stats_prior = aggregator.aggregate(TimeWindow.for_day(day_before, tz))

    if not (stats_today.is_valid and stats_prior.is_valid):
        log.warning("invalid_weather_data_skipping_post", day=yesterday.isoformat())
        return None

    analyzer = StreakAnalyzer(reader, tz, rain_scale=config.rain_unit_scale)
    streaks = analyzer.streaks(today, max_lookback=config.max_lookback_days)

    composer = ReportComposer(
        station_name=config.station_name,
        details_url=config.details_url,
        dry_spell_threshold=config.dry_spell_threshold,
    )
    report = composer.compose(stats_today, stats_prior, streaks, yesterday.strftime("%d.%m.%Y"))

    return CycleResult(
        day=yesterday,
        stats_today=stats_today,
        stats_prior=stats_prior,
        streaks=streaks,
        report=report,
    )


def stats_table(cycle: CycleResult, station_name: str) -> Table:
    """Render both days side by side."""
    today, prior = cycle.stats_today, cycle.stats_prior
    table = Table(title=f"Statistik für {station_name} {cycle.day:%d.%m.%Y}")
    table.add_column("Wert", style="cyan")
    table.add_column("Tag", justify="right", style="bold")
    table.add_column("Vortag", justify="right")

    table.add_row("Höchsttemperatur", f"{today.t_max:.1f} °C", f"{prior.t_max:.1f} °C")
    table.add_row("Tiefsttemperatur", f"{today.t_min:.1f} °C", f"{prior.t_min:.1f} °C")
    table.add_row("Niederschlag", f"{today.rain_sum:.1f} mm", f"{prior.rain_sum:.1f} mm")
    table.add_row("Sonnenstunden", f"{today.sun_hours} h", f"{prior.sun_hours} h")
    return table


def _noaa_check(console: Console, cycle: CycleResult, noaa_file: Path) -> None:
    try:
        noaa_rain = parse_noaa_rain(noaa_file, cycle.day)
    except (OSError, NoaaReportError) as e:
        log.warning("noaa_report_unusable", path=str(noaa_file), error=str(e))
        console.print(f"[yellow]NOAA-Report-Vergleich: Fehler: {e}[/yellow]")
        return

    console.print(
        f"NOAA-Report: Tagesregenmenge für {cycle.day:%d.%m.%Y}: {noaa_rain:.1f} mm"
    )
    result = compare_rain(cycle.stats_today.rain_sum, noaa_rain, cycle.day)
    style = "green" if result.status.value == "pass" else "red"
    console.print(f"Vergleich: [{style}]{result.message}[/{style}]")


def _print_preview(console: Console, cycle: CycleResult, config: Config) -> None:
    console.rule("[bold]TEST-MODUS: Lemmy-Post[/bold]")
    console.print(f"Titel: {cycle.report.title}", markup=False)
    console.print(f"Body:\n{cycle.report.body}", markup=False)
    if config.mastodon_enabled:
        console.rule("[bold]TEST-MODUS: Mastodon-Post[/bold]")
        console.print(cycle.report.as_status(), markup=False)
        console.print(f"Visibility: {config.mastodon_visibility}", markup=False)
    console.rule()


def run_cycle(
    db_path: Path,
    config: Config,
    console: Console,
    test_mode: bool = False,
    noaa_file: Path | None = None,
    publisher: Publisher | None = None,
    now: datetime | None = None,
) -> CycleResult | None:
    """Run one full reporting cycle.

    In test mode the report is only printed. Otherwise it goes to every
    configured platform.

    Raises:
        ArchiveError: If the archive cannot be opened or queried.
    """
    now = now or datetime.now(config.zone)

    with ArchiveReader(db_path) as reader:
        cycle = build_cycle(reader, config, now)
    if cycle is None:
        console.print("[yellow]Ungültige Wetterdaten (NaN) - Posting wird übersprungen![/yellow]")
        return None

    console.print(stats_table(cycle, config.station_name))

    if test_mode:
        if noaa_file is not None:
            _noaa_check(console, cycle, noaa_file)
        _print_preview(console, cycle, config)
        return cycle

    publisher = publisher or Publisher(config)
    results = publisher.publish(cycle.report)
    log.info("cycle_complete", day=cycle.day.isoformat(), results=results)
    return cycle


def next_run_at(now: datetime, hour: int) -> datetime:
    """Next local ``hour:00`` strictly after ``now`` (``now`` must be tz-aware)."""
    candidate = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if candidate <= now:
        candidate = datetime.combine(now.date() + timedelta(days=1), candidate.timetz())
    return candidate


def run_forever(
    db_path: Path,
    config: Config,
    console: Console,
    test_mode: bool = False,
    noaa_file: Path | None = None,
    after_cycle: Callable[[], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
    max_cycles: int | None = None,
) -> None:
    """Run a cycle now, then once a day at ``config.post_hour`` local time."""
    cycles = 0
    while max_cycles is None or cycles < max_cycles:
        run_cycle(db_path, config, console, test_mode=test_mode, noaa_file=noaa_file)
        if after_cycle is not None:
            after_cycle()
        cycles += 1

        now = datetime.now(config.zone)
        next_run = next_run_at(now, config.post_hour)
        # Epoch difference, so DST changes are accounted for
        delay = next_run.timestamp() - now.timestamp()
        log.info("next_run_scheduled", at=next_run.isoformat(), in_seconds=round(delay))
        sleep(delay)
