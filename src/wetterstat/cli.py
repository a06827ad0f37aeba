"""Command-line interface for wetterstat."""

from datetime import date, datetime, timedelta
from pathlib import Path

import structlog
import typer
from rich.console import Console
from rich.table import Table

from wetterstat.archive import ArchiveError, ArchiveReader
from wetterstat.config import DEFAULT_CONFIG_PATH, Config, ConfigError, load_config, save_config
from wetterstat.models import TimeWindow
from wetterstat.pipeline import run_cycle, run_forever
from wetterstat.stats import DailyStatsAggregator, StreakAnalyzer

# Configure structured logging
structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ]
)

log = structlog.get_logger()

app = typer.Typer(
    name="wetterstat",
    help="Daily weather statistics from a WeeWX archive, posted to Lemmy and Mastodon",
    no_args_is_help=True,
)
console = Console()


def _load(config_path: Path) -> Config:
    try:
        config = load_config(config_path)
    except ConfigError as e:
        console.print(f"[bold red]Fehler beim Laden der Konfiguration:[/bold red] {e}")
        raise typer.Exit(code=1) from e
    return config


def _save(config: Config, config_path: Path) -> None:
    try:
        save_config(config, config_path)
    except OSError as e:
        log.warning("config_not_saved", path=str(config_path), error=str(e))


@app.command()
def run(
    db_path: Path = typer.Argument(..., help="Path to weewx.sdb"),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", help="Configuration file path"),
    test: bool = typer.Option(False, "--test", help="Only show what would be posted"),
    loop: bool = typer.Option(False, "--loop", help="Keep running and post daily at the configured hour"),
    noaa: Path | None = typer.Option(None, "--noaa", help="NOAA report file for rain comparison in test mode"),
) -> None:
    """Compute yesterday's statistics and publish them."""
    config = _load(config_path)
    # Written on every start so a fresh install gets a template to edit
    _save(config, config_path)

    if test:
        console.print("[bold yellow]TEST-MODUS: Es wird nichts gepostet![/bold yellow]")

    try:
        if loop:
            console.print(
                f"[bold magenta]LOOP-MODUS: Posts täglich um {config.post_hour}:00 Uhr[/bold magenta]"
            )
            run_forever(
                db_path,
                config,
                console,
                test_mode=test,
                noaa_file=noaa,
                after_cycle=lambda: _save(config, config_path),
            )
        else:
            run_cycle(db_path, config, console, test_mode=test, noaa_file=noaa)
            _save(config, config_path)
    except ArchiveError as e:
        console.print(f"[bold red]Datenbankfehler:[/bold red] {e}")
        raise typer.Exit(code=1) from e


@app.command()
def show(
    db_path: Path = typer.Argument(..., help="Path to weewx.sdb"),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", help="Configuration file path"),
    day: datetime | None = typer.Option(None, "--date", formats=["%Y-%m-%d"], help="Day to show (default: yesterday)"),
) -> None:
    """Show statistics and streaks for one day without posting."""
    config = _load(config_path)
    tz = config.zone
    target: date = day.date() if day else datetime.now(tz).date() - timedelta(days=1)

    try:
        with ArchiveReader(db_path) as reader:
            aggregator = DailyStatsAggregator(
                reader, tz, sun_threshold=config.sun_threshold, rain_scale=config.rain_unit_scale
            )
            stats = aggregator.aggregate(TimeWindow.for_day(target, tz))
            streaks = StreakAnalyzer(reader, tz, rain_scale=config.rain_unit_scale).streaks(
                target + timedelta(days=1), max_lookback=config.max_lookback_days
            )
    except ArchiveError as e:
        console.print(f"[bold red]Datenbankfehler:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    table = Table(title=f"Statistik für {config.station_name} {target:%d.%m.%Y}")
    table.add_column("Wert", style="cyan")
    table.add_column("", justify="right", style="bold")

    table.add_row("Höchsttemperatur", f"{stats.t_max:.1f} °C")
    table.add_row("Tiefsttemperatur", f"{stats.t_min:.1f} °C")
    table.add_row("Niederschlag", f"{stats.rain_sum:.1f} mm")
    table.add_row("Sonnenstunden", f"{stats.sun_hours} h")
    table.add_row("Tage ohne Regen", str(streaks.days_since_rain))
    table.add_row("Regentage in Folge", str(streaks.consecutive_rain_days))

    console.print(table)
    if not stats.is_valid:
        console.print("[yellow]Keine gültigen Temperaturdaten für diesen Tag.[/yellow]")


if __name__ == "__main__":
    app()
