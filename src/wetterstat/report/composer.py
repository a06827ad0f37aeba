"""German title and body for the daily weather post."""

from wetterstat.models import DayStats, Report, StreakState

DEFAULT_STATION_NAME = "Overath"
DEFAULT_DETAILS_URL = "https://groloe.wetter.foxel.org/week.html"

# Days without rain before the post mentions a dry spell (also used for wet spells)
DRY_SPELL_THRESHOLD = 3

EMOJI_RAIN = "🌧️"
EMOJI_HEATWAVE = "🏜️"
EMOJI_HOT = "🌡️"
EMOJI_SUNNY = "☀️"
EMOJI_FROST = "❄️"
EMOJI_FREEZE = "🧊"
EMOJI_WARM_NIGHT = "🌙"


def condition_emojis(stats: DayStats) -> list[str]:
    """Emojis for a day's conditions, in fixed rule order."""
    emojis = []
    if stats.rain_sum > 0:
        emojis.append(EMOJI_RAIN)
    if stats.t_max >= 35:
        emojis.append(EMOJI_HEATWAVE)
    elif stats.t_max >= 30:
        emojis.append(EMOJI_HOT)
    elif stats.t_max >= 25:
        emojis.append(EMOJI_SUNNY)
    if stats.t_min < 0:
        emojis.append(EMOJI_FROST)
    if stats.t_max < 0:
        emojis.append(EMOJI_FREEZE)
    if stats.t_min >= 20:
        emojis.append(EMOJI_WARM_NIGHT)
    return emojis


class ReportComposer:
    """Builds a Report from two days of statistics and the current streaks.

    Inputs must be valid (no NaN temperatures); callers skip the cycle
    otherwise.
    """

    def __init__(
        self,
        station_name: str = DEFAULT_STATION_NAME,
        details_url: str = DEFAULT_DETAILS_URL,
        dry_spell_threshold: int = DRY_SPELL_THRESHOLD,
    ) -> None:
        self.station_name = station_name
        self.details_url = details_url
        self.dry_spell_threshold = dry_spell_threshold

    def compose(
        self,
        stats_today: DayStats,
        stats_prior: DayStats,
        streaks: StreakState,
        date_label: str,
    ) -> Report:
        return Report(
            title=self._title(stats_today, stats_prior, date_label),
            body=self._body(stats_today, stats_prior, streaks),
        )

    def _body(self, today: DayStats, prior: DayStats, streaks: StreakState) -> str:
        body = (
            f"Niederschlag: {today.rain_sum:.1f} mm (Vortag: {prior.rain_sum:.1f} mm), "
            f"Sonnenstunden: {today.sun_hours} h (Vortag: {prior.sun_hours} h) "
            f"Details: {self.details_url}"
        )

        dry = streaks.days_since_rain
        if dry >= self.dry_spell_threshold:
            if today.rain_sum > 0:
                body += f"\nEs hat nach {dry} Tagen wieder geregnet."
            else:
                body += f"\nEs hat seit {dry} Tagen nicht mehr geregnet."

        wet = streaks.consecutive_rain_days
        if wet >= self.dry_spell_threshold:
            body += f"\nEs regnet seit {wet} Tagen jeden Tag."

        return body

    def _title(self, today: DayStats, prior: DayStats, date_label: str) -> str:
        emojis = condition_emojis(today)
        prefix = " ".join(emojis) + " " if emojis else ""
        return (
            f"{prefix}Wetterstatistik für {self.station_name} {date_label}: "
            f"Temperatur {today.t_max:.1f} bis {today.t_min:.1f} °C "
            f"(Vortag: {prior.t_max:.1f} bis {prior.t_min:.1f}°C)"
        )
