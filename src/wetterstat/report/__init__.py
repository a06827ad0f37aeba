"""Report composition."""

from wetterstat.report.composer import DRY_SPELL_THRESHOLD, ReportComposer, condition_emojis

__all__ = ["ReportComposer", "condition_emojis", "DRY_SPELL_THRESHOLD"]
