"""Daily weather statistics from a WeeWX archive."""

__version__ = "0.1.0"
