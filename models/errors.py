"""
Forecast error taxonomy.

InvalidRule is recovered per item (the item is skipped and reported as a
diagnostic). InvalidSettings is fatal: no forecast can be derived without a
pay cycle anchor.
"""


class ForecastError(ValueError):
    """Base class for errors raised by the forecasting engine."""


class InvalidRule(ForecastError):
    """A recurrence rule is malformed (unknown frequency, bad custom interval)."""

    def __init__(self, message, rule=None):
        super().__init__(message)
        self.rule = rule


class InvalidSettings(ForecastError):
    """Pay settings are missing or unusable."""
