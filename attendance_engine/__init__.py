"""Workify attendance engine: expected shifts, daily verdicts and monthly KPIs."""

__version__ = "1.0.0"
