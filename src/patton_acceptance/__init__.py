"""Acceptance-test harness for the Patton vulnerability search CLI."""

__version__ = "0.1.0"
