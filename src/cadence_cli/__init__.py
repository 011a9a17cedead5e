"""Cadence CLI - focus timer and workout tracker for the terminal."""

__version__ = "0.3.0"
