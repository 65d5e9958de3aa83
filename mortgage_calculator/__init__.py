"""Mortgage Calculator - monthly payment calculator with saved property comparison."""

__version__ = "1.0.0"
