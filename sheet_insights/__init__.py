"""Spreadsheet and CSV profiling: canonical tables, column typing, trends and chart payloads."""

__version__ = "0.1.0"
