"""
column_detector.py — numeric/categorical typing and time-like flags

Output of classify_columns():

    {
        "column_types":        {"Month": "categorical", "Sales": "numeric"},
        "numeric_columns":     ["Sales"],
        "categorical_columns": ["Month"],
        "time_columns":        [],
    }

numeric_columns and categorical_columns partition the table's columns.
time_columns is a name heuristic on the first row only and may overlap either.
"""

from __future__ import annotations

from typing import Any

from sheet_insights.table import CanonicalTable, is_blank, parse_number, stringify

NUMERIC = "numeric"
CATEGORICAL = "categorical"
NUMERIC_COVERAGE_THRESHOLD = 0.7
TIME_KEYWORDS = ("date", "time", "year", "month", "day")


def numeric_count(values: list[Any]) -> int:
    return sum(1 for value in values if not is_blank(value) and parse_number(value) is not None)


def detect_column_type(values: list[Any]) -> str:
    """Numeric when strictly more than 70% of the cells parse as numbers."""
    total = len(values)
    if total == 0:
        return CATEGORICAL
    return NUMERIC if numeric_count(values) > NUMERIC_COVERAGE_THRESHOLD * total else CATEGORICAL


def looks_time_like(value: Any) -> bool:
    if is_blank(value):
        return False
    text = stringify(value).lower()
    return any(keyword in text for keyword in TIME_KEYWORDS)


def detect_time_columns(table: CanonicalTable) -> list[str]:
    if table.is_empty:
        return []
    first = table.rows[0]
    return [column for column in table.columns if looks_time_like(first.get(column))]


def classify_columns(table: CanonicalTable) -> dict:
    column_types = {
        column: detect_column_type(table.column_values(column))
        for column in table.columns
    }
    return {
        "column_types": column_types,
        "numeric_columns": [c for c in table.columns if column_types[c] == NUMERIC],
        "categorical_columns": [c for c in table.columns if column_types[c] == CATEGORICAL],
        "time_columns": detect_time_columns(table),
    }
