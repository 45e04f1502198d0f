"""
charts.py — chart payloads for bar, line, pie and scatter views

Every projection is a pure function of (table, classification, selection)
and returns plain lists of dicts that a chart widget can plot directly:

    bar      [{"name": "Jan", "value": 120.0}, ...]
    line     [{"name": "Jan", "Sales": 120.0, "Cost": 80.0}, ...]
    pie      [{"name": "EU", "value": 3}, ...]
    scatter  [{"x": 1.0, "y": 2.5, "name": "Jan"}, ...]

Row windows always take the first N rows in table order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from sheet_insights.table import CanonicalTable, is_blank, parse_number, stringify

BAR_ROW_LIMIT = 10
LINE_ROW_LIMIT = 20
LINE_SERIES_LIMIT = 3
PIE_SLICE_LIMIT = 5
SCATTER_ROW_LIMIT = 50
UNKNOWN_LABEL = "Unknown"


@dataclass(frozen=True)
class ChartSelection:
    bar_column: Optional[str] = None
    pie_column: Optional[str] = None
    scatter_x: Optional[str] = None
    scatter_y: Optional[str] = None


def resolve_column(
    selected: Optional[str],
    eligible: Sequence[str],
    fallback_index: int = 0,
) -> Optional[str]:
    """The selected column when it is eligible, else the fallback position, else None."""
    if selected and selected in eligible:
        return selected
    if 0 <= fallback_index < len(eligible):
        return eligible[fallback_index]
    return None


def point_name(table: CanonicalTable, row: Mapping[str, Any], index: int) -> str:
    if table.columns:
        label = row.get(table.columns[0])
        if not is_blank(label):
            return stringify(label)
    return f"Row {index + 1}"


def numeric_or_zero(value: Any) -> float:
    number = parse_number(value)
    return 0.0 if number is None else number


def bar_chart_data(table: CanonicalTable, column: Optional[str]) -> list[dict]:
    if not column:
        return []
    return [
        {"name": point_name(table, row, index), "value": numeric_or_zero(row.get(column))}
        for index, row in enumerate(table.rows[:BAR_ROW_LIMIT])
    ]


def line_chart_data(table: CanonicalTable, numeric_columns: Sequence[str]) -> list[dict]:
    if not numeric_columns:
        return []
    series = list(numeric_columns)[:LINE_SERIES_LIMIT]
    points = []
    for index, row in enumerate(table.rows[:LINE_ROW_LIMIT]):
        point: dict[str, Any] = {"name": point_name(table, row, index)}
        for column in series:
            point[column] = numeric_or_zero(row.get(column))
        points.append(point)
    return points


def pie_chart_data(table: CanonicalTable, column: Optional[str]) -> list[dict]:
    """Value counts over all rows; the first five distinct values as encountered."""
    if not column:
        return []
    counts: dict[str, int] = {}
    for row in table.rows:
        value = row.get(column)
        label = UNKNOWN_LABEL if is_blank(value) else stringify(value)
        counts[label] = counts.get(label, 0) + 1
    return [{"name": name, "value": count} for name, count in list(counts.items())[:PIE_SLICE_LIMIT]]


def scatter_chart_data(
    table: CanonicalTable,
    x_column: Optional[str],
    y_column: Optional[str],
) -> list[dict]:
    if not x_column or not y_column:
        return []
    return [
        {
            "x": numeric_or_zero(row.get(x_column)),
            "y": numeric_or_zero(row.get(y_column)),
            "name": point_name(table, row, index),
        }
        for index, row in enumerate(table.rows[:SCATTER_ROW_LIMIT])
    ]


def build_chart_bundle(
    table: CanonicalTable,
    classification: dict,
    selection: Optional[ChartSelection] = None,
) -> dict:
    selection = selection or ChartSelection()
    numeric = classification["numeric_columns"]
    categorical = classification["categorical_columns"]

    if not numeric:
        return {
            "has_numeric_data": False,
            "bar": {"column": None, "data": []},
            "line": {"columns": [], "data": []},
            "pie": {"column": None, "data": []},
            "scatter": {"x_column": None, "y_column": None, "data": []},
        }

    bar_column = resolve_column(selection.bar_column, numeric, 0)
    pie_column = resolve_column(selection.pie_column, categorical, 0)
    scatter_x = resolve_column(selection.scatter_x, numeric, 0)
    scatter_y = resolve_column(selection.scatter_y, numeric, 1)
    return {
        "has_numeric_data": True,
        "bar": {"column": bar_column, "data": bar_chart_data(table, bar_column)},
        "line": {
            "columns": list(numeric)[:LINE_SERIES_LIMIT],
            "data": line_chart_data(table, numeric),
        },
        "pie": {"column": pie_column, "data": pie_chart_data(table, pie_column)},
        "scatter": {
            "x_column": scatter_x,
            "y_column": scatter_y,
            "data": scatter_chart_data(table, scatter_x, scatter_y),
        },
    }
