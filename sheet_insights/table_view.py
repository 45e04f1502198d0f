"""
table_view.py — search, per-column filters and single-column sort

The view is a pure function of the rows and a frozen TableViewState
snapshot. UI handlers build a new snapshot (toggle_sort, with_search,
with_column_filter) instead of mutating one.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Sequence

from sheet_insights.table import parse_number, stringify

ASC = "asc"
DESC = "desc"


@dataclass(frozen=True)
class TableViewState:
    search_term: str = ""
    column_filters: tuple[tuple[str, str], ...] = ()
    sort_column: Optional[str] = None
    sort_direction: str = ASC

    def __post_init__(self) -> None:
        if self.sort_direction not in (ASC, DESC):
            raise ValueError(f"sort_direction must be 'asc' or 'desc', got {self.sort_direction!r}")

    @property
    def filters(self) -> dict[str, str]:
        return dict(self.column_filters)


def default_view_state(columns: Sequence[str]) -> TableViewState:
    return TableViewState(sort_column=columns[0] if columns else None, sort_direction=ASC)


def toggle_sort(state: TableViewState, column: str) -> TableViewState:
    """Clicking the sorted column flips direction; a new column sorts ascending."""
    if state.sort_column == column:
        return replace(state, sort_direction=DESC if state.sort_direction == ASC else ASC)
    return replace(state, sort_column=column, sort_direction=ASC)


def with_search(state: TableViewState, search_term: str) -> TableViewState:
    return replace(state, search_term=search_term)


def with_column_filter(state: TableViewState, column: str, text: str) -> TableViewState:
    filters = state.filters
    filters[column] = text
    return replace(state, column_filters=tuple(filters.items()))


def cell_text(row: Mapping[str, Any], column: str) -> str:
    return stringify(row.get(column)).lower()


def matches_search(row: Mapping[str, Any], columns: Sequence[str], term: str) -> bool:
    if not term:
        return True
    needle = term.lower()
    return any(needle in cell_text(row, column) for column in columns)


def matches_filters(row: Mapping[str, Any], filters: Mapping[str, str]) -> bool:
    return all(
        text.lower() in cell_text(row, column)
        for column, text in filters.items()
        if text
    )


def compare_cells(left: Any, right: Any) -> int:
    left_number = parse_number(left)
    right_number = parse_number(right)
    if left_number is not None and right_number is not None:
        return (left_number > right_number) - (left_number < right_number)
    left_text = stringify(left).lower()
    right_text = stringify(right).lower()
    return (left_text > right_text) - (left_text < right_text)


def sort_rows(rows: list[dict], column: str, direction: str = ASC) -> list[dict]:
    sign = -1 if direction == DESC else 1

    def comparator(a: Mapping[str, Any], b: Mapping[str, Any]) -> int:
        return sign * compare_cells(a.get(column), b.get(column))

    # list.sort is stable, and reversing the comparator keeps ties in input order
    return sorted(rows, key=functools.cmp_to_key(comparator))


def apply_view(
    rows: Sequence[dict],
    columns: Sequence[str],
    state: Optional[TableViewState] = None,
) -> list[dict]:
    state = state or TableViewState()
    filters = state.filters
    result = [
        row
        for row in rows
        if matches_search(row, columns, state.search_term) and matches_filters(row, filters)
    ]
    if state.sort_column:
        result = sort_rows(result, state.sort_column, state.sort_direction)
    return result


def view_summary(shown: int, total: int, column_count: int) -> str:
    return f"{shown} of {total} rows · {column_count} columns"
