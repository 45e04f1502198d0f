"""
table.py — Canonical Table model and normalization

Every upload is reduced to one shape before anything else looks at it:

    CanonicalTable(columns=("Region", "Sales"), rows=({"Region": "EU", "Sales": 10}, ...))

The upstream reader hands over either a list of column->value records (when
it trusted the first row as a header) or an empty list, in which case the raw
grid is used and missing header names are synthesized as Column1, Column2, ...

Columns are always the key order of the first row. Keys that only show up in
later rows are not added.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Iterable, Mapping, Sequence

NUMBER_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


@dataclass(frozen=True)
class CanonicalTable:
    columns: tuple[str, ...]
    rows: tuple[dict[str, Any], ...]

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def column_values(self, column: str) -> list[Any]:
        return [row.get(column) for row in self.rows]

    def records(self) -> list[dict[str, Any]]:
        return [dict(row) for row in self.rows]


EMPTY_TABLE = CanonicalTable(columns=(), rows=())


# ══════════════════════════════════════════════════════════════════════════════
# SCALARS
# ══════════════════════════════════════════════════════════════════════════════

def normalize_scalar(value: Any) -> Any:
    """Reduce a decoded cell to a plain JSON-safe Python scalar."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    # numpy scalars expose .item(); pandas Timestamp is a datetime subclass
    if hasattr(value, "item") and not isinstance(value, (str, bytes, datetime, date)):
        try:
            value = value.item()
        except (TypeError, ValueError):
            pass
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, (int, float, str, bool)):
        return value
    if isinstance(value, datetime):
        if value != value:  # NaT
            return None
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    text = str(value)
    if text in {"NaT", "nan"}:
        return None
    return text


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer() and abs(value) < 1e16:
            return str(int(value))
    return str(value)


def parse_number(value: Any) -> float | None:
    """
    Parse a cell as a number, or return None.

    Accepts ints, finite floats and strings holding a plain decimal or a
    decimal with an exponent ("12", "-3.5", ".5", "1e3"), surrounding
    whitespace allowed. Booleans, None, NaN and empty strings are never numbers.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return None if math.isnan(number) or math.isinf(number) else number
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text or not NUMBER_RE.fullmatch(text):
        return None
    number = float(text)
    return None if math.isinf(number) else number


# ══════════════════════════════════════════════════════════════════════════════
# NORMALIZATION
# ══════════════════════════════════════════════════════════════════════════════

def columns_from_rows(rows: Sequence[Mapping[str, Any]]) -> tuple[str, ...]:
    if not rows:
        return ()
    return tuple(rows[0].keys())


def synthesize_header(header_row: Sequence[Any], width: int) -> list[str]:
    """Use non-empty header cells verbatim, fill the rest with Column<N>."""
    header: list[str] = []
    seen: dict[str, int] = {}
    for position in range(width):
        cell = header_row[position] if position < len(header_row) else None
        name = stringify(cell).strip() if not is_blank(cell) else f"Column{position + 1}"
        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
        else:
            seen[name] = 1
        header.append(name)
    return header


def table_from_records(records: Iterable[Mapping[str, Any]]) -> CanonicalTable:
    rows = tuple(
        {str(key): normalize_scalar(value) for key, value in record.items()}
        for record in records
    )
    return CanonicalTable(columns=columns_from_rows(rows), rows=rows)


def table_from_grid(grid: Sequence[Sequence[Any]]) -> CanonicalTable:
    if not grid:
        return EMPTY_TABLE
    width = max(len(row) for row in grid)
    header = synthesize_header(grid[0], width)
    rows = []
    for raw in grid[1:]:
        record = {}
        for position, name in enumerate(header):
            cell = normalize_scalar(raw[position]) if position < len(raw) else None
            record[name] = "" if cell is None else cell
        rows.append(record)
    rows = tuple(rows)
    return CanonicalTable(columns=columns_from_rows(rows), rows=rows)


def normalize_rows(
    records: Sequence[Mapping[str, Any]],
    grid: Sequence[Sequence[Any]] | None = None,
) -> CanonicalTable:
    """Records when the reader produced any, otherwise the raw grid."""
    if records:
        return table_from_records(records)
    return table_from_grid(grid or [])
