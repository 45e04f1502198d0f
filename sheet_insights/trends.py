"""First-vs-last percent change per numeric column."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Iterable, Optional

from sheet_insights.table import CanonicalTable, parse_number

INCREASING = "increasing"
DECREASING = "decreasing"
STABLE = "stable"
CHANGE_THRESHOLD_PERCENT = 5.0


def round_half_away(value: float, places: int = 1) -> float:
    # ROUND_HALF_UP on Decimal rounds ties away from zero for both signs
    exact = Decimal(repr(value))
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the kept decimals
        ctx.prec = max(28, exact.adjusted() + places + 2)
        return float(exact.quantize(quantum, rounding=ROUND_HALF_UP))


def trend_direction(change_percent: float) -> str:
    if change_percent > CHANGE_THRESHOLD_PERCENT:
        return INCREASING
    if change_percent < -CHANGE_THRESHOLD_PERCENT:
        return DECREASING
    return STABLE


def compute_trend(values: Iterable[object]) -> Optional[dict]:
    """
    Trend record for a sequence of cells in row order.

    Unparseable cells are skipped, so first/last mean the first and last
    parseable values. Returns None with fewer than two of them.
    """
    numbers = [number for number in (parse_number(value) for value in values) if number is not None]
    if len(numbers) < 2:
        return None

    first, last = numbers[0], numbers[-1]
    change = 0.0 if first == 0 else ((last - first) / first) * 100
    rounded = round_half_away(change, 1) if math.isfinite(change) else change
    return {"direction": trend_direction(change), "change_percent": rounded}


def analyse_trends(table: CanonicalTable, numeric_columns: Iterable[str]) -> dict[str, dict]:
    trends: dict[str, dict] = {}
    for column in numeric_columns:
        trend = compute_trend(table.column_values(column))
        if trend is not None:
            trends[column] = trend
    return trends
