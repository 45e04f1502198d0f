"""Shared versioned contracts for upload, profile and error payloads."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sheet_insights import __version__ as TOOL_VERSION
from sheet_insights.charts import ChartSelection, build_chart_bundle
from sheet_insights.column_detector import classify_columns
from sheet_insights.errors import SheetInsightsError
from sheet_insights.table import CanonicalTable
from sheet_insights.trends import analyse_trends

CONTRACT_VERSIONS = {
    "sheet_insights.profile": "1.0.0",
}


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def build_contract(name: str) -> dict[str, str]:
    version = CONTRACT_VERSIONS[name]
    return {"name": name, "version": version}


def build_upload_payload(table: CanonicalTable, filename: str) -> dict[str, Any]:
    return {
        "success": True,
        "filename": filename,
        "rowCount": table.row_count,
        "columns": list(table.columns),
        "data": table.records(),
    }


def build_error_payload(error: str, details: Optional[str] = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"error": error}
    if details:
        payload["details"] = details
    return payload


def error_payload_for(exc: SheetInsightsError) -> dict[str, Any]:
    return build_error_payload(str(exc), exc.hint or None)


def build_insights(table: CanonicalTable, classification: dict) -> list[str]:
    lines = [
        f"Total rows: {table.row_count}",
        f"Numeric columns: {', '.join(classification['numeric_columns']) or 'none'}",
    ]
    if classification["categorical_columns"]:
        lines.append(f"Categorical columns: {', '.join(classification['categorical_columns'])}")
    if classification["time_columns"]:
        lines.append(f"Time-based columns detected: {', '.join(classification['time_columns'])}")
    return lines


def build_profile(
    table: CanonicalTable,
    selection: Optional[ChartSelection] = None,
    *,
    filename: Optional[str] = None,
) -> dict[str, Any]:
    classification = classify_columns(table)
    return {
        "contract": build_contract("sheet_insights.profile"),
        "tool_version": TOOL_VERSION,
        "generated_at": utc_now_iso(),
        "filename": filename,
        "row_count": table.row_count,
        "column_count": len(table.columns),
        "classification": classification,
        "trends": analyse_trends(table, classification["numeric_columns"]),
        "charts": build_chart_bundle(table, classification, selection),
        "insights": build_insights(table, classification),
    }
