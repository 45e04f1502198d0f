from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from sheet_insights import __version__ as TOOL_VERSION
from sheet_insights import settings
from sheet_insights.charts import ChartSelection
from sheet_insights.contracts import build_profile
from sheet_insights.errors import SheetInsightsError
from sheet_insights.loader import ALL_FORMATS, load_file
from sheet_insights.table import stringify
from sheet_insights.table_view import (
    DESC,
    apply_view,
    default_view_state,
    view_summary,
)

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_COMMAND_ERROR = 1
EXIT_PARSE_FAILED = 2


class CliError(Exception):
    def __init__(self, message: str, code: int = EXIT_COMMAND_ERROR) -> None:
        super().__init__(message)
        self.code = code


class SheetInsightsArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        raise CliError(message, EXIT_COMMAND_ERROR)


def eprint(message: str) -> None:
    print(message, file=sys.stderr)


def emit_human(message: str, *, quiet: bool = False) -> None:
    if not quiet:
        eprint(message)


def json_dumps(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def classify_exception(exc: Exception) -> int:
    if isinstance(exc, CliError):
        return exc.code
    if isinstance(exc, FileNotFoundError):
        return EXIT_COMMAND_ERROR
    if isinstance(exc, SheetInsightsError):
        return EXIT_PARSE_FAILED
    return EXIT_COMMAND_ERROR


def load_input(raw_path: str) -> dict[str, Any]:
    input_path = Path(raw_path)
    if not input_path.exists():
        raise CliError(f"File not found: {input_path}", EXIT_COMMAND_ERROR)
    return load_file(input_path)


def parse_filters(raw_filters: list[str] | None) -> tuple[tuple[str, str], ...]:
    filters = []
    for raw in raw_filters or []:
        column, sep, text = raw.partition("=")
        if not sep or not column:
            raise CliError(f"--filter expects COLUMN=TEXT, got {raw!r}", EXIT_COMMAND_ERROR)
        filters.append((column, text))
    return tuple(filters)


def render_profile_text(profile: dict[str, Any]) -> str:
    charts = profile["charts"]
    lines = [
        "sheet-insights profile",
        f"File: {profile.get('filename') or '[unknown]'}",
        f"Rows: {profile['row_count']}",
        f"Columns: {profile['column_count']}",
    ]
    lines.extend(f"- {line}" for line in profile["insights"][1:])
    if profile["trends"]:
        lines.append("Trends:")
        for column, trend in profile["trends"].items():
            sign = "+" if trend["change_percent"] > 0 else ""
            lines.append(f"- {column}: {sign}{trend['change_percent']}% ({trend['direction']})")
    if not charts["has_numeric_data"]:
        lines.append("No numeric data found to visualize.")
    else:
        lines.append(f"Bar: {charts['bar']['column']} ({len(charts['bar']['data'])} points)")
        lines.append(f"Line: {', '.join(charts['line']['columns'])} ({len(charts['line']['data'])} points)")
        if charts["pie"]["data"]:
            lines.append(f"Pie: {charts['pie']['column']} ({len(charts['pie']['data'])} slices)")
        if charts["scatter"]["data"]:
            lines.append(
                f"Scatter: {charts['scatter']['x_column']} vs {charts['scatter']['y_column']} "
                f"({len(charts['scatter']['data'])} points)"
            )
    return "\n".join(lines) + "\n"


def render_table_text(columns: list[str], rows: list[dict], total: int) -> str:
    lines = ["\t".join(columns)]
    for row in rows:
        lines.append("\t".join(stringify(row.get(column)) for column in columns))
    lines.append(view_summary(len(rows), total, len(columns)))
    return "\n".join(lines) + "\n"


def build_parser() -> argparse.ArgumentParser:
    parser = SheetInsightsArgumentParser(prog="sheet-insights", description="Profile spreadsheets and CSV files into tables and chart data.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    profile = subparsers.add_parser("profile", help="Classify columns, compute trends and chart payloads.")
    profile.add_argument("input", help=f"Input file path ({', '.join(sorted(ALL_FORMATS))})")
    profile.add_argument("--json", action="store_true", help="Write machine JSON to stdout")
    profile.add_argument("--bar", dest="bar_column", help="Numeric column for the bar chart")
    profile.add_argument("--pie", dest="pie_column", help="Categorical column for the pie chart")
    profile.add_argument("--x", dest="scatter_x", help="Numeric X column for the scatter chart")
    profile.add_argument("--y", dest="scatter_y", help="Numeric Y column for the scatter chart")
    profile.add_argument("-q", "--quiet", action="store_true", help="Minimal human logs")

    table = subparsers.add_parser("table", help="Search, filter and sort the table view.")
    table.add_argument("input", help="Input file path")
    table.add_argument("--search", default="", help="Case-insensitive text to match in any column")
    table.add_argument("--filter", dest="filters", action="append", metavar="COLUMN=TEXT", help="Per-column substring filter (repeatable)")
    table.add_argument("--sort", dest="sort_column", help="Sort column (defaults to the first column)")
    table.add_argument("--desc", action="store_true", help="Sort descending")
    table.add_argument("--limit", type=int, default=None, help="Show at most N rows")
    table.add_argument("--json", action="store_true", help="Write machine JSON to stdout")

    serve = subparsers.add_parser("serve", help="Run the HTTP upload service.")
    serve.add_argument("--host", default=None, help=f"Bind address (default {settings.HOST})")
    serve.add_argument("--port", type=int, default=None, help=f"Listen port (default {settings.PORT})")

    subparsers.add_parser("version", help="Print version")
    return parser


def run_profile(args: argparse.Namespace) -> int:
    try:
        loaded = load_input(args.input)
        selection = ChartSelection(
            bar_column=args.bar_column,
            pie_column=args.pie_column,
            scatter_x=args.scatter_x,
            scatter_y=args.scatter_y,
        )
        profile = build_profile(loaded["table"], selection, filename=loaded["filename"])
        for warning in loaded["warnings"]:
            emit_human(f"Warning: {warning}", quiet=args.quiet or args.json)
        if args.json:
            print(json_dumps(profile))
        else:
            emit_human(render_profile_text(profile).rstrip(), quiet=args.quiet)
        return EXIT_SUCCESS
    except SheetInsightsError as exc:
        eprint(str(exc))
        if exc.hint:
            eprint(exc.hint)
        return classify_exception(exc)
    except Exception as exc:
        logger.debug("profile failed", exc_info=True)
        eprint(str(exc))
        return classify_exception(exc)


def run_table(args: argparse.Namespace) -> int:
    try:
        loaded = load_input(args.input)
        table = loaded["table"]
        if args.sort_column and args.sort_column not in table.columns:
            raise CliError(f"Unknown sort column: {args.sort_column}", EXIT_COMMAND_ERROR)
        state = replace(
            default_view_state(table.columns),
            search_term=args.search,
            column_filters=parse_filters(args.filters),
        )
        if args.sort_column:
            state = replace(state, sort_column=args.sort_column)
        if args.desc:
            state = replace(state, sort_direction=DESC)
        rows = apply_view(table.rows, table.columns, state)
        if args.limit is not None:
            rows = rows[: max(args.limit, 0)]
        if args.json:
            print(json_dumps({"columns": list(table.columns), "rowCount": table.row_count, "data": rows}))
        else:
            print(render_table_text(list(table.columns), rows, table.row_count), end="")
        return EXIT_SUCCESS
    except SheetInsightsError as exc:
        eprint(str(exc))
        if exc.hint:
            eprint(exc.hint)
        return classify_exception(exc)
    except Exception as exc:
        logger.debug("table failed", exc_info=True)
        eprint(str(exc))
        return classify_exception(exc)


def run_serve(args: argparse.Namespace) -> int:
    from sheet_insights.server import run

    run(host=args.host, port=args.port)
    return EXIT_SUCCESS


def run_version() -> int:
    print(TOOL_VERSION)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    try:
        parser = build_parser()
        args = parser.parse_args(argv)
        settings.configure_logging(None if args.command == "serve" else "WARNING")
        if args.command == "profile":
            return run_profile(args)
        if args.command == "table":
            return run_table(args)
        if args.command == "serve":
            return run_serve(args)
        if args.command == "version":
            return run_version()
        raise CliError(f"Unknown command: {args.command}", EXIT_COMMAND_ERROR)
    except CliError as exc:
        eprint(str(exc))
        return exc.code


if __name__ == "__main__":
    raise SystemExit(main())
