"""
loader.py — Upload decoder for sheet-insights

Supports: .csv .tsv .txt .xlsx .xlsm .xls .ods (first sheet only)

Public API:
    result = load_bytes(raw, "sales.xlsx", content_type=None)
    table  = result["table"]

Result dict keys:
    table             — CanonicalTable (always present, never empty)
    filename          — echo of the uploaded filename
    detected_format   — "csv", "xlsx", ...
    detected_encoding — encoding name for text files; None for workbooks
    delimiter         — delimiter char for text files; None otherwise
    sheet_name        — first sheet name for workbooks; None otherwise
    header_mode       — "records" when the first row was a usable header, else "grid"
    warnings          — list of warning strings
"""

from __future__ import annotations

import csv
import io
import logging
from collections import Counter
from pathlib import Path
from typing import Any, Optional

from sheet_insights.errors import (
    EmptyFile,
    EmptySheet,
    MalformedInput,
    UnsupportedFormat,
)
from sheet_insights.table import (
    CanonicalTable,
    is_blank,
    normalize_rows,
    normalize_scalar,
    stringify,
)

logger = logging.getLogger(__name__)

# ── Format groups ──────────────────────────────────────────────────────────────
TEXT_FORMATS        = {".csv", ".tsv", ".txt"}
SPREADSHEET_FORMATS = {".xlsx", ".xlsm", ".xls", ".ods"}
ALL_FORMATS         = TEXT_FORMATS | SPREADSHEET_FORMATS

CONTENT_TYPE_FORMATS = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": ".xlsx",
    "application/vnd.ms-excel.sheet.macroenabled.12": ".xlsm",
    "application/vnd.ms-excel": ".xls",
    "application/vnd.oasis.opendocument.spreadsheet": ".ods",
    "text/csv": ".csv",
    "application/csv": ".csv",
    "text/tab-separated-values": ".tsv",
    "text/plain": ".txt",
}

DELIMITER_CANDIDATES = [",", ";", "\t", "|"]


# ══════════════════════════════════════════════════════════════════════════════
# FORMAT DISPATCH
# ══════════════════════════════════════════════════════════════════════════════

def detect_format(filename: str, content_type: Optional[str] = None) -> str:
    """
    Resolve the upload to one of ALL_FORMATS.

    The filename extension wins when it is a supported one; the declared
    content type is used for extension-less or oddly named uploads. Browsers
    often send application/vnd.ms-excel for .csv files, so the extension is
    the more trustworthy signal when both are present.
    """
    suffix = Path(filename or "").suffix.lower()
    if suffix in ALL_FORMATS:
        return suffix

    mime = (content_type or "").split(";")[0].strip().lower()
    if mime in CONTENT_TYPE_FORMATS:
        return CONTENT_TYPE_FORMATS[mime]

    supported = ", ".join(sorted(ALL_FORMATS))
    raise UnsupportedFormat(
        f"Unsupported file type '{suffix or mime or '[missing extension]'}'. Supported: {supported}"
    )


# ══════════════════════════════════════════════════════════════════════════════
# TEXT DECODING
# ══════════════════════════════════════════════════════════════════════════════

def _detect_encoding(raw: bytes) -> str:
    import chardet

    result = chardet.detect(raw[:200_000])
    return result.get("encoding") or "utf-8"


def _read_text_safely(raw: bytes, preferred_encoding: str) -> str:
    """
    Turn an uploaded text file into one str without ever failing.

    A leading UTF-8 BOM is removed so it cannot leak into the first header
    name. Each line is decoded on its own, so one stray Windows-1252 byte
    only affects its own row: UTF-8 first, then the chardet guess, then
    latin-1, and CP1252 with replacement characters as the last resort. NUL
    bytes (left behind by UTF-16 exports) are removed.
    """
    if raw.startswith(b"\xef\xbb\xbf"):
        raw = raw[3:]
    decoded_lines: list[str] = []
    for raw_line in raw.split(b"\n"):
        decoded: str | None = None
        for enc in ("utf-8", preferred_encoding, "latin-1"):
            try:
                decoded = raw_line.decode(enc)
                break
            except (LookupError, UnicodeDecodeError):
                continue
        if decoded is None:
            decoded = raw_line.decode("cp1252", errors="replace")
        decoded_lines.append(decoded.replace("\x00", ""))
    return "\n".join(decoded_lines)


def _delimiter_score(rows: list[list[str]]) -> float:
    """Wide, consistently sized rows score high; single-column splits are penalised."""
    widths = Counter(len(row) for row in rows)
    width, count = widths.most_common(1)[0]
    consistency = count / len(rows)
    score = width * (2.0 + consistency)
    return score - 10.0 if width == 1 else score


def _detect_delimiter(text: str) -> str:
    """
    Pick the delimiter for a .csv or .txt upload.

    csv.Sniffer gets the first 25 non-blank lines. When it cannot decide,
    every candidate in DELIMITER_CANDIDATES splits up to 120 lines and the
    best _delimiter_score wins. Comma is the answer for single-line files.
    """
    sample_lines = [line for line in text.splitlines() if line.strip()][:120]
    sample = "\n".join(sample_lines[:25])

    if sample:
        try:
            return csv.Sniffer().sniff(sample, delimiters="".join(DELIMITER_CANDIDATES)).delimiter
        except csv.Error:
            pass

    best_delim = ","
    best_score = float("-inf")
    sample_text = "\n".join(sample_lines)
    for delim in DELIMITER_CANDIDATES:
        rows = [
            row
            for row in csv.reader(io.StringIO(sample_text), delimiter=delim)
            if any(cell.strip() for cell in row)
        ]
        if len(rows) < 2:
            continue
        score = _delimiter_score(rows)
        if score > best_score:
            best_score = score
            best_delim = delim
    return best_delim


# ══════════════════════════════════════════════════════════════════════════════
# GRID READERS
# ══════════════════════════════════════════════════════════════════════════════

def _read_text_grid(raw: bytes, suffix: str) -> tuple[list[list[Any]], dict]:
    encoding = _detect_encoding(raw)
    text = _read_text_safely(raw, encoding)
    delimiter = "\t" if suffix == ".tsv" else _detect_delimiter(text)
    logger.debug("decoded %s as %s with delimiter %r", suffix, encoding, delimiter)

    try:
        grid = [
            row
            for row in csv.reader(io.StringIO(text), delimiter=delimiter)
            if any(cell.strip() for cell in row)
        ]
    except csv.Error as exc:
        raise MalformedInput(f"Could not parse {suffix} file: {exc}") from exc

    return grid, {
        "detected_encoding": encoding,
        "delimiter": delimiter,
        "sheet_name": None,
    }


def _read_spreadsheet_grid(raw: bytes, suffix: str) -> tuple[list[list[Any]], dict]:
    import pandas as pd

    engine = None
    if suffix == ".xls":
        try:
            import xlrd  # noqa: F401
        except ImportError:
            raise ImportError(".xls files require xlrd — run: pip install xlrd")
    elif suffix == ".ods":
        try:
            import odf  # noqa: F401
        except ImportError:
            raise ImportError(".ods files require odfpy — run: pip install odfpy")
        engine = "odf"

    try:
        with pd.ExcelFile(io.BytesIO(raw), engine=engine) as xf:
            sheet_names = list(xf.sheet_names)
            if not sheet_names:
                raise EmptySheet("Workbook contains no sheets.")
            df = xf.parse(sheet_names[0], header=None, dtype=object)
    except (EmptySheet, ImportError):
        raise
    except Exception as exc:
        # openpyxl, xlrd and odfpy each raise their own types for corrupt containers
        raise MalformedInput(f"Could not read workbook: {exc}") from exc

    grid = []
    for values in df.itertuples(index=False, name=None):
        row = [normalize_scalar(value) for value in values]
        if all(is_blank(cell) for cell in row):
            continue
        while row and row[-1] is None:
            row.pop()
        grid.append(row)

    warnings = []
    if len(sheet_names) > 1:
        warnings.append(
            f"Multiple sheets found ({len(sheet_names)} total); "
            f"used '{sheet_names[0]}'. Ignored: {sheet_names[1:]}"
        )
    return grid, {
        "detected_encoding": None,
        "delimiter": None,
        "sheet_name": sheet_names[0],
        "warnings": warnings,
    }


def records_from_grid(grid: list[list[Any]]) -> list[dict[str, Any]]:
    """
    Build header-keyed records when the first grid row is a usable header.

    A usable header has no blank cells and no repeated names. Anything else
    yields [] so the normalizer falls back to synthesized column names.
    """
    if len(grid) < 2:
        return []
    header_row = grid[0]
    width = max(len(row) for row in grid)
    if len(header_row) < width or any(is_blank(cell) for cell in header_row):
        return []
    header = [stringify(cell).strip() for cell in header_row]
    if len(set(header)) != len(header):
        return []
    return [
        {name: (row[position] if position < len(row) else None) for position, name in enumerate(header)}
        for row in grid[1:]
    ]


# ══════════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ══════════════════════════════════════════════════════════════════════════════

def load_bytes(raw: bytes, filename: str, content_type: Optional[str] = None) -> dict:
    """
    Decode an uploaded file into a Canonical Table.

    Raises:
        UnsupportedFormat  neither a spreadsheet nor a delimited text upload.
        EmptySheet         workbook whose first sheet has no data rows.
        EmptyFile          text file with no data rows.
        MalformedInput     corrupt container or undecodable content.
        ImportError        optional reader (xlrd, odfpy) is not installed.
    """
    suffix = detect_format(filename, content_type)

    if suffix in SPREADSHEET_FORMATS:
        grid, meta = _read_spreadsheet_grid(raw, suffix)
        empty_error = EmptySheet
    else:
        grid, meta = _read_text_grid(raw, suffix)
        empty_error = EmptyFile

    records = records_from_grid(grid)
    table: CanonicalTable = normalize_rows(records, grid)
    if table.is_empty:
        raise empty_error(f"No data rows found in {filename or 'upload'}.")

    header_mode = "records" if records else "grid"
    logger.info(
        "loaded %s: %d rows, %d columns (%s header)",
        filename, table.row_count, len(table.columns), header_mode,
    )
    return {
        "table": table,
        "filename": filename,
        "detected_format": suffix.lstrip("."),
        "detected_encoding": meta.get("detected_encoding"),
        "delimiter": meta.get("delimiter"),
        "sheet_name": meta.get("sheet_name"),
        "header_mode": header_mode,
        "warnings": meta.get("warnings", []),
    }


def load_file(path: "str | Path", content_type: Optional[str] = None) -> dict:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return load_bytes(path.read_bytes(), path.name, content_type)
