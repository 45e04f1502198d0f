#!/usr/bin/env python3
"""
Generates sample-data/headerless_sample.xlsx for trying out header synthesis.

Run from the repo root:
    python sample-data/generate_xlsx.py

What is baked in:
  Sheet "Readings" (first sheet, the only one that gets loaded)
    - Header row with a blank cell in column C -> becomes "Column3"
    - A short row (missing the last two cells) -> backfilled with ""
    - A text cell in the numeric "Reading" column -> treated as missing
  Sheet "Notes"
    - Ignored; only the first sheet is read
"""

from pathlib import Path
import openpyxl

OUTPUT = Path(__file__).parent / "headerless_sample.xlsx"

wb = openpyxl.Workbook()

ws = wb.active
ws.title = "Readings"
ws.append(["Station", "Reading", None, "Status"])
ws.append(["A-1", 10.5, 3, "ok"])
ws.append(["A-2", 12.0, 4, "ok"])
ws.append(["A-3", "n/a", 2, "offline"])
ws.append(["A-4", 15.25])
ws.append(["A-5", 16.0, 6, "ok"])

notes = wb.create_sheet("Notes")
notes.append(["This sheet is not loaded."])

wb.save(OUTPUT)
print(f"Wrote {OUTPUT}")
