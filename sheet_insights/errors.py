"""Error taxonomy for upload parsing.

Every error here is a ``ValueError`` so callers that only care about
"could not read this file" can keep catching ``ValueError``. Each carries a
human-readable remediation ``hint`` that the HTTP service, the CLI and the
Streamlit app show next to the message.
"""

from __future__ import annotations


class SheetInsightsError(ValueError):
    status_code = 400
    default_hint = ""

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = self.default_hint if hint is None else hint


class UnsupportedFormat(SheetInsightsError):
    default_hint = "Upload an Excel workbook (.xlsx, .xls, .xlsm, .ods) or a delimited text file (.csv, .tsv, .txt)."


class EmptyInput(SheetInsightsError):
    pass


class EmptySheet(EmptyInput):
    default_hint = (
        "The first sheet has no data rows. Put the table on the first sheet, "
        "or re-export the workbook without macros as a plain .xlsx file."
    )


class EmptyFile(EmptyInput):
    default_hint = "Make sure the file has a header row followed by at least one data row."


class MalformedInput(SheetInsightsError):
    default_hint = "The file could not be decoded. Re-save it from the original application and upload it again."
