"""
HTTP upload service.

    POST /upload   multipart field "file" -> {success, filename, rowCount, columns, data}
    GET  /health   liveness probe for the web UI connection indicator

Run with ``sheet-insights serve`` or ``uvicorn sheet_insights.server:app``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sheet_insights import __version__
from sheet_insights import settings
from sheet_insights.contracts import build_error_payload, build_upload_payload, error_payload_for
from sheet_insights.errors import SheetInsightsError
from sheet_insights.loader import load_bytes

logger = logging.getLogger(__name__)

app = FastAPI(title="sheet-insights", version=__version__)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "version": __version__}


@app.post("/upload")
def upload(file: UploadFile = File(...)):
    filename = file.filename or "upload"
    raw = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(raw) > settings.MAX_UPLOAD_BYTES:
        return JSONResponse(
            status_code=413,
            content=build_error_payload(
                f"File is larger than {settings.MAX_UPLOAD_MB} MB",
                "Split the file or remove unused sheets and columns before uploading.",
            ),
        )

    try:
        result = load_bytes(raw, filename, file.content_type)
    except SheetInsightsError as exc:
        logger.info("rejected upload %s: %s", filename, exc)
        return JSONResponse(status_code=exc.status_code, content=error_payload_for(exc))
    except Exception:
        logger.exception("unexpected failure while parsing %s", filename)
        return JSONResponse(
            status_code=500,
            content=build_error_payload("Unexpected error while parsing the file"),
        )

    for warning in result["warnings"]:
        logger.warning("%s: %s", filename, warning)
    return build_upload_payload(result["table"], filename)


def run(host: str | None = None, port: int | None = None) -> None:
    import uvicorn

    settings.configure_logging()
    uvicorn.run(app, host=host or settings.HOST, port=port or settings.PORT, log_level=settings.LOG_LEVEL.lower())
