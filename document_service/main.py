"""Document Service — FastAPI application.

POST /api/generate-pdf — Render an invoice/quotation to PDF.
GET  /health           — Liveness check.
"""

from __future__ import annotations

import logging
import time
import uuid
from functools import lru_cache

from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse, Response
from opentelemetry.propagate import extract

from document_service.assets import FontResource, ImageResource, load_font, load_image
from document_service.audit import log_render_completed, log_render_failed, log_request_received
from document_service.config import config
from document_service.encoder import EncodingError
from document_service.models import DocumentRequest
from document_service.renderer import render_pdf
from document_service.telemetry import get_tracer, init_telemetry

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=getattr(logging, config.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
)
logger = logging.getLogger("document_service")

# ---------------------------------------------------------------------------
# Shared read-only assets
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_font() -> FontResource | None:
    return load_font(config.font_path, family=config.font_family)


@lru_cache(maxsize=1)
def get_logo() -> ImageResource | None:
    return load_image(config.logo_path)


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Invoice & Quotation PDF Service",
    version="0.1.0",
    description="Lays out invoices and quotations as paginated PDF documents",
)


@app.on_event("startup")
async def _startup() -> None:
    init_telemetry()
    logger.info(
        "Document service started — unicode_font=%s, logo=%s, otel=%s",
        get_font() is not None,
        get_logo() is not None,
        bool(config.otel_endpoint),
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "unicode_font": get_font() is not None,
        "logo": get_logo() is not None,
    }


@app.post("/api/generate-pdf")
def generate_pdf_endpoint(
    body: DocumentRequest,
    request: Request,
    x_request_id: str = Header(default=""),
):
    """Render the posted record. Runs in the threadpool; rendering is CPU-bound."""
    tracer = get_tracer()
    ctx = extract(carrier=dict(request.headers))

    with tracer.start_as_current_span(
        "document.handle_generate",
        context=ctx,
        attributes={"document.type": body.doc_type},
    ) as span:
        request_id = x_request_id or str(uuid.uuid4())
        span.set_attribute("request.id", request_id)

        log_request_received(request_id, body.doc_type, len(body.items))
        t0 = time.perf_counter()

        try:
            document = render_pdf(body, font=get_font(), logo=get_logo())
        except EncodingError as exc:
            log_render_failed(request_id, str(exc))
            raise

        duration_ms = (time.perf_counter() - t0) * 1000.0
        log_render_completed(
            request_id=request_id,
            filename=document.filename,
            page_count=document.page_count,
            size_bytes=len(document.content),
            duration_ms=duration_ms,
        )
        span.set_attribute("response.page_count", document.page_count)

        return Response(
            content=document.content,
            media_type=document.media_type,
            headers={
                "Content-Disposition": f"attachment; filename={document.filename}",
                "x-filename": document.filename,
                "x-request-id": request_id,
            },
        )


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


@app.exception_handler(EncodingError)
async def _encoding_error_handler(request: Request, exc: EncodingError):
    logger.error("PDF encoding failed: %s", exc)
    return JSONResponse(status_code=500, content={"detail": f"Server error: {exc}"})


@app.exception_handler(Exception)
async def _global_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(status_code=500, content={"detail": f"Server error: {exc}"})
