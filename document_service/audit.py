"""Structured audit logging for the document service.

Rules:
- Never log customer details or item names
- Log metadata only
- Structured JSON format
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone


logger = logging.getLogger("document.audit")


def _emit(event: str, **kwargs) -> None:
    """Emit a structured audit log entry."""
    entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "document-service",
        "event": event,
        **kwargs,
    }
    logger.info(json.dumps(entry, default=str))


def log_request_received(request_id: str, doc_type: str, item_count: int) -> None:
    _emit(
        "request_received",
        request_id=request_id,
        doc_type=doc_type,
        item_count=item_count,
    )


def log_render_completed(
    request_id: str,
    filename: str,
    page_count: int,
    size_bytes: int,
    duration_ms: float,
) -> None:
    _emit(
        "render_completed",
        request_id=request_id,
        filename=filename,
        page_count=page_count,
        size_bytes=size_bytes,
        duration_ms=round(duration_ms, 2),
    )


def log_render_failed(request_id: str, error: str) -> None:
    _emit("render_failed", request_id=request_id, error=error)
