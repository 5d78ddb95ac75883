"""FastAPI dependencies shared by the API routes.

Long-lived objects (admission pipeline, book service) are built once by the
application factory and kept on ``app.state``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from fastapi import Request

from autobrief.core.admission import AdmissionPipeline, AdmissionResult
from autobrief.core.request_validation import OversizedBody
from autobrief.services.book_service import BookService

logger = logging.getLogger(__name__)


def get_admission_pipeline(request: Request) -> AdmissionPipeline:
    return request.app.state.admission_pipeline


def get_book_service(request: Request) -> BookService:
    return request.app.state.book_service


async def _read_body_limited(request: Request, max_bytes: int) -> bytes | None:
    """Read the request body in chunks, stopping once it exceeds ``max_bytes``.

    Returns:
        The body, or None when it is larger than allowed.
    """
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        logger.warning(
            "request.body_rejected_by_header",
            extra={"body_bytes": int(declared), "max_bytes": max_bytes},
        )
        return None

    size = 0
    chunks: list[bytes] = []
    async for chunk in request.stream():
        size += len(chunk)
        if size > max_bytes:
            logger.warning(
                "request.body_rejected_by_chunked_read",
                extra={"body_bytes": size, "max_bytes": max_bytes},
            )
            return None
        chunks.append(chunk)

    return b"".join(chunks)


async def read_json_body(request: Request, max_bytes: int) -> Any:
    """Decode the request body as JSON.

    Only POST bodies are read. An empty or undecodable body is treated as an
    empty object so it fails validation with the usual field messages; a body
    over ``max_bytes`` becomes ``OversizedBody``.
    """
    if request.method.upper() != AdmissionPipeline.accepted_method:
        return {}

    raw = await _read_body_limited(request, max_bytes)
    if raw is None:
        return OversizedBody(limit_bytes=max_bytes)
    if not raw.strip():
        return {}

    try:
        return json.loads(raw)
    except (ValueError, RecursionError) as exc:
        # ValueError covers JSONDecodeError and UnicodeDecodeError
        logger.info(
            "request.body_not_json",
            extra={"body_bytes": len(raw), "error_type": type(exc).__name__},
        )
        return {}


async def admit_request(
    request: Request,
    pipeline: AdmissionPipeline,
    allowed_fields: Sequence[str],
) -> AdmissionResult:
    """Read the body and run the admission pipeline for ``request``."""
    body = await read_json_body(request, request.app.state.max_body_bytes)
    return pipeline.admit(
        method=request.method,
        headers=request.headers,
        peer_host=request.client.host if request.client else None,
        body=body,
        allowed_fields=allowed_fields,
    )
