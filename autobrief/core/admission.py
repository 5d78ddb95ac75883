"""Admission pipeline run in front of every gated API endpoint.

Order of checks, first rejection wins:

1. security + CORS headers (always)
2. CORS preflight -> empty 200
3. method other than POST -> 405
4. rate limit -> 429
5. body validation against the endpoint's allowed fields -> 400
6. admitted: the sanitized body goes to business logic

Rejections come back as complete responses; the caller returns them as-is.
Admitted requests carry the headers assembled so far so the caller can stamp
them on its own response. Everything here is in-memory and synchronous.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Sequence

from fastapi import Response, status
from fastapi.responses import JSONResponse

from autobrief.adapters.rate_limit.base import AbstractRateLimiter
from autobrief.core.client_identity import resolve_client_id
from autobrief.core.rate_limit import RATE_LIMITED_MESSAGE, apply_rate_limit
from autobrief.core.request_validation import FIELD_SCHEMAS, FieldSchema, validate_request_body
from autobrief.core.security_headers import CorsPolicy, apply_policy_headers

logger = logging.getLogger(__name__)

# Path prefix of every endpoint behind the pipeline
GATED_PATH_PREFIX = "/api"


class AdmissionState(str, Enum):
    PREFLIGHT_DONE = "preflight_done"
    METHOD_REJECTED = "method_rejected"
    RATE_LIMITED = "rate_limited"
    VALIDATION_FAILED = "validation_failed"
    ADMITTED = "admitted"


@dataclass(frozen=True)
class AdmissionResult:
    """Terminal verdict of the pipeline.

    Attributes:
        state: Terminal state reached.
        headers: Policy and rate limit headers assembled for this request.
        body: Sanitized payload, only when admitted.
        response: Complete rejection/preflight response, only when not admitted.
    """

    state: AdmissionState
    headers: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] | None = None
    response: Response | None = None

    @property
    def admitted(self) -> bool:
        return self.state is AdmissionState.ADMITTED

    def respond(self, content: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
        """Build a business JSON response carrying the admission headers."""
        return JSONResponse(content=content, status_code=status_code, headers=self.headers)


class AdmissionPipeline:
    """Fixed-order admission checks shared by all gated endpoints.

    Args:
        limiter: Process-wide rate limiter; None disables rate limiting.
        cors: CORS policy chosen at startup.
        schemas: Field rule table used for body validation.
    """

    accepted_method = "POST"

    def __init__(
        self,
        limiter: AbstractRateLimiter | None,
        cors: CorsPolicy,
        *,
        schemas: Mapping[str, FieldSchema] = FIELD_SCHEMAS,
    ) -> None:
        self.limiter = limiter
        self.cors = cors
        self.schemas = schemas

    def admit(
        self,
        *,
        method: str,
        headers: Mapping[str, str],
        peer_host: str | None,
        body: Any,
        allowed_fields: Sequence[str],
    ) -> AdmissionResult:
        """Run every check for one request.

        Args:
            method: HTTP method.
            headers: Request headers (case-insensitive mapping).
            peer_host: Transport peer address, if known.
            body: Decoded JSON body (ignored unless the method is accepted).
            allowed_fields: Field names this endpoint accepts.
        """
        out: dict[str, str] = {}
        apply_policy_headers(out, headers.get("origin"), self.cors)

        method = method.upper()
        if method == "OPTIONS":
            logger.debug("admission.preflight")
            return AdmissionResult(
                AdmissionState.PREFLIGHT_DONE,
                headers=out,
                response=Response(status_code=status.HTTP_200_OK, headers=out),
            )

        if method != self.accepted_method:
            logger.info("admission.method_rejected", extra={"method": method})
            return AdmissionResult(
                AdmissionState.METHOD_REJECTED,
                headers=out,
                response=JSONResponse(
                    status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
                    content={"error": "Method Not Allowed"},
                    headers={**out, "Allow": f"{self.accepted_method}, OPTIONS"},
                ),
            )

        if self.limiter is not None:
            client_id = resolve_client_id(headers, peer_host)
            limit = apply_rate_limit(self.limiter, client_id, out)
            if not limit.allowed:
                return AdmissionResult(
                    AdmissionState.RATE_LIMITED,
                    headers=out,
                    response=JSONResponse(
                        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                        content={
                            "error": "Too Many Requests",
                            "message": RATE_LIMITED_MESSAGE,
                            "retryAfter": limit.retry_after_seconds,
                        },
                        headers=out,
                    ),
                )

        validation = validate_request_body(body, allowed_fields, self.schemas)
        if not validation.valid:
            logger.warning(
                "admission.validation_failed",
                extra={
                    "problems": [
                        {"field": p.field, "kind": p.kind.value} for p in validation.problems
                    ],
                },
            )
            return AdmissionResult(
                AdmissionState.VALIDATION_FAILED,
                headers=out,
                response=JSONResponse(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    content={"error": "Validation Error", "details": validation.errors},
                    headers=out,
                ),
            )

        return AdmissionResult(AdmissionState.ADMITTED, headers=out, body=validation.sanitized_body)
