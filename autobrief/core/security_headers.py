"""Security and CORS response header policy for API endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import MutableMapping

SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}


@dataclass(frozen=True)
class CorsPolicy:
    """CORS configuration, fixed at application start.

    With a non-empty ``allowed_origins`` only listed origins are echoed back
    (allow-list mode). With an empty list any request origin is reflected,
    falling back to ``*`` (permissive mode).
    """

    allowed_origins: tuple[str, ...] = ()
    allow_methods: str = "POST, OPTIONS"
    allow_headers: str = "Content-Type"
    max_age_seconds: int = 86400

    @property
    def allow_list_mode(self) -> bool:
        return bool(self.allowed_origins)

    def apply(self, headers: MutableMapping[str, str], origin: str | None) -> None:
        if self.allow_list_mode:
            if origin and origin in self.allowed_origins:
                headers["Access-Control-Allow-Origin"] = origin
                headers["Vary"] = "Origin"
        else:
            headers["Access-Control-Allow-Origin"] = origin or "*"

        headers["Access-Control-Allow-Methods"] = self.allow_methods
        headers["Access-Control-Allow-Headers"] = self.allow_headers
        headers["Access-Control-Max-Age"] = str(self.max_age_seconds)


def apply_policy_headers(
    headers: MutableMapping[str, str],
    origin: str | None,
    cors: CorsPolicy,
) -> None:
    """Stamp the security headers and CORS headers onto ``headers``."""
    headers.update(SECURITY_HEADERS)
    cors.apply(headers, origin)
