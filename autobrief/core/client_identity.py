"""Derive the rate limiting key for a caller from its network origin.

The identifier is only a throttling key. Forwarding headers are client
controlled unless a trusted proxy overwrites them, so nothing here should be
used for authentication.
"""

from __future__ import annotations

from typing import Mapping

UNKNOWN_CLIENT = "unknown"


def resolve_client_id(headers: Mapping[str, str], peer_host: str | None = None) -> str:
    """Return a non-empty identifier for the caller.

    Resolution order:
        1. First entry of ``X-Forwarded-For``
        2. ``X-Real-IP``
        3. The transport peer address
        4. ``"unknown"``

    Blank candidates fall through to the next source.

    Args:
        headers: Request headers. Starlette's ``Headers`` is case-insensitive;
            plain dicts are expected to use lowercase keys.
        peer_host: Address of the directly connected peer, if known.
    """
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = (headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip

    if peer_host and peer_host.strip():
        return peer_host.strip()

    return UNKNOWN_CLIENT
