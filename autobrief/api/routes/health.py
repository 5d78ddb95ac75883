from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe for load balancers and monitoring.

    Not gated by the admission pipeline, so it never consumes rate limit
    budget.
    """

    return {"status": "ok"}
