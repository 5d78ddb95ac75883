from __future__ import annotations

from autobrief.api.routes.books import router as books_router
from autobrief.api.routes.health import router as health_router

__all__ = ["books_router", "health_router"]
