"""In-memory knowledge store.

Process-local and lost on restart; suitable for development and tests, and
as the default until a hosted database adapter is configured.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from autobrief.adapters.knowledge_store.base import AbstractKnowledgeStore, StoredBook

logger = logging.getLogger(__name__)


class InMemoryKnowledgeStore(AbstractKnowledgeStore):
    """Thread-safe dict of slug -> StoredBook with write-once semantics."""

    def __init__(self) -> None:
        self._books: dict[str, StoredBook] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._books)

    async def get(self, slug: str) -> StoredBook | None:
        with self._lock:
            book = self._books.get(slug)

        logger.debug(
            "knowledge_store.hit" if book else "knowledge_store.miss",
            extra={"slug": slug},
        )
        return book

    async def put(self, slug: str, title: str, knowledge: dict[str, Any]) -> None:
        with self._lock:
            if slug in self._books:
                # First write wins; concurrent ingestions of one title race here
                logger.debug("knowledge_store.put_skipped", extra={"slug": slug, "reason": "exists"})
                return
            self._books[slug] = StoredBook(slug=slug, title=title, knowledge=dict(knowledge))

        logger.debug("knowledge_store.put", extra={"slug": slug})
