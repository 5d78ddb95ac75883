"""Knowledge store interface.

Book knowledge is keyed by slug and written once: the first successful
ingestion of a title is what every later request for that slug sees.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class StoredBook:
    slug: str
    title: str
    knowledge: dict[str, Any]


class AbstractKnowledgeStore(ABC):
    """Interface for book knowledge persistence."""

    @abstractmethod
    async def get(self, slug: str) -> StoredBook | None:
        """Return the stored book for ``slug``, or None if absent."""
        raise NotImplementedError

    @abstractmethod
    async def put(self, slug: str, title: str, knowledge: dict[str, Any]) -> None:
        """Store knowledge for ``slug``.

        Raises:
            RuntimeError: If the backend rejects the write.
        """
        raise NotImplementedError
