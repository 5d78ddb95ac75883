"""Knowledge store adapters (book knowledge keyed by slug)."""

from autobrief.adapters.knowledge_store.base import AbstractKnowledgeStore, StoredBook
from autobrief.adapters.knowledge_store.in_memory import InMemoryKnowledgeStore

__all__ = [
    "AbstractKnowledgeStore",
    "InMemoryKnowledgeStore",
    "StoredBook",
]
