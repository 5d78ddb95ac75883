"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any import that loads settings.
"""

import os

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("LLM_PROVIDER", "openai")
os.environ.setdefault("LLM_MODEL", "gpt-4o-mini")
os.environ.setdefault("LLM_API_KEY", "test-key-123")
os.environ.setdefault("LOG_FORMAT", "plain")

from unittest.mock import AsyncMock, Mock  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from autobrief.adapters.knowledge_store.in_memory import InMemoryKnowledgeStore  # noqa: E402
from autobrief.adapters.llm.base import AbstractLLMClient  # noqa: E402
from autobrief.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter  # noqa: E402
from autobrief.core.app_factory import create_app  # noqa: E402


@pytest.fixture
def clock() -> Mock:
    """Controllable time source for the rate limiter."""
    return Mock(return_value=1_700_000_000.0)


@pytest.fixture
def limiter(clock: Mock) -> InMemoryFixedWindowRateLimiter:
    return InMemoryFixedWindowRateLimiter(limit=20, window_seconds=60, clock=clock)


@pytest.fixture
def llm_client() -> AsyncMock:
    client = AsyncMock(spec=AbstractLLMClient)
    client.generate_json = AsyncMock()
    return client


@pytest.fixture
def knowledge_store() -> InMemoryKnowledgeStore:
    return InMemoryKnowledgeStore()


@pytest.fixture
def app(
    limiter: InMemoryFixedWindowRateLimiter,
    llm_client: AsyncMock,
    knowledge_store: InMemoryKnowledgeStore,
) -> FastAPI:
    return create_app(
        limiter=limiter,
        llm_client=llm_client,
        knowledge_store=knowledge_store,
        configure_logs=False,
    )


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def sample_knowledge() -> dict:
    return {
        "is_real": True,
        "title": "Atomic Habits",
        "author": "James Clear",
        "core_thesis": "Small habits compound into remarkable results.",
        "key_concepts": [
            {"title": "1% better", "explanation": "Tiny gains compound over time."},
        ],
        "mental_models": [
            {"name": "Habit stacking", "description": "Attach a new habit to an existing one."},
        ],
        "misconceptions": ["Motivation is what drives lasting change."],
    }
