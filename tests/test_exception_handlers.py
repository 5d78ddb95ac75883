"""Tests for global exception handlers.

Validates that all exception types are handled consistently with
proper HTTP status codes, error format, and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from autobrief.core.errors import (
    AppError,
    LLMAppError,
    NotFoundAppError,
    ValidationAppError,
)
from autobrief.core.exception_handlers import (
    build_error_content,
    error_status,
    general_exception_handler,
    setup_exception_handlers,
)


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    """Create test client with handlers enabled."""
    return TestClient(app_with_handlers, raise_server_exceptions=False)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    def test_validation_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation")
        async def test_endpoint():
            raise ValidationAppError(code="test_validation", message="Test validation error")

        response = client.get("/test-validation")

        assert response.status_code == 400
        data = response.json()
        assert data["error"]["code"] == "test_validation"
        assert data["error"]["message"] == "Test validation error"
        assert "request_id" in data["error"]

    def test_error_includes_details_when_provided(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-details")
        async def test_endpoint():
            raise NotFoundAppError(
                code="book_not_ingested",
                message="No analysis exists for this book yet",
                details={"slug": "atomic-habits"},
            )

        response = client.get("/test-details")

        assert response.status_code == 404
        assert response.json()["error"]["details"] == {"slug": "atomic-habits"}

    def test_llm_error_returns_500(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-llm")
        async def test_endpoint():
            raise LLMAppError(code="llm_generation_failed", message="LLM service returned an error")

        response = client.get("/test-llm")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "llm_generation_failed"

    def test_details_omitted_when_empty(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-format")
        async def test_endpoint():
            raise ValidationAppError(code="test", message="test")

        data = client.get("/test-format").json()

        assert set(data["error"]) == {"code", "message", "request_id"}


@pytest.mark.parametrize(
    "exc,expected",
    [
        (ValidationAppError(code="v", message="m"), 400),
        (NotFoundAppError(code="n", message="m"), 404),
        (LLMAppError(code="l", message="m"), 500),
        (AppError(code="a", message="m"), 400),
    ],
)
def test_error_status_mapping(exc: AppError, expected: int):
    assert error_status(exc) == expected


def test_build_error_content_envelope():
    content = build_error_content(NotFoundAppError(code="book_not_found", message="Not found"))

    assert content["error"]["code"] == "book_not_found"
    assert content["error"]["message"] == "Not found"
    assert "details" not in content["error"]


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_handler_registered(self, app_with_handlers: FastAPI):
        assert Exception in app_with_handlers.exception_handlers

    def test_general_exception_handler_logic(self):
        request = AsyncMock()
        request.url.path = "/api/ingest"
        request.method = "POST"

        exc = RuntimeError("Unexpected error: database connection failed")
        response = asyncio.run(general_exception_handler(request, exc))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert data["error"]["code"] == "internal_server_error"
        # Original error message should NOT be in response
        assert "database connection" not in data["error"]["message"]
        assert "request_id" in data["error"]

    def test_unexpected_exception_in_route_never_leaks(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-crash")
        async def test_endpoint():
            raise ValueError("Test error with details")

        response = client.get("/test-crash")

        assert response.status_code == 500
        assert "Traceback" not in response.text
        assert "ValueError" not in response.text
        assert "Test error with details" not in response.text


def test_multiple_handler_setups_does_not_fail():
    app = FastAPI()

    setup_exception_handlers(app)
    setup_exception_handlers(app)

    assert AppError in app.exception_handlers


class TestHttpExceptionHandler:
    """Router-level HTTP errors."""

    def test_405_without_pipeline_keeps_default_body(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.post("/api/only-post")
        async def test_endpoint():
            return {}

        response = client.get("/api/only-post")

        assert response.status_code == 405
        assert response.json() == {"detail": "Method Not Allowed"}

    def test_404_keeps_default_body(self, client: TestClient):
        response = client.get("/missing")

        assert response.status_code == 404
        assert response.json() == {"detail": "Not Found"}
