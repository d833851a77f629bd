"""
Integration Test Fixtures.

The real app over the per-test database from the root conftest, reached
in-process through httpx's ASGI transport: raw (`client`) or through the
typed NotesClient (`notes_client`).
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from modules.backend.core.database import get_db_session
from modules.client.client import NotesClient

TEST_BASE_URL = "http://test"


@pytest.fixture
def app(db_session_factory: async_sessionmaker[AsyncSession]) -> FastAPI:
    """App whose request sessions commit on success and roll back on error, as in production."""
    from modules.backend.main import create_app

    async def session_per_request() -> AsyncGenerator[AsyncSession, None]:
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application = create_app()
    application.dependency_overrides[get_db_session] = session_per_request
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url=TEST_BASE_URL) as http:
        yield http


@pytest.fixture
async def notes_client(app: FastAPI) -> AsyncGenerator[NotesClient, None]:
    async with NotesClient(
        base_url=TEST_BASE_URL,
        timeout=5.0,
        transport=ASGITransport(app=app),
    ) as api_client:
        yield api_client


class ApiAssertions:
    """Envelope checks that print the response body when they fail."""

    @staticmethod
    def assert_success(response: Response, expected_status: int = 200) -> Any:
        """Returns the envelope's `data`."""
        assert response.status_code == expected_status, response.text
        body = response.json()
        assert body["success"] is True, body
        assert body["error"] is None, body
        return body["data"]

    @staticmethod
    def assert_error(
        response: Response,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        """Returns the whole body. `error` must always be a plain string."""
        assert response.status_code == expected_status, response.text
        body = response.json()
        assert body["success"] is False, body
        assert body["data"] is None, body
        assert isinstance(body["error"], str), body
        if expected_code is not None:
            assert body["code"] == expected_code, body
        return body

    @classmethod
    def assert_validation_error(cls, response: Response, field: str | None = None) -> dict[str, Any]:
        """422 from request parsing, optionally naming the offending field."""
        body = cls.assert_error(response, 422, "VAL_REQUEST_INVALID")
        if field is not None:
            fields = [e["field"] for e in body["details"]["validation_errors"]]
            assert any(field in f for f in fields), fields
        return body


@pytest.fixture
def api() -> ApiAssertions:
    return ApiAssertions()
