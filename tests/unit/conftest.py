"""
Unit Test Fixtures.

Mocks for the session, the HTTP client and loggers. Only repository and
hierarchy tests use the real in-memory store from the root conftest.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from modules.backend.schemas.note import NoteResponse


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """AsyncSession stand-in; services built on it must have their repo calls patched."""
    session = AsyncMock()
    # Synchronous on a real AsyncSession
    session.add = MagicMock()
    session.expunge = MagicMock()
    return session


@pytest.fixture
def mock_notes_client() -> AsyncMock:
    """
    NotesClient stand-in for editor session and CLI tests.

        async def test_open(mock_notes_client, note_factory):
            mock_notes_client.get_note.return_value = note_factory(1, "A")
    """
    client = AsyncMock()
    client.base_url = "http://test"
    client.api_prefix = "/api"
    client.__aenter__.return_value = client
    client.__aexit__.return_value = None
    return client


def make_note(
    note_id: int,
    name: str,
    parent_id: int | None = None,
    content: str = "",
) -> NoteResponse:
    """A note as the API returns it."""
    return NoteResponse(id=note_id, name=name, parent_id=parent_id, content=content)


@pytest.fixture
def note_factory():
    return make_note


@pytest.fixture
def mock_logger() -> MagicMock:
    """Patch a module's `logger` with this and assert on .warning / .error calls."""
    return MagicMock()
