"""
Unit Tests for Base Service.

Tests the store-error translation and shared validation helpers.
"""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from modules.backend.core.exceptions import (
    ConflictError,
    CycleError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from modules.backend.services.base import BaseService


@pytest.fixture
def service():
    return BaseService(AsyncMock())


class TestExecuteDbOperation:
    """Tests for _execute_db_operation."""

    @pytest.mark.asyncio
    async def test_returns_result_on_success(self, service):
        async def load():
            return [1, 2, 3]

        assert await service._execute_db_operation("list_notes", load()) == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_unique_violation_becomes_conflict(self, service):
        async def insert():
            raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        with pytest.raises(ConflictError) as exc_info:
            await service._execute_db_operation("create_note", insert())

        assert exc_info.value.code == "RES_CONFLICT"

    @pytest.mark.asyncio
    async def test_other_integrity_error_becomes_store_error(self, service):
        async def insert():
            raise IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed"))

        with pytest.raises(StoreError, match="constraint violation: create_note"):
            await service._execute_db_operation("create_note", insert())

    @pytest.mark.asyncio
    async def test_driver_failure_becomes_store_error(self, service):
        async def delete():
            raise OperationalError("DELETE", {}, Exception("database is locked"))

        with pytest.raises(StoreError) as exc_info:
            await service._execute_db_operation("delete_note", delete())

        assert exc_info.value.code == "SYS_STORE_ERROR"
        assert isinstance(exc_info.value.__cause__, OperationalError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [NotFoundError(), CycleError()])
    async def test_application_errors_pass_through(self, service, error):
        async def fail():
            raise error

        with pytest.raises(type(error)):
            await service._execute_db_operation("move_note", fail())


class TestRequireText:

    def test_returns_value_unchanged(self, service):
        assert service._require_text("  Ideas ", "name", max_length=10) == "  Ideas "

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_rejects_missing_or_blank(self, service, value):
        with pytest.raises(ValidationError, match="name must not be blank") as exc_info:
            service._require_text(value, "name")

        assert exc_info.value.details == {"name": "required"}

    def test_length_limit_is_inclusive(self, service):
        assert service._require_text("abc", "name", max_length=3) == "abc"

    def test_too_long(self, service):
        with pytest.raises(ValidationError, match="name too long") as exc_info:
            service._require_text("abcd", "name", max_length=3)

        assert exc_info.value.details == {"name": "Maximum length is 3", "length": 4}
