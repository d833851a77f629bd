"""
Base Service.

Shared plumbing for NoteService and ImageService: store-failure
translation, text validation and operation logging.

Services never commit. The caller that opened the session (the request
dependency, or a test fixture) commits or rolls back the whole call.
"""

from collections.abc import Awaitable
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.exceptions import (
    ConflictError,
    StoreError,
    ValidationError,
)
from modules.backend.core.logging import get_logger

T = TypeVar("T")

_UNIQUE_MARKERS = ("unique", "duplicate")


class BaseService:
    """Session holder with error translation for store calls."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._logger = get_logger(self.__class__.__module__)

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def _execute_db_operation(self, operation: str, coro: Awaitable[T]) -> T:
        """
        Await a store call, translating SQLAlchemy failures.

        NotFoundError, CycleError and other application errors raised
        inside the call are not SQLAlchemy errors and pass through.

        Raises:
            ConflictError: For unique constraint violations
            StoreError: For any other database failure
        """
        try:
            return await coro
        except IntegrityError as e:
            self._logger.warning(
                "Database integrity error",
                extra={"operation": operation, "error": str(e.orig)},
            )
            if any(marker in str(e).lower() for marker in _UNIQUE_MARKERS):
                raise ConflictError("Resource already exists") from e
            raise StoreError(f"Database constraint violation: {operation}") from e
        except SQLAlchemyError as e:
            self._logger.error(
                "Database error",
                extra={"operation": operation, "error_type": type(e).__name__, "error": str(e)},
            )
            raise StoreError(f"Database operation failed: {operation}") from e

    def _require_text(
        self,
        value: str | None,
        field_name: str,
        max_length: int | None = None,
    ) -> str:
        """
        Check a user-supplied text field and return it unchanged.

        Raises:
            ValidationError: If blank (None, empty or whitespace) or longer than max_length
        """
        if value is None or not value.strip():
            raise ValidationError(
                f"{field_name} must not be blank",
                details={field_name: "required"},
            )
        if max_length is not None and len(value) > max_length:
            raise ValidationError(
                f"{field_name} too long",
                details={field_name: f"Maximum length is {max_length}", "length": len(value)},
            )
        return value

    def _log_mutation(self, message: str, **context: Any) -> None:
        self._logger.info(message, extra={"service": self.__class__.__name__, **context})

    def _log_debug(self, message: str, **context: Any) -> None:
        self._logger.debug(message, extra={"service": self.__class__.__name__, **context})
