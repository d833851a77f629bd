"""
Custom Exceptions.

Errors raised by the note and image services. Each class carries the
machine-readable code and HTTP status that the exception handlers put
in the error envelope.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    code = "SYS_INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None, code: str | None = None) -> None:
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """No note, image or procedure with the requested id or name."""

    code = "RES_NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class ValidationError(ApplicationError):
    """Input a service refuses: blank names, bad ids, undecodable image data."""

    code = "VAL_VALIDATION_ERROR"
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: str | None = None, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class ConflictError(ApplicationError):
    code = "RES_CONFLICT"
    status_code = 409
    default_message = "Resource conflict"


class CycleError(ConflictError):
    """A move that would make a note its own ancestor."""

    code = "RES_CYCLE"
    default_message = "Cannot move a note to be its own descendant"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message)


class StoreError(ApplicationError):
    """The database failed (disk, connection, driver); the request may be retried."""

    code = "SYS_STORE_ERROR"
    status_code = 503
    default_message = "Store error"
