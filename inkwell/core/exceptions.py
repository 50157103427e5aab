"""Domain errors raised by the service layer.

Each error carries the HTTP status the API should answer with; the handler
registered in ``inkwell.main`` renders them as ``{"detail": message}``.
"""


class InkwellError(Exception):
    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(InkwellError):
    """Malformed or missing input, oversized upload."""

    status_code = 422
    default_message = "Fill in all fields"


class NotFoundError(InkwellError):
    status_code = 404
    default_message = "Not found"


class ForbiddenError(InkwellError):
    status_code = 403
    default_message = "Not authorized"


class StorageError(InkwellError):
    """Media store write/read failure."""

    default_message = "File upload error"


class PersistenceError(InkwellError):
    """Record write failure."""

    default_message = "Database error"
