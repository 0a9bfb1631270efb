from __future__ import annotations


class TodoServiceError(Exception):
    """Base error for the todo service. Subclasses map to an HTTP status and error code."""

    status_code: int = 500
    error: str = "InternalError"

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
        self.message = message


class Unauthenticated(TodoServiceError):
    status_code = 401
    error = "Unauthorized"

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class ValidationFailed(TodoServiceError):
    status_code = 400
    error = "ValidationError"


class TodoNotFound(TodoServiceError):
    """Raised for missing ids and ids owned by another user alike."""

    status_code = 404
    error = "NotFound"

    def __init__(self, message: str = "Todo not found") -> None:
        super().__init__(message)
