"""Errors raised by the seat engine and mapped to HTTP responses by the routers."""


class DomainError(Exception):
    """Base domain error with customizable message and status code."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 404)


class UnauthorizedError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 401)


class ForbiddenError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 403)


class ConflictError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 409)


class InvalidTransitionError(ConflictError):
    """A seat was not in a state the requested action may start from (strict mode only)."""

    def __init__(self, message: str, seat_ids=None):
        self.seat_ids = list(seat_ids or [])
        super().__init__(message)


class LockTimeoutError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 503)


class StorageError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 500)


class InvalidConfigurationError(ValueError):
    """A seating layout violates the layout invariants.

    At the HTTP boundary pydantic reports this as a validation error. Raised
    anywhere past the boundary it signals a programming error and is never
    coerced into a valid layout.
    """
