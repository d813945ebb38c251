class DomainError(Exception):
    """Base exception for business rule violations."""

    http_status = 400


class ValidationError(DomainError):
    """Raised when input data is malformed or violates domain rules."""

    http_status = 400


class Unauthorized(DomainError):
    """Raised when no verified principal is available."""

    http_status = 401


class Forbidden(DomainError):
    """Raised when a principal lacks the required role or relationship."""

    http_status = 403


class NotFound(DomainError):
    """Raised when a referenced entity does not exist."""

    http_status = 404


class InvalidStateTransition(DomainError):
    """Raised when a session or leave request is not in a state that allows the operation."""

    http_status = 409


class StorageError(DomainError):
    """Raised when the underlying persistence fails."""

    http_status = 500
