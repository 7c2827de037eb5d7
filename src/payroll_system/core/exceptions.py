class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when credentials or tokens are invalid."""

    status_code = 401


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""

    status_code = 404


class AuthorizationError(DomainError):
    """Raised when the caller is authenticated but lacks the required role."""

    status_code = 403
