class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class BadInput(ValidationError):
    """Raised when a required upload or field is missing or malformed."""


class DuplicateIdentifier(DomainError):
    """Raised when an ID number is already used by another card."""


class NotFound(DomainError):
    """Raised when no card matches both the id and the requesting owner."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class Unauthorized(DomainError):
    """Raised when a bearer token is missing or cannot be verified."""
