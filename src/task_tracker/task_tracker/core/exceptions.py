class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when credentials or identity tokens are missing or invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when an entity id has no row."""


class StoreUnavailableError(DomainError):
    """Raised when the database cannot be reached or a query fails."""


class DuplicateRecordError(DomainError):
    """Raised when a write violates a unique constraint."""
