class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class RoleMismatchError(ValidationError):
    """Raised when a user's role does not fit the roster operation."""


class ConflictError(ValidationError):
    """Raised when a record already exists for a unique natural key."""


class NotFoundError(DomainError):
    """Raised when a referenced id does not exist."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class DuplicateKeyError(Exception):
    """Raised by repositories when an insert hits a unique index."""
