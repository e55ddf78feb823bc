class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class EntityNotFoundError(DomainError):
    """Raised when an entity cannot be loaded by id."""


class UserFriendlyDataError(DomainError):
    """Raised when a data operation fails for a reason the user should see."""
