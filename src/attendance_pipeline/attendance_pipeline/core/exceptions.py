class DomainError(Exception):
    """Base exception for business rule violations."""


class UnauthenticatedError(DomainError):
    """Raised when no caller identity can be resolved."""


class PermissionDeniedError(DomainError):
    """Raised when a caller lacks the role or ownership an action needs."""


class NotFoundError(DomainError):
    """Raised when a referenced session, request, subject or profile is missing."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidTransitionError(ValidationError):
    """Raised when a state machine is asked to leave a terminal state."""


class NotificationError(DomainError):
    """Raised by a channel when a send fails.

    Caught at the dispatch boundary; never reaches the caller of the mutation.
    """
