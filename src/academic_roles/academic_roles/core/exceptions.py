class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is missing, malformed or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class ConflictError(DomainError):
    """Raised when a concurrent transition on the same key wins the race.

    Safe to retry: nothing from the losing transition was committed.
    """


class IntegrityError(DomainError):
    """Raised when stored data already violates an invariant.

    Never repaired automatically; needs administrative correction.
    """
