class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class Unauthorized(DomainError):
    """Raised when the acting role lacks the capability for an operation."""


class InvalidTransition(DomainError):
    """Raised when an operation is illegal from the record's current state."""


class AlreadyDecided(InvalidTransition):
    """Raised when the same approval stage is attempted twice."""


class NotWithdrawable(DomainError):
    """Raised when withdrawal happens outside the initial state or by a non-requester."""


class CorruptRecordError(DomainError):
    """Raised when a record's status disagrees with its approval/return fields."""


class PersistenceError(Exception):
    """Base exception for storage-layer failures (not business rules)."""


class NotFoundError(PersistenceError):
    """Raised when a record does not exist."""


class ConflictError(PersistenceError):
    """Raised when a conditional save loses against a concurrent writer."""


class StorageError(PersistenceError):
    """Raised when the database cannot be reached or the statement fails."""
