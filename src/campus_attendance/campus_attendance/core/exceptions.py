class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidStatusError(ValidationError):
    """Raised when an attendance status is outside the accepted values."""


class InvalidDateRangeError(ValidationError):
    """Raised when history filters are malformed or inverted."""


class NotFoundError(DomainError):
    """Raised when a student or an attendance record does not exist."""


class ConcurrentModificationError(DomainError):
    """Raised when a student's ledger kept changing underneath a write."""


class StorageError(DomainError):
    """Raised when the persistence layer fails."""
