"""Custom exception classes for billing operations.

Provides domain-specific exceptions for clear error handling and reporting.
Every failure returns control to the caller with an explanatory message;
nothing here is retried automatically.
"""


class AutofeeError(Exception):
    """Base exception for billing errors."""

    pass


class ValidationError(AutofeeError):
    """User input rejected before it reaches storage (non-numeric, negative, empty)."""

    pass


class NotFoundError(ValidationError):
    """Referenced unit (or other record) does not exist."""

    pass


class PreconditionError(AutofeeError):
    """Operation requested for a period that lacks the data it needs."""

    pass


class StorageError(AutofeeError):
    """Store not initialized, invalid backup image, or local storage I/O failure."""

    pass
