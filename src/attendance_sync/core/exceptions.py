class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class UpstreamError(DomainError):
    """Raised when an upstream API call fails (timeout, 5xx, bad status)."""


class AuthExpiredError(UpstreamError):
    """Raised when the device API rejects the current token."""


class NotificationError(DomainError):
    """Raised when a chat message could not be delivered after all retries."""


class StorageError(DomainError):
    """Raised when the ledger workbook exists but cannot be read or written."""
