"""
Error kinds raised by the herb ledger core.

Every operation surfaces the first error it meets and leaves the
ledger untouched. Nothing here is retried.
"""

from __future__ import annotations


class HerbLedgerError(Exception):
    """Base class for all herb ledger failures."""
    pass


class AlreadyExists(HerbLedgerError):
    """Raised when creating a record whose key is already live."""

    def __init__(self, herb_id: str):
        self.herb_id = herb_id
        super().__init__(f"Herb {herb_id} already exists")


class NotFound(HerbLedgerError):
    """Raised when reading or updating a key that is absent."""

    def __init__(self, herb_id: str):
        self.herb_id = herb_id
        super().__init__(f"Herb {herb_id} does not exist")


class DecodeError(HerbLedgerError):
    """Raised when stored bytes do not parse into a Herb record."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        if key is not None:
            message = f"{key}: {message}"
        super().__init__(message)


class StoreUnavailable(HerbLedgerError):
    """Raised when the underlying ledger cannot be read or written."""
    pass


class InvalidRecord(HerbLedgerError):
    """Raised when a record fails validation before it is written."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class InvalidInvocation(HerbLedgerError):
    """Raised for an unknown transaction name or a wrong argument count."""
    pass
