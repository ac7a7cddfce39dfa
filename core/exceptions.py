"""Typed exceptions shared by CRM services and the persistence layer."""


class CRMError(Exception):
    """Base class for errors that map to a client-visible API failure."""


class NotFoundError(CRMError):
    """Requested entity does not exist (or is soft-deleted)."""


class ValidationError(CRMError):
    """Required field missing or a value is out of range."""


class ConflictError(CRMError):
    """Write rejected by a uniqueness or integrity constraint."""


class StorageUnavailableError(CRMError):
    """
    Backing store unreachable or timed out.

    The message is safe to show to clients; driver details are only logged.
    """

    def __init__(self, message: str = "Storage is temporarily unavailable"):
        super().__init__(message)
