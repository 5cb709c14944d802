"""Infrastructure errors raised by the persistence layer."""


class StoreError(Exception):
    """Base class for errors surfaced by the user and session stores."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConflictError(StoreError):
    """Raised when an insert or update violates a unique or foreign-key constraint."""


class StoreUnavailableError(StoreError):
    """Raised when the backing database cannot be reached (transient; never retried here)."""
