"""
Custom exceptions for the translation job engine.

Only ProviderUnavailableError reaches callers of the control surface.
The other failures are absorbed by the execution loop or by the cache.
"""


class BookTranslationError(Exception):
    """Base exception for translation job errors."""
    pass


class ProviderUnavailableError(BookTranslationError):
    """Raised by start() when no translator is configured.

    No job is created and observers are not notified.
    """
    pass


class ProviderRequestError(BookTranslationError):
    """Raised when the provider gives no usable answer after its own retries.

    Attributes:
        units: Number of units the failed request covered
    """

    def __init__(self, message: str, units: int = 1):
        super().__init__(message)
        self.units = units


class InvalidJobStateError(BookTranslationError):
    """Raised when a control operation does not apply to the current job state.

    Attributes:
        operation: Name of the rejected operation (pause, resume, ...)
        status: Status of the current job, or None when idle
    """

    def __init__(self, message: str, operation: str = "", status=None):
        super().__init__(message)
        self.operation = operation
        self.status = status


class CacheStorageError(BookTranslationError):
    """Raised by the storage layer when a SQLite operation fails."""
    pass
