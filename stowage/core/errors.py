"""
Unified error hierarchy for file storage operations.

All stowage exceptions inherit from StorageError. Provider, transfer and
tree operations carry these as values inside a Result; the factory raises
them directly since it runs at configuration time.
"""

from typing import Any


class StorageError(Exception):
    """
    Base exception for all storage operations.

    Carries a human-readable message plus a details dictionary that
    is appended to the string form when present.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class ArgumentError(StorageError):
    """
    Invalid or empty input.

    Raised when:
    - A provider argument is missing
    - A path is empty
    - A batch has no items
    """

    def __init__(self, message: str = "Invalid argument", argument: str | None = None, **details):
        details = {"argument": argument, **details} if argument else details
        super().__init__(message, details=details)
        self.argument = argument


class NotFoundError(StorageError):
    """Requested provider registration (or capability) not found."""

    def __init__(self, message: str = "Provider not found", name: str | None = None, **details):
        super().__init__(message, details={"name": name, **details} if name else details)
        self.name = name


class DuplicateNameError(StorageError):
    """Provider name is empty or already registered."""

    def __init__(self, message: str = "Provider name already registered", name: str | None = None):
        super().__init__(message, details={"name": name})
        self.name = name


class AmbiguousError(StorageError):
    """
    More than one registration matches a capability lookup.

    The names attribute lists every matching registration, not only
    the first pair of duplicates.
    """

    def __init__(self, message: str = "Ambiguous provider lookup", names: list[str] | None = None):
        self.names = list(names or [])
        super().__init__(message, details={"names": self.names})


class InvalidBehaviorError(StorageError):
    """A behavior factory produced no provider."""

    def __init__(self, message: str = "Behavior returned no provider", name: str | None = None):
        super().__init__(message, details={"name": name} if name else None)
        self.name = name


class FileSystemError(StorageError):
    """
    Path-level fault reported by a provider.

    Raised when:
    - File or directory not found
    - Directory not empty on non-recursive delete
    - Path is invalid for the backend
    """

    def __init__(self, message: str = "File system error", path: str | None = None, **details):
        super().__init__(message, details={"path": path, **details})
        self.path = path


class OperationCancelledError(StorageError):
    """
    Cooperative cancellation observed.

    processed holds the number of items completed before the
    cancellation signal was seen.
    """

    def __init__(
        self,
        message: str = "Operation cancelled",
        processed: int = 0,
        total: int | None = None,
    ):
        super().__init__(message, details={"processed": processed, "total": total})
        self.processed = processed
        self.total = total


class PartialOperationError(StorageError):
    """
    Batch or deep copy where some items failed.

    Callers can retry only failed_paths.
    """

    def __init__(
        self,
        message: str = "Partial operation failure",
        failed_paths: list[str] | None = None,
        processed: int = 0,
        total: int = 0,
    ):
        self.failed_paths = list(failed_paths or [])
        super().__init__(
            message,
            details={"failed": len(self.failed_paths), "processed": processed, "total": total},
        )
        self.processed = processed
        self.total = total


class UnexpectedError(StorageError):
    """Wraps an exception not anticipated by the other error types."""

    def __init__(self, exception: BaseException, message: str | None = None):
        super().__init__(
            message or f"Unexpected error: {exception}",
            details={"error_type": type(exception).__name__},
        )
        self.exception = exception


class SerializationError(StorageError):
    """Object could not be encoded to, or decoded from, stored JSON."""

    def __init__(
        self,
        message: str = "Serialization failed",
        operation: str | None = None,
        data_type: str | None = None,
    ):
        super().__init__(message, details={"operation": operation, "data_type": data_type})
        self.operation = operation
        self.data_type = data_type


class EncryptionError(StorageError):
    """Content could not be encrypted, or failed to decrypt (wrong key or tampered data)."""

    def __init__(self, message: str = "Encryption failed", path: str | None = None):
        super().__init__(message, details={"path": path} if path else None)
        self.path = path
