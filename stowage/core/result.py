"""
Result value returned by every provider, transfer and tree operation.

A Result is either a success carrying an optional value, or a failure
carrying one or more StorageError instances. Both carry human-readable
messages. Operations never signal anticipated failures by raising.

Usage:
    >>> result = await provider.get_file_metadata("docs/readme.md")
    >>> if result.is_failure:
    ...     print(result.messages, result.errors)
    ... else:
    ...     print(result.value.length)
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from stowage.core.errors import StorageError

T = TypeVar("T")


@dataclass
class Result(Generic[T]):
    """
    Outcome of an operation.

    Attributes:
        value: Payload of a successful operation (None for failures)
        errors: Structured errors; any error marks the result as failed
        messages: Human-readable messages, in the order they were added
    """

    value: T | None = None
    errors: list[StorageError] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)
    success: bool = True

    @classmethod
    def ok(cls, value: T | None = None, message: str | None = None) -> "Result[T]":
        """Create a successful result."""
        return cls(value=value).with_message(message)

    @classmethod
    def fail(
        cls,
        error: StorageError | None = None,
        message: str | None = None,
    ) -> "Result[T]":
        """Create a failed result, optionally with an error and message."""
        return cls(success=False).with_error(error).with_message(message)

    @classmethod
    def from_failure(cls, other: "Result[Any]", message: str | None = None) -> "Result[T]":
        """Create a failure that carries over another result's errors and messages."""
        return (
            cls(success=False)
            .with_errors(other.errors)
            .with_messages(other.messages)
            .with_message(message)
        )

    @property
    def is_success(self) -> bool:
        return self.success

    @property
    def is_failure(self) -> bool:
        return not self.success

    def with_message(self, message: str | None) -> "Result[T]":
        if message and message.strip():
            self.messages.append(message)
        return self

    def with_messages(self, messages: Iterable[str] | None) -> "Result[T]":
        for message in messages or ():
            self.with_message(message)
        return self

    def with_error(self, error: StorageError | None) -> "Result[T]":
        if error is not None:
            self.errors.append(error)
            self.success = False
        return self

    def with_errors(self, errors: Iterable[StorageError] | None) -> "Result[T]":
        for error in errors or ():
            self.with_error(error)
        return self

    def has_error(self, error_type: type[StorageError]) -> bool:
        """Check whether any carried error is an instance of error_type."""
        return any(isinstance(error, error_type) for error in self.errors)

    def get_error(self, error_type: type[StorageError]) -> StorageError | None:
        """Return the first carried error of error_type, if any."""
        for error in self.errors:
            if isinstance(error, error_type):
                return error
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (value omitted, it may not be serializable)."""
        return {
            "success": self.success,
            "messages": list(self.messages),
            "errors": [
                {"type": type(error).__name__, "message": str(error)} for error in self.errors
            ],
        }
