"""
Retry behavior - re-issues failed provider calls with exponential backoff.

Only failures carrying a retryable error type are retried. Streamed write
content can only be consumed once, so writes are retried only when the
content is raw bytes. Batch deletes are never retried.
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from stowage.behaviors.base import FileStorageBehavior
from stowage.core.errors import StorageError, UnexpectedError
from stowage.core.health import HealthCheckResult
from stowage.core.logger import get_logger
from stowage.core.models import FileMetadata
from stowage.core.result import Result
from stowage.interfaces.provider import FileContent, FileStorageProvider, MetadataUpdate

T = TypeVar("T")


@dataclass(frozen=True)
class RetryOptions:
    """
    Configuration for the retry behavior.

    Attributes:
        max_retries: Retries after the first attempt (0 disables retrying)
        initial_delay_seconds: Delay before the first retry
        backoff_factor: Multiplier applied to the delay after each retry
        max_delay_seconds: Upper bound for a single delay
        retryable_errors: Error types that make a failed result worth retrying
    """

    max_retries: int = 3
    initial_delay_seconds: float = 0.5
    backoff_factor: float = 2.0
    max_delay_seconds: float = 30.0
    retryable_errors: tuple[type[StorageError], ...] = field(default=(UnexpectedError,))

    def __post_init__(self):
        if self.max_retries < 0:
            msg = f"max_retries cannot be negative, got {self.max_retries}"
            raise ValueError(msg)

    def delay_for(self, attempt: int) -> float:
        """Backoff delay before retry number attempt (0-based)."""
        delay = self.initial_delay_seconds * (self.backoff_factor**attempt)
        return min(delay, self.max_delay_seconds)


class RetryFileStorageBehavior(FileStorageBehavior):
    """
    Decorator that retries transient provider failures.

    Example:
        >>> options = RetryOptions(max_retries=5, initial_delay_seconds=0.1)
        >>> provider = RetryFileStorageBehavior(LocalFileStorageProvider("./data"), options=options)
    """

    def __init__(
        self,
        inner_provider: FileStorageProvider,
        logger: Any = None,
        options: RetryOptions | None = None,
    ):
        super().__init__(inner_provider)
        self.logger = logger or get_logger(__name__)
        self.options = options or RetryOptions()

    def _is_retryable(self, result: Result[Any]) -> bool:
        return any(isinstance(error, self.options.retryable_errors) for error in result.errors)

    async def _run(
        self, operation: str, path: str, call: Callable[[], Awaitable[Result[T]]]
    ) -> Result[T]:
        result = await call()
        attempt = 0

        while result.is_failure and self._is_retryable(result):
            if attempt >= self.options.max_retries:
                self.logger.error(
                    f"file storage: {operation} '{path}' failed after {attempt} retries"
                )
                return result.with_message(
                    f"Failed to {operation} '{path}' after {attempt} retries"
                )

            delay = self.options.delay_for(attempt)
            attempt += 1
            last_error = result.errors[-1] if result.errors else None
            self.logger.warning(
                f"file storage: retry {attempt}/{self.options.max_retries} to {operation} "
                f"'{path}' in {delay:.2f}s due to: {last_error}"
            )
            await asyncio.sleep(delay)
            result = await call()

        if attempt and result.is_success:
            self.logger.info(
                f"file storage: {operation} '{path}' succeeded after {attempt} retries"
            )
        return result

    async def file_exists(self, path: str) -> Result[None]:
        return await self._run(
            "check existence of", path, lambda: self.inner_provider.file_exists(path)
        )

    async def directory_exists(self, path: str) -> Result[None]:
        return await self._run(
            "check existence of directory", path, lambda: self.inner_provider.directory_exists(path)
        )

    async def read_file(self, path: str) -> Result[AsyncIterator[bytes]]:
        return await self._run("read", path, lambda: self.inner_provider.read_file(path))

    async def write_file(self, path: str, content: FileContent) -> Result[None]:
        if not isinstance(content, (bytes, bytearray, memoryview)):
            return await self.inner_provider.write_file(path, content)
        return await self._run("write", path, lambda: self.inner_provider.write_file(path, content))

    async def delete_file(self, path: str) -> Result[None]:
        return await self._run("delete", path, lambda: self.inner_provider.delete_file(path))

    async def delete_files(self, paths: Iterable[str]) -> Result[None]:
        # a partially applied batch cannot be replayed
        return await self.inner_provider.delete_files(paths)

    async def rename_file(self, path: str, destination_path: str) -> Result[None]:
        return await self._run(
            "rename",
            path,
            lambda: self.inner_provider.rename_file(path, destination_path),
        )

    async def get_checksum(self, path: str) -> Result[str]:
        return await self._run(
            "compute checksum of", path, lambda: self.inner_provider.get_checksum(path)
        )

    async def get_file_metadata(self, path: str) -> Result[FileMetadata]:
        return await self._run(
            "retrieve metadata for", path, lambda: self.inner_provider.get_file_metadata(path)
        )

    async def set_file_metadata(self, path: str, metadata: FileMetadata) -> Result[None]:
        return await self._run(
            "set metadata for", path, lambda: self.inner_provider.set_file_metadata(path, metadata)
        )

    async def update_file_metadata(
        self, path: str, update: MetadataUpdate
    ) -> Result[FileMetadata]:
        return await self._run(
            "update metadata for",
            path,
            lambda: self.inner_provider.update_file_metadata(path, update),
        )

    async def list_files(
        self, path: str, search_pattern: str | None = None, recursive: bool = False
    ) -> Result[list[str]]:
        return await self._run(
            "list files in",
            path,
            lambda: self.inner_provider.list_files(path, search_pattern, recursive),
        )

    async def list_directories(
        self, path: str, search_pattern: str | None = None, recursive: bool = False
    ) -> Result[list[str]]:
        return await self._run(
            "list directories in",
            path,
            lambda: self.inner_provider.list_directories(path, search_pattern, recursive),
        )

    async def create_directory(self, path: str) -> Result[None]:
        return await self._run(
            "create directory", path, lambda: self.inner_provider.create_directory(path)
        )

    async def delete_directory(self, path: str, recursive: bool = False) -> Result[None]:
        return await self._run(
            "delete directory",
            path,
            lambda: self.inner_provider.delete_directory(path, recursive),
        )

    async def check_health(self) -> Result[HealthCheckResult]:
        # health checks are never retried
        return await self.inner_provider.check_health()
