"""
Logging behavior - records every provider call around an inner provider.

Logs the start of each call, its outcome and the elapsed time. Results
pass through untouched.
"""

import time
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from stowage.behaviors.base import FileStorageBehavior
from stowage.core.health import HealthCheckResult
from stowage.core.logger import get_logger
from stowage.core.models import FileMetadata
from stowage.core.result import Result
from stowage.interfaces.provider import FileContent, FileStorageProvider, MetadataUpdate

T = TypeVar("T")


@dataclass(frozen=True)
class LoggingOptions:
    """
    Attributes:
        level: Logger method used for start/success lines ("debug", "info", ...)
        failure_level: Logger method used for failed results
        log_start: Emit a line before the inner call
    """

    level: str = "info"
    failure_level: str = "warning"
    log_start: bool = True


class LoggingFileStorageBehavior(FileStorageBehavior):
    """
    Decorator that logs provider operations.

    Example:
        >>> provider = LoggingFileStorageBehavior(InMemoryFileStorageProvider())
        >>> await provider.write_file("a.txt", b"hi")
        # INFO stowage.behaviors.logging: file storage: write started on 'a.txt' (InMemory)
    """

    def __init__(
        self,
        inner_provider: FileStorageProvider,
        logger: Any = None,
        options: LoggingOptions | None = None,
    ):
        super().__init__(inner_provider)
        self.logger = logger or get_logger(__name__)
        self.options = options or LoggingOptions()

    def _log(self, level: str, message: str) -> None:
        getattr(self.logger, level)(message)

    async def _run(
        self, operation: str, path: str, call: Callable[[], Awaitable[Result[T]]]
    ) -> Result[T]:
        location = self.location_name
        if self.options.log_start:
            self._log(
                self.options.level, f"file storage: {operation} started on '{path}' ({location})"
            )

        start = time.perf_counter()
        result = await call()
        elapsed_ms = (time.perf_counter() - start) * 1000

        if result.is_success:
            self._log(
                self.options.level,
                f"file storage: {operation} finished on '{path}' ({location}) "
                f"-> took {elapsed_ms:.2f} ms",
            )
        else:
            errors = "; ".join(str(error) for error in result.errors) or "unknown error"
            self._log(
                self.options.failure_level,
                f"file storage: {operation} failed on '{path}' ({location}) "
                f"-> took {elapsed_ms:.2f} ms: {errors}",
            )
        return result

    async def file_exists(self, path: str) -> Result[None]:
        return await self._run("exists", path, lambda: self.inner_provider.file_exists(path))

    async def directory_exists(self, path: str) -> Result[None]:
        return await self._run(
            "directory exists", path, lambda: self.inner_provider.directory_exists(path)
        )

    async def read_file(self, path: str) -> Result[AsyncIterator[bytes]]:
        return await self._run("read", path, lambda: self.inner_provider.read_file(path))

    async def write_file(self, path: str, content: FileContent) -> Result[None]:
        return await self._run(
            "write", path, lambda: self.inner_provider.write_file(path, content)
        )

    async def delete_file(self, path: str) -> Result[None]:
        return await self._run("delete", path, lambda: self.inner_provider.delete_file(path))

    async def delete_files(self, paths: Iterable[str]) -> Result[None]:
        paths = list(paths or ())
        return await self._run(
            "delete files", f"{len(paths)} files", lambda: self.inner_provider.delete_files(paths)
        )

    async def rename_file(self, path: str, destination_path: str) -> Result[None]:
        return await self._run(
            "rename",
            f"{path}' -> '{destination_path}",
            lambda: self.inner_provider.rename_file(path, destination_path),
        )

    async def get_checksum(self, path: str) -> Result[str]:
        return await self._run("checksum", path, lambda: self.inner_provider.get_checksum(path))

    async def get_file_metadata(self, path: str) -> Result[FileMetadata]:
        return await self._run(
            "get metadata", path, lambda: self.inner_provider.get_file_metadata(path)
        )

    async def set_file_metadata(self, path: str, metadata: FileMetadata) -> Result[None]:
        return await self._run(
            "set metadata", path, lambda: self.inner_provider.set_file_metadata(path, metadata)
        )

    async def update_file_metadata(
        self, path: str, update: MetadataUpdate
    ) -> Result[FileMetadata]:
        return await self._run(
            "update metadata",
            path,
            lambda: self.inner_provider.update_file_metadata(path, update),
        )

    async def list_files(
        self, path: str, search_pattern: str | None = None, recursive: bool = False
    ) -> Result[list[str]]:
        return await self._run(
            "list files",
            path,
            lambda: self.inner_provider.list_files(path, search_pattern, recursive),
        )

    async def list_directories(
        self, path: str, search_pattern: str | None = None, recursive: bool = False
    ) -> Result[list[str]]:
        return await self._run(
            "list directories",
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
        return await self._run("health check", "", self.inner_provider.check_health)
