"""
In-Memory File Storage Provider

Simple in-memory implementation for testing and development.
Not suitable for production use as content is lost on process restart.
"""

import asyncio
import hashlib
from collections.abc import AsyncIterator, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from stowage.backends.common import delete_batch_result, invalid_batch, update_metadata
from stowage.core.errors import FileSystemError, StorageError, UnexpectedError
from stowage.core.health import HealthCheckResult, HealthStatus
from stowage.core.models import FileMetadata
from stowage.core.paths import matches_pattern, normalize_path, parent_path
from stowage.core.result import Result
from stowage.core.streams import DEFAULT_CHUNK_SIZE, as_chunks, iter_bytes, read_all
from stowage.interfaces.provider import FileContent, FileStorageProvider, MetadataUpdate


@dataclass
class _StoredFile:
    content: bytes
    last_modified: datetime = field(default_factory=lambda: datetime.now(UTC))
    properties: dict[str, str] = field(default_factory=dict)


def _is_under(path: str, directory: str) -> bool:
    return not directory or path.startswith(directory + "/")


def _is_child(path: str, directory: str) -> bool:
    remainder = path[len(directory) + 1:] if directory else path
    return _is_under(path, directory) and "/" not in remainder


class InMemoryFileStorageProvider(FileStorageProvider):
    """
    In-memory implementation of a file storage provider

    Files live in a dictionary keyed by normalized path; directories are
    tracked explicitly so empty directories survive. Writing a file
    registers all of its parent directories.

    Example:
        >>> provider = InMemoryFileStorageProvider(files={"docs/a.txt": b"hello"})
        >>> await provider.file_exists("docs/a.txt")
    """

    def __init__(
        self,
        location_name: str = "InMemory",
        files: dict[str, bytes] | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self._location_name = location_name
        self.chunk_size = chunk_size
        self._files: dict[str, _StoredFile] = {}
        self._directories: set[str] = set()
        self._lock = asyncio.Lock()

        for path, content in (files or {}).items():
            normalized = normalize_path(path)
            self._register_parents(normalized)
            self._files[normalized] = _StoredFile(content=bytes(content))

    @property
    def location_name(self) -> str:
        return self._location_name

    def _register_parents(self, path: str) -> None:
        parent = parent_path(path)
        while parent:
            self._directories.add(parent)
            parent = parent_path(parent)

    def _directory_known(self, path: str) -> bool:
        return not path or path in self._directories

    @staticmethod
    def _invalid_path(path: str) -> Result:
        return Result.fail(
            FileSystemError("Path cannot be empty", path=path), "Invalid path provided"
        )

    async def file_exists(self, path: str) -> Result[None]:
        normalized = normalize_path(path)
        if not normalized:
            return self._invalid_path(path)

        async with self._lock:
            if normalized not in self._files:
                return Result.fail(FileSystemError("File not found", path=path))
        return Result.ok(message=f"Checked existence of file at '{path}'")

    async def directory_exists(self, path: str) -> Result[None]:
        normalized = normalize_path(path)
        async with self._lock:
            if not self._directory_known(normalized):
                return Result.fail(FileSystemError("Directory not found", path=path))
        return Result.ok(message=f"Checked existence of directory at '{path}'")

    async def read_file(self, path: str) -> Result[AsyncIterator[bytes]]:
        normalized = normalize_path(path)
        if not normalized:
            return self._invalid_path(path)

        async with self._lock:
            stored = self._files.get(normalized)
        if stored is None:
            return Result.fail(
                FileSystemError("File not found", path=path), f"Failed to read file at '{path}'"
            )

        # bytes are immutable, so the stream is a stable snapshot
        return Result.ok(iter_bytes(stored.content, self.chunk_size), f"Read file at '{path}'")

    async def write_file(self, path: str, content: FileContent) -> Result[None]:
        normalized = normalize_path(path)
        if not normalized:
            return self._invalid_path(path)
        if content is None:
            return Result.fail(
                FileSystemError("Content cannot be empty", path=path), "Invalid content provided"
            )

        try:
            data = await read_all(as_chunks(content, self.chunk_size))
        except Exception as e:
            return Result.fail(UnexpectedError(e), f"Unexpected error writing file at '{path}'")

        async with self._lock:
            if normalized in self._directories:
                return Result.fail(
                    FileSystemError("A directory exists at this path", path=path),
                    f"Failed to write file at '{path}'",
                )
            self._register_parents(normalized)
            previous = self._files.get(normalized)
            self._files[normalized] = _StoredFile(
                content=data, properties=dict(previous.properties) if previous else {}
            )

        return Result.ok(message=f"Wrote file at '{path}'")

    async def delete_file(self, path: str) -> Result[None]:
        normalized = normalize_path(path)
        if not normalized:
            return self._invalid_path(path)

        async with self._lock:
            if self._files.pop(normalized, None) is None:
                return Result.fail(
                    FileSystemError("File not found", path=path),
                    f"Failed to delete file at '{path}'",
                )
        return Result.ok(message=f"Deleted file at '{path}'")

    async def delete_files(self, paths: Iterable[str]) -> Result[None]:
        paths = list(paths or ())
        if not paths:
            return invalid_batch()

        failures: list[tuple[str, StorageError]] = []
        async with self._lock:
            for path in paths:
                normalized = normalize_path(path)
                if not normalized or self._files.pop(normalized, None) is None:
                    failures.append((path, FileSystemError("File not found", path=path)))
        return delete_batch_result(len(paths), failures)

    async def rename_file(self, path: str, destination_path: str) -> Result[None]:
        source = normalize_path(path)
        target = normalize_path(destination_path)
        if not source or not target:
            return Result.fail(
                FileSystemError(
                    "Source or destination path cannot be empty",
                    path=f"{path} -> {destination_path}",
                ),
                "Invalid paths provided",
            )

        message = f"Failed to rename file from '{path}' to '{destination_path}'"
        async with self._lock:
            if source not in self._files:
                return Result.fail(FileSystemError("Source file not found", path=path), message)
            if target in self._directories:
                return Result.fail(
                    FileSystemError("A directory exists at this path", path=destination_path),
                    message,
                )
            if source != target:
                self._register_parents(target)
                self._files[target] = self._files.pop(source)

        return Result.ok(message=f"Renamed file from '{path}' to '{destination_path}'")

    async def get_checksum(self, path: str) -> Result[str]:
        normalized = normalize_path(path)
        if not normalized:
            return self._invalid_path(path)

        async with self._lock:
            stored = self._files.get(normalized)
        if stored is None:
            return Result.fail(
                FileSystemError("File not found", path=path),
                f"Failed to get checksum for '{path}'",
            )
        checksum = hashlib.sha256(stored.content).hexdigest()
        return Result.ok(checksum, f"Computed checksum for file at '{path}'")

    async def get_file_metadata(self, path: str) -> Result[FileMetadata]:
        normalized = normalize_path(path)
        if not normalized:
            return self._invalid_path(path)

        async with self._lock:
            stored = self._files.get(normalized)
        if stored is None:
            return Result.fail(
                FileSystemError("File not found", path=path),
                f"Failed to retrieve metadata for '{path}'",
            )

        metadata = FileMetadata(
            path=normalized,
            length=len(stored.content),
            last_modified=stored.last_modified,
            properties=dict(stored.properties),
        )
        return Result.ok(metadata, f"Retrieved metadata for file at '{path}'")

    async def set_file_metadata(self, path: str, metadata: FileMetadata) -> Result[None]:
        normalized = normalize_path(path)
        if not normalized:
            return self._invalid_path(path)

        async with self._lock:
            stored = self._files.get(normalized)
            if stored is None:
                return Result.fail(
                    FileSystemError("File not found", path=path),
                    f"Failed to set metadata for '{path}'",
                )
            if metadata.last_modified is not None:
                stored.last_modified = metadata.last_modified
            stored.properties = dict(metadata.properties)

        return Result.ok(message=f"Set metadata for file at '{path}'")

    async def update_file_metadata(
        self, path: str, update: MetadataUpdate
    ) -> Result[FileMetadata]:
        return await update_metadata(self, path, update)

    async def list_files(
        self, path: str, search_pattern: str | None = None, recursive: bool = False
    ) -> Result[list[str]]:
        directory = normalize_path(path)
        async with self._lock:
            if not self._directory_known(directory):
                return Result.fail(
                    FileSystemError("Directory not found", path=path),
                    f"Failed to list files in '{path}'",
                )
            check = _is_under if recursive else _is_child
            files = sorted(
                key
                for key in self._files
                if check(key, directory) and matches_pattern(key.rsplit("/", 1)[-1], search_pattern)
            )
        return Result.ok(files, f"Listed files in '{path}'")

    async def list_directories(
        self, path: str, search_pattern: str | None = None, recursive: bool = False
    ) -> Result[list[str]]:
        directory = normalize_path(path)
        async with self._lock:
            if not self._directory_known(directory):
                return Result.fail(
                    FileSystemError("Directory not found", path=path),
                    f"Failed to list directories in '{path}'",
                )
            check = _is_under if recursive else _is_child
            directories = sorted(
                entry
                for entry in self._directories
                if check(entry, directory)
                and matches_pattern(entry.rsplit("/", 1)[-1], search_pattern)
            )
        return Result.ok(directories, f"Listed directories in '{path}'")

    async def create_directory(self, path: str) -> Result[None]:
        normalized = normalize_path(path)
        if not normalized:
            return self._invalid_path(path)

        async with self._lock:
            if normalized in self._files:
                return Result.fail(
                    FileSystemError("A file exists at this path", path=path),
                    f"Failed to create directory at '{path}'",
                )
            self._register_parents(normalized)
            self._directories.add(normalized)
        return Result.ok(message=f"Created directory at '{path}'")

    async def delete_directory(self, path: str, recursive: bool = False) -> Result[None]:
        normalized = normalize_path(path)
        if not normalized:
            return self._invalid_path(path)

        async with self._lock:
            if normalized not in self._directories:
                return Result.fail(
                    FileSystemError("Directory not found", path=path),
                    f"Failed to delete directory at '{path}'",
                )

            nested_files = [key for key in self._files if _is_under(key, normalized)]
            nested_dirs = [entry for entry in self._directories if _is_under(entry, normalized)]
            if (nested_files or nested_dirs) and not recursive:
                return Result.fail(
                    FileSystemError("Directory is not empty", path=path),
                    f"Failed to delete directory at '{path}'",
                )

            for key in nested_files:
                del self._files[key]
            self._directories.difference_update(nested_dirs)
            self._directories.discard(normalized)

        return Result.ok(message=f"Deleted directory at '{path}'")

    async def check_health(self) -> Result[HealthCheckResult]:
        async with self._lock:
            details = {"files": len(self._files), "directories": len(self._directories)}
        return Result.ok(
            HealthCheckResult(
                status=HealthStatus.HEALTHY,
                latency_ms=0.0,
                message="In-memory storage is available",
                details=details,
            )
        )

    def clear(self) -> None:
        """Clear all data (useful for testing)"""
        self._files.clear()
        self._directories.clear()
