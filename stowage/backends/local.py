"""
Local Filesystem File Storage Provider

Maps provider paths onto a directory on the local disk. File I/O goes
through aiofiles; directory scans, timestamp updates and recursive
deletes run in a worker thread, so no call blocks the event loop.

Example:
    >>> provider = LocalFileStorageProvider(root_path="./data", location_name="Local")
    >>> await provider.write_file("reports/2024.csv", b"id,total\\n")
    >>> result = await provider.list_files("reports")
"""

import asyncio
import hashlib
import os
import re
import shutil
import time
import uuid
from collections.abc import AsyncIterator, Iterable
from datetime import UTC, datetime
from pathlib import Path

import aiofiles
import aiofiles.os

from stowage.backends.common import delete_batch_result, invalid_batch, update_metadata
from stowage.core.errors import FileSystemError, StorageError, UnexpectedError
from stowage.core.health import HealthCheckResult, HealthStatus
from stowage.core.models import FileMetadata
from stowage.core.paths import matches_pattern, normalize_path
from stowage.core.result import Result
from stowage.core.serialization import deserialize, serialize
from stowage.core.streams import DEFAULT_CHUNK_SIZE, as_chunks
from stowage.interfaces.provider import FileContent, FileStorageProvider, MetadataUpdate

# in-flight writes and property sidecars, never listed
_HIDDEN = re.compile(r"^\..+\.(?:[0-9a-f]{32}\.tmp|props\.json)$")


def _properties_path(target: Path) -> Path:
    return target.with_name(f".{target.name}.props.json")


def _scan(directory: Path, recursive: bool, want_files: bool) -> list[Path]:
    entries = directory.rglob("*") if recursive else directory.iterdir()
    return [
        entry
        for entry in entries
        if not _HIDDEN.match(entry.name)
        and (entry.is_file() if want_files else entry.is_dir())
    ]


class LocalFileStorageProvider(FileStorageProvider):
    """
    Filesystem-backed provider rooted at a local directory.

    Writes land in a temporary sibling file first and are renamed into
    place, so readers never observe a half-written file. Free-form
    metadata properties live in a hidden JSON sidecar next to the file.
    """

    def __init__(
        self,
        root_path: str | Path,
        location_name: str = "Local",
        ensure_root: bool = True,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """
        Initialize the provider.

        Args:
            root_path: Directory that maps to the provider root
            location_name: Logical name reported by location_name
            ensure_root: Create root_path if it does not exist
            chunk_size: Read chunk size in bytes
        """
        self.root_path = Path(root_path).resolve()
        self._location_name = location_name
        self.chunk_size = chunk_size

        if ensure_root:
            self.root_path.mkdir(parents=True, exist_ok=True)

    @property
    def location_name(self) -> str:
        return self._location_name

    @property
    def description(self) -> str:
        return f"{type(self).__name__} ({self.location_name}: {self.root_path})"

    def _resolve(self, path: str) -> Path:
        """Map a provider path to an absolute path, refusing escapes from the root."""
        normalized = normalize_path(path)
        if any(part == ".." for part in normalized.split("/")):
            raise FileSystemError("Path escapes the storage root", path=path)
        return self.root_path / normalized if normalized else self.root_path

    def _relative(self, absolute: Path) -> str:
        return absolute.relative_to(self.root_path).as_posix()

    @staticmethod
    def _failure(error: Exception, path: str, message: str) -> Result:
        if isinstance(error, StorageError):
            return Result.fail(error, message)
        if isinstance(error, FileNotFoundError):
            return Result.fail(FileSystemError("Path not found", path=path), message)
        if isinstance(error, (IsADirectoryError, NotADirectoryError, FileExistsError)):
            return Result.fail(FileSystemError(str(error), path=path), message)
        return Result.fail(UnexpectedError(error), message)

    async def _existing_file(self, path: str) -> Path:
        """Resolve path and check it is a file, raising FileSystemError otherwise."""
        target = self._resolve(path)
        if not normalize_path(path) or not await aiofiles.os.path.isfile(target):
            raise FileSystemError("File not found", path=path)
        return target

    async def file_exists(self, path: str) -> Result[None]:
        try:
            target = self._resolve(path)
        except FileSystemError as e:
            return Result.fail(e)

        if not normalize_path(path) or not await aiofiles.os.path.isfile(target):
            return Result.fail(FileSystemError("File not found", path=path))
        return Result.ok(message=f"Checked existence of file at '{path}'")

    async def directory_exists(self, path: str) -> Result[None]:
        try:
            target = self._resolve(path)
        except FileSystemError as e:
            return Result.fail(e)

        if not await aiofiles.os.path.isdir(target):
            return Result.fail(FileSystemError("Directory not found", path=path))
        return Result.ok(message=f"Checked existence of directory at '{path}'")

    async def read_file(self, path: str) -> Result[AsyncIterator[bytes]]:
        message = f"Failed to read file at '{path}'"
        try:
            target = await self._existing_file(path)
        except Exception as e:
            return self._failure(e, path, message)

        return Result.ok(self._stream(target), f"Read file at '{path}'")

    async def _stream(self, target: Path) -> AsyncIterator[bytes]:
        async with aiofiles.open(target, "rb") as f:
            while chunk := await f.read(self.chunk_size):
                yield chunk

    async def write_file(self, path: str, content: FileContent) -> Result[None]:
        message = f"Failed to write file at '{path}'"
        if not normalize_path(path):
            return Result.fail(FileSystemError("Path cannot be empty", path=path), message)
        if content is None:
            return Result.fail(
                FileSystemError("Content cannot be empty", path=path), "Invalid content provided"
            )

        temp_path: Path | None = None
        try:
            target = self._resolve(path)
            if await aiofiles.os.path.isdir(target):
                return Result.fail(
                    FileSystemError("A directory exists at this path", path=path), message
                )
            await aiofiles.os.makedirs(target.parent, exist_ok=True)

            temp_path = target.with_name(f".{target.name}.{uuid.uuid4().hex}.tmp")
            async with aiofiles.open(temp_path, "wb") as f:
                async for chunk in as_chunks(content, self.chunk_size):
                    await f.write(chunk)
            await aiofiles.os.replace(temp_path, target)
            temp_path = None
        except Exception as e:
            return self._failure(e, path, message)
        finally:
            if temp_path is not None and await aiofiles.os.path.exists(temp_path):
                await aiofiles.os.remove(temp_path)

        return Result.ok(message=f"Wrote file at '{path}'")

    async def _remove_properties(self, target: Path) -> None:
        sidecar = _properties_path(target)
        if await aiofiles.os.path.exists(sidecar):
            await aiofiles.os.remove(sidecar)

    async def delete_file(self, path: str) -> Result[None]:
        message = f"Failed to delete file at '{path}'"
        try:
            target = await self._existing_file(path)
            await aiofiles.os.remove(target)
            await self._remove_properties(target)
        except Exception as e:
            return self._failure(e, path, message)

        return Result.ok(message=f"Deleted file at '{path}'")

    async def delete_files(self, paths: Iterable[str]) -> Result[None]:
        paths = list(paths or ())
        if not paths:
            return invalid_batch()

        failures: list[tuple[str, StorageError]] = []
        for path in paths:
            result = await self.delete_file(path)
            if result.is_failure:
                error = result.errors[0] if result.errors else FileSystemError(path=path)
                failures.append((path, error))
        return delete_batch_result(len(paths), failures)

    async def rename_file(self, path: str, destination_path: str) -> Result[None]:
        if not normalize_path(path) or not normalize_path(destination_path):
            return Result.fail(
                FileSystemError(
                    "Source or destination path cannot be empty",
                    path=f"{path} -> {destination_path}",
                ),
                "Invalid paths provided",
            )

        message = f"Failed to rename file from '{path}' to '{destination_path}'"
        try:
            source = self._resolve(path)
            if not await aiofiles.os.path.isfile(source):
                return Result.fail(FileSystemError("Source file not found", path=path), message)
            target = self._resolve(destination_path)
            if await aiofiles.os.path.isdir(target):
                return Result.fail(
                    FileSystemError("A directory exists at this path", path=destination_path),
                    message,
                )
            if source != target:
                await aiofiles.os.makedirs(target.parent, exist_ok=True)
                await aiofiles.os.replace(source, target)
                await self._remove_properties(target)
                sidecar = _properties_path(source)
                if await aiofiles.os.path.exists(sidecar):
                    await aiofiles.os.replace(sidecar, _properties_path(target))
        except Exception as e:
            return self._failure(e, path, message)

        return Result.ok(message=f"Renamed file from '{path}' to '{destination_path}'")

    async def get_checksum(self, path: str) -> Result[str]:
        message = f"Failed to get checksum for '{path}'"
        digest = hashlib.sha256()
        try:
            target = await self._existing_file(path)
            async with aiofiles.open(target, "rb") as f:
                while chunk := await f.read(self.chunk_size):
                    digest.update(chunk)
        except Exception as e:
            return self._failure(e, path, message)

        return Result.ok(digest.hexdigest(), f"Computed checksum for file at '{path}'")

    async def _read_properties(self, target: Path) -> dict[str, str]:
        sidecar = _properties_path(target)
        if not await aiofiles.os.path.exists(sidecar):
            return {}
        async with aiofiles.open(sidecar, "rb") as f:
            return deserialize(await f.read(), dict)

    async def get_file_metadata(self, path: str) -> Result[FileMetadata]:
        message = f"Failed to retrieve metadata for '{path}'"
        try:
            target = await self._existing_file(path)
            stat = await aiofiles.os.stat(target)
            properties = await self._read_properties(target)
        except Exception as e:
            return self._failure(e, path, message)

        metadata = FileMetadata(
            path=normalize_path(path),
            length=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=UTC),
            properties=properties,
        )
        return Result.ok(metadata, f"Retrieved metadata for file at '{path}'")

    async def set_file_metadata(self, path: str, metadata: FileMetadata) -> Result[None]:
        message = f"Failed to set metadata for '{path}'"
        try:
            target = await self._existing_file(path)
            if metadata.properties:
                async with aiofiles.open(_properties_path(target), "wb") as f:
                    await f.write(serialize(dict(metadata.properties)))
            else:
                await self._remove_properties(target)
            if metadata.last_modified is not None:
                timestamp = metadata.last_modified.timestamp()
                await asyncio.to_thread(os.utime, target, (timestamp, timestamp))
        except Exception as e:
            return self._failure(e, path, message)

        return Result.ok(message=f"Set metadata for file at '{path}'")

    async def update_file_metadata(
        self, path: str, update: MetadataUpdate
    ) -> Result[FileMetadata]:
        return await update_metadata(self, path, update)

    async def _list(
        self, path: str, search_pattern: str | None, recursive: bool, want_files: bool
    ) -> Result[list[str]]:
        kind = "files" if want_files else "directories"
        message = f"Failed to list {kind} in '{path}'"
        try:
            directory = self._resolve(path)
            if not await aiofiles.os.path.isdir(directory):
                return Result.fail(FileSystemError("Directory not found", path=path), message)
            entries = await asyncio.to_thread(_scan, directory, recursive, want_files)
        except Exception as e:
            return self._failure(e, path, message)

        listed = sorted(
            self._relative(entry)
            for entry in entries
            if matches_pattern(entry.name, search_pattern)
        )
        return Result.ok(listed, f"Listed {kind} in '{path}'")

    async def list_files(
        self, path: str, search_pattern: str | None = None, recursive: bool = False
    ) -> Result[list[str]]:
        return await self._list(path, search_pattern, recursive, want_files=True)

    async def list_directories(
        self, path: str, search_pattern: str | None = None, recursive: bool = False
    ) -> Result[list[str]]:
        return await self._list(path, search_pattern, recursive, want_files=False)

    async def create_directory(self, path: str) -> Result[None]:
        message = f"Failed to create directory at '{path}'"
        try:
            target = self._resolve(path)
            if await aiofiles.os.path.isfile(target):
                return Result.fail(
                    FileSystemError("A file exists at this path", path=path), message
                )
            await aiofiles.os.makedirs(target, exist_ok=True)
        except Exception as e:
            return self._failure(e, path, message)

        return Result.ok(message=f"Created directory at '{path}'")

    async def delete_directory(self, path: str, recursive: bool = False) -> Result[None]:
        message = f"Failed to delete directory at '{path}'"
        if not normalize_path(path):
            return Result.fail(
                FileSystemError("Cannot delete the storage root", path=path), message
            )

        try:
            target = self._resolve(path)
            if not await aiofiles.os.path.isdir(target):
                return Result.fail(FileSystemError("Directory not found", path=path), message)
            if recursive:
                await asyncio.to_thread(shutil.rmtree, target)
            elif await aiofiles.os.listdir(target):
                return Result.fail(FileSystemError("Directory is not empty", path=path), message)
            else:
                await aiofiles.os.rmdir(target)
        except Exception as e:
            return self._failure(e, path, message)

        return Result.ok(message=f"Deleted directory at '{path}'")

    async def check_health(self) -> Result[HealthCheckResult]:
        start = time.perf_counter()
        exists = await aiofiles.os.path.isdir(self.root_path)
        writable = await asyncio.to_thread(os.access, self.root_path, os.W_OK)
        elapsed_ms = (time.perf_counter() - start) * 1000

        if not exists:
            status, text = HealthStatus.UNHEALTHY, "Storage root does not exist"
        elif not writable:
            status, text = HealthStatus.DEGRADED, "Storage root is read-only"
        else:
            status, text = HealthStatus.HEALTHY, "Local storage is available"

        return Result.ok(
            HealthCheckResult(
                status=status,
                latency_ms=elapsed_ms,
                message=text,
                details={"root_path": str(self.root_path)},
            )
        )
