"""
Caching behavior - remembers existence checks, metadata, checksums and listings.

Only successful results are cached. Any call that can change a file
drops the cached entries for that path, and any call that can add or
remove an entry drops every cached listing. Deleting a directory drops
every entry of the wrapped provider.
"""

import dataclasses
from collections.abc import AsyncIterator, Iterable
from dataclasses import dataclass
from typing import Any

from stowage.behaviors.base import FileStorageBehavior
from stowage.core.cache import TTLCache
from stowage.core.health import HealthCheckResult
from stowage.core.logger import get_logger
from stowage.core.models import FileMetadata
from stowage.core.paths import normalize_path
from stowage.core.result import Result
from stowage.interfaces.provider import FileContent, FileStorageProvider, MetadataUpdate

logger = get_logger(__name__)

_FILE_EXISTS = "file_exists"
_DIRECTORY_EXISTS = "directory_exists"
_METADATA = "metadata"
_CHECKSUM = "checksum"
_LISTING = "list"


def _copy(metadata: FileMetadata) -> FileMetadata:
    return dataclasses.replace(metadata, properties=dict(metadata.properties))


@dataclass(frozen=True)
class CachingOptions:
    """
    Attributes:
        ttl_seconds: Lifetime of a cached entry (None uses the cache default)
    """

    ttl_seconds: float | None = None


class CachingFileStorageBehavior(FileStorageBehavior):
    """
    Decorator that caches existence checks, get_file_metadata, get_checksum,
    list_files and list_directories.

    Keys are scoped to the wrapped provider instance, so one TTLCache can
    be shared by many providers without collisions.
    """

    def __init__(
        self,
        inner_provider: FileStorageProvider,
        cache: TTLCache | None = None,
        options: CachingOptions | None = None,
    ):
        super().__init__(inner_provider)
        self.cache = cache if cache is not None else TTLCache()
        self.options = options or CachingOptions()
        self._scope = f"stowage:{id(inner_provider):x}:"

    def _key(self, kind: str, path: str) -> str:
        return f"{self._scope}{kind}:{normalize_path(path)}"

    def _listing_key(self, kind: str, path: str, pattern: str | None, recursive: bool) -> str:
        return f"{self._scope}{_LISTING}:{kind}:{normalize_path(path)}|{pattern}|{recursive}"

    def _remember(self, kind: str, path: str, value: Any) -> None:
        self.cache.set(self._key(kind, path), value, self.options.ttl_seconds)

    def _invalidate(self, path: str) -> None:
        for kind in (_FILE_EXISTS, _METADATA, _CHECKSUM):
            self.cache.delete(self._key(kind, path))

    def _invalidate_listings(self) -> None:
        self.cache.delete_prefix(f"{self._scope}{_LISTING}:")

    async def _listing(self, kind: str, path: str, pattern: str | None, recursive: bool, call):
        key = self._listing_key(kind, path, pattern, recursive)
        cached = self.cache.get(key)
        if cached is not None:
            return Result.ok(list(cached), f"Listed {kind} in '{path}' (cached)")

        result = await call()
        if result.is_success and result.value is not None:
            self.cache.set(key, list(result.value), self.options.ttl_seconds)
        return result

    async def file_exists(self, path: str) -> Result[None]:
        if self._key(_FILE_EXISTS, path) in self.cache:
            return Result.ok(message=f"Checked existence of file at '{path}' (cached)")

        result = await self.inner_provider.file_exists(path)
        if result.is_success:
            self._remember(_FILE_EXISTS, path, True)
        return result

    async def directory_exists(self, path: str) -> Result[None]:
        if self._key(_DIRECTORY_EXISTS, path) in self.cache:
            return Result.ok(message=f"Checked existence of directory at '{path}' (cached)")

        result = await self.inner_provider.directory_exists(path)
        if result.is_success:
            self._remember(_DIRECTORY_EXISTS, path, True)
        return result

    async def read_file(self, path: str) -> Result[AsyncIterator[bytes]]:
        return await self.inner_provider.read_file(path)

    async def write_file(self, path: str, content: FileContent) -> Result[None]:
        self._invalidate(path)
        result = await self.inner_provider.write_file(path, content)
        self._invalidate(path)
        self._invalidate_listings()
        return result

    async def delete_file(self, path: str) -> Result[None]:
        result = await self.inner_provider.delete_file(path)
        self._invalidate(path)
        self._invalidate_listings()
        return result

    async def delete_files(self, paths: Iterable[str]) -> Result[None]:
        paths = list(paths or ())
        result = await self.inner_provider.delete_files(paths)
        for path in paths:
            self._invalidate(path)
        self._invalidate_listings()
        return result

    async def rename_file(self, path: str, destination_path: str) -> Result[None]:
        result = await self.inner_provider.rename_file(path, destination_path)
        self._invalidate(path)
        self._invalidate(destination_path)
        self._invalidate_listings()
        return result

    async def get_checksum(self, path: str) -> Result[str]:
        cached = self.cache.get(self._key(_CHECKSUM, path))
        if cached is not None:
            return Result.ok(cached, f"Computed checksum for file at '{path}' (cached)")

        result = await self.inner_provider.get_checksum(path)
        if result.is_success and result.value is not None:
            self._remember(_CHECKSUM, path, result.value)
        return result

    async def get_file_metadata(self, path: str) -> Result[FileMetadata]:
        cached = self.cache.get(self._key(_METADATA, path))
        if cached is not None:
            return Result.ok(
                _copy(cached),
                f"Retrieved metadata for file at '{path}' (cached)",
            )

        result = await self.inner_provider.get_file_metadata(path)
        if result.is_success and result.value is not None:
            self._remember(_METADATA, path, _copy(result.value))
        return result

    async def set_file_metadata(self, path: str, metadata: FileMetadata) -> Result[None]:
        result = await self.inner_provider.set_file_metadata(path, metadata)
        self._invalidate(path)
        return result

    async def update_file_metadata(
        self, path: str, update: MetadataUpdate
    ) -> Result[FileMetadata]:
        self._invalidate(path)
        result = await self.inner_provider.update_file_metadata(path, update)
        self._invalidate(path)
        return result

    async def list_files(
        self, path: str, search_pattern: str | None = None, recursive: bool = False
    ) -> Result[list[str]]:
        return await self._listing(
            "files",
            path,
            search_pattern,
            recursive,
            lambda: self.inner_provider.list_files(path, search_pattern, recursive),
        )

    async def list_directories(
        self, path: str, search_pattern: str | None = None, recursive: bool = False
    ) -> Result[list[str]]:
        return await self._listing(
            "directories",
            path,
            search_pattern,
            recursive,
            lambda: self.inner_provider.list_directories(path, search_pattern, recursive),
        )

    async def create_directory(self, path: str) -> Result[None]:
        result = await self.inner_provider.create_directory(path)
        self.cache.delete(self._key(_DIRECTORY_EXISTS, path))
        self._invalidate_listings()
        return result

    async def delete_directory(self, path: str, recursive: bool = False) -> Result[None]:
        result = await self.inner_provider.delete_directory(path, recursive)
        if result.is_success:
            removed = self.cache.delete_prefix(self._scope)
            logger.debug(f"Dropped {removed} cached entries after deleting '{path}'")
        return result

    async def check_health(self) -> Result[HealthCheckResult]:
        return await self.inner_provider.check_health()

    def clear(self) -> int:
        """Drop every cached entry of the wrapped provider."""
        return self.cache.delete_prefix(self._scope)
