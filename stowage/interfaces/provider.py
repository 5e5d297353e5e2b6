"""
File Storage Provider Interface

Defines the capability contract every storage back-end (and every
behavior wrapping one) satisfies. Every operation returns a Result and
reports anticipated faults as structured errors instead of raising.

Paths are "/"-separated and relative to the provider root; the empty
string denotes the root itself.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterable, AsyncIterator, Callable, Iterable

from stowage.core.health import HealthCheckResult
from stowage.core.models import FileMetadata
from stowage.core.result import Result

FileContent = bytes | AsyncIterable[bytes]
MetadataUpdate = Callable[[FileMetadata], FileMetadata]


class FileStorageProvider(ABC):
    """Abstract interface for file storage providers"""

    @property
    @abstractmethod
    def location_name(self) -> str:
        """Logical name of the storage location."""

    @property
    def description(self) -> str:
        return f"{type(self).__name__} ({self.location_name})"

    @abstractmethod
    async def file_exists(self, path: str) -> Result[None]:
        """
        Check whether a file exists.

        Returns:
            Success if the file exists, failure with FileSystemError otherwise
        """

    @abstractmethod
    async def directory_exists(self, path: str) -> Result[None]:
        """
        Check whether a directory exists.

        Returns:
            Success if the directory exists, failure with FileSystemError otherwise
        """

    @abstractmethod
    async def read_file(self, path: str) -> Result[AsyncIterator[bytes]]:
        """
        Open a file for streaming reads.

        Returns:
            Result whose value is an async iterator of byte chunks
        """

    @abstractmethod
    async def write_file(self, path: str, content: FileContent) -> Result[None]:
        """
        Create or overwrite a file, creating missing parent directories.

        Args:
            path: Destination path
            content: Raw bytes or an async iterable of byte chunks
        """

    @abstractmethod
    async def delete_file(self, path: str) -> Result[None]:
        """Delete a file."""

    @abstractmethod
    async def delete_files(self, paths: Iterable[str]) -> Result[None]:
        """
        Delete several files, continuing past individual failures.

        Returns:
            Success when every file was deleted; otherwise a failure carrying
            one FileSystemError per failed path plus a PartialOperationError.
            An empty batch fails with ArgumentError.
        """

    @abstractmethod
    async def rename_file(self, path: str, destination_path: str) -> Result[None]:
        """
        Move a file to another path of this provider.

        An existing file at destination_path is replaced; missing parent
        directories are created. Stored properties travel with the file.
        """

    @abstractmethod
    async def get_checksum(self, path: str) -> Result[str]:
        """SHA-256 hex digest of a file's content."""

    @abstractmethod
    async def get_file_metadata(self, path: str) -> Result[FileMetadata]:
        """Fetch metadata (length, modification time, properties) for a file."""

    @abstractmethod
    async def set_file_metadata(self, path: str, metadata: FileMetadata) -> Result[None]:
        """Update stored metadata (modification time, properties) for a file."""

    @abstractmethod
    async def update_file_metadata(
        self, path: str, update: MetadataUpdate
    ) -> Result[FileMetadata]:
        """
        Apply update to the current metadata of a file and store the result.

        Returns:
            The metadata as stored after the update
        """

    @abstractmethod
    async def list_files(
        self, path: str, search_pattern: str | None = None, recursive: bool = False
    ) -> Result[list[str]]:
        """
        List files under a directory.

        Args:
            path: Directory to list ("" for root)
            search_pattern: Glob applied to file names (None matches all)
            recursive: Include files of all descendant directories

        Returns:
            Sorted provider-relative file paths
        """

    @abstractmethod
    async def list_directories(
        self, path: str, search_pattern: str | None = None, recursive: bool = False
    ) -> Result[list[str]]:
        """
        List subdirectories under a directory (the directory itself excluded).

        Returns:
            Sorted provider-relative directory paths
        """

    @abstractmethod
    async def create_directory(self, path: str) -> Result[None]:
        """Create a directory and any missing parents. Existing directories succeed."""

    @abstractmethod
    async def delete_directory(self, path: str, recursive: bool = False) -> Result[None]:
        """
        Delete a directory.

        Args:
            recursive: Also delete contents; otherwise a non-empty directory fails
        """

    @abstractmethod
    async def check_health(self) -> Result[HealthCheckResult]:
        """Perform a lightweight health check of the backend."""
