"""
Transfer Service - copies and moves files between two providers.

Source and destination can be any providers (local disk, in-memory,
either wrapped in behaviors). File content is streamed chunk by chunk
from the source read into the destination write.

Usage:
    >>> from stowage.transfer import TransferService, TransferConfig
    >>>
    >>> config = TransferConfig(progress_callback=lambda p: print(p.files_processed))
    >>> service = TransferService(local_provider, archive_provider, config)
    >>>
    >>> result = await service.copy_files([("a.txt", "backup/a.txt"), ("b.txt", "backup/b.txt")])
    >>> if result.is_failure:
    ...     print(result.value.failed_paths)
    >>>
    >>> result = await service.deep_copy("reports", "archive/reports", search_pattern="*.csv")
"""

import asyncio
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from stowage.core.config import get_config
from stowage.core.errors import (
    ArgumentError,
    FileSystemError,
    OperationCancelledError,
    PartialOperationError,
    UnexpectedError,
)
from stowage.core.logger import get_logger
from stowage.core.models import TransferProgress, TransferSummary
from stowage.core.paths import (
    file_name,
    is_same_or_descendant,
    join_path,
    matches_pattern,
    normalize_path,
    relative_path,
)
from stowage.core.result import Result
from stowage.core.streams import close_stream, counting, rechunk
from stowage.interfaces.provider import FileStorageProvider

logger = get_logger(__name__)

TransferPair = tuple[str, str]
ProgressCallback = Callable[[TransferProgress], None]


@dataclass
class TransferConfig:
    """
    Configuration for transfers.

    Attributes:
        chunk_size: Size of the chunks handed to the destination write
        progress_callback: Optional synchronous callback for progress snapshots
    """

    chunk_size: int = field(default_factory=lambda: get_config().chunk_size)
    progress_callback: ProgressCallback | None = None

    def __post_init__(self):
        if self.chunk_size <= 0:
            msg = f"chunk_size must be positive, got {self.chunk_size}"
            raise ValueError(msg)


class TransferService:
    """
    Service for transferring files between two providers.

    Batch operations handle every item independently: a failed item is
    recorded and the batch moves on. Cancellation is cooperative and is
    checked before every item.

    Example:
        >>> service = TransferService(source, destination)
        >>> result = await service.move_file("inbox/a.txt", "done/a.txt")
        >>> print(result.messages)
    """

    def __init__(
        self,
        source: FileStorageProvider,
        destination: FileStorageProvider,
        config: TransferConfig | None = None,
        cancel_event: asyncio.Event | None = None,
    ):
        """
        Initialize transfer service.

        Args:
            source: Provider files are read from
            destination: Provider files are written to
            config: Transfer configuration
            cancel_event: Shared cancellation signal (a private one is created if omitted)
        """
        self.source = source
        self.destination = destination
        self.config = config or TransferConfig()
        self.cancel_event = cancel_event or asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        """Request cancellation; running operations stop before their next item."""
        self.cancel_event.set()
        logger.info("Transfer cancellation requested")

    def _notify_progress(self, progress: TransferProgress) -> None:
        """Notify progress callback if configured."""
        if self.config.progress_callback:
            try:
                self.config.progress_callback(progress)
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}")

    def _invalid_providers(self, operation: str) -> Result | None:
        if self.source is None or self.destination is None:
            return Result.fail(
                ArgumentError("Source or destination provider cannot be empty"),
                f"Invalid provider provided for cross-provider {operation}",
            )
        return None

    @staticmethod
    def _invalid_paths(operation: str, source_path: str, destination_path: str) -> Result | None:
        if not normalize_path(source_path) or not normalize_path(destination_path):
            return Result.fail(
                ArgumentError(
                    "Source or destination path cannot be empty",
                    argument="path",
                    paths=f"{source_path} -> {destination_path}",
                ),
                f"Invalid paths provided for cross-provider {operation}",
            )
        return None

    # ------------------------------------------------------------------
    # Single files
    # ------------------------------------------------------------------

    async def copy_file(self, source_path: str, destination_path: str) -> Result[int]:
        """
        Copy one file from the source provider to the destination provider.

        Returns:
            Result whose value is the number of bytes copied
        """
        invalid = self._invalid_providers("copy") or self._invalid_paths(
            "copy", source_path, destination_path
        )
        if invalid:
            return invalid
        if self.cancelled:
            return Result.fail(
                OperationCancelledError("Operation cancelled"),
                f"Cancelled copying file from '{source_path}' to '{destination_path}'",
            )

        result = await self._copy(source_path, destination_path)
        if result.is_success:
            self._notify_progress(
                TransferProgress(bytes_processed=result.value, files_processed=1, total_files=1)
            )
        return result

    async def _copy(self, source_path: str, destination_path: str) -> Result[int]:
        """Stream one file across; no argument checks and no progress."""
        try:
            read_result = await self.source.read_file(source_path)
            if read_result.is_failure:
                return Result.from_failure(
                    read_result, f"Failed to read '{source_path}' from source provider"
                )

            copied = 0

            def on_chunk(size: int) -> None:
                nonlocal copied
                copied += size

            stream = read_result.value
            try:
                chunks = rechunk(counting(stream, on_chunk), self.config.chunk_size)
                write_result = await self.destination.write_file(destination_path, chunks)
            finally:
                await close_stream(stream)

            if write_result.is_failure:
                return Result.from_failure(
                    write_result, f"Failed to write '{destination_path}' to destination provider"
                )

            return Result.ok(
                copied,
                f"Copied file from '{source_path}' (source provider) to "
                f"'{destination_path}' (destination provider)",
            )
        except Exception as e:
            logger.exception(f"Unexpected error copying '{source_path}' to '{destination_path}'")
            return Result.fail(
                UnexpectedError(e),
                f"Unexpected error copying file from '{source_path}' to '{destination_path}'",
            )

    async def move_file(self, source_path: str, destination_path: str) -> Result[int]:
        """
        Move one file: copy it, then delete it at the source.

        A failed delete after a successful copy is reported as a failure;
        the copy is not rolled back, so the file then exists in both places.
        """
        invalid = self._invalid_providers("move") or self._invalid_paths(
            "move", source_path, destination_path
        )
        if invalid:
            return invalid
        if self.cancelled:
            return Result.fail(
                OperationCancelledError("Operation cancelled"),
                f"Cancelled moving file from '{source_path}' to '{destination_path}'",
            )

        result = await self._move(source_path, destination_path)
        if result.is_success:
            self._notify_progress(
                TransferProgress(bytes_processed=result.value, files_processed=1, total_files=1)
            )
        return result

    async def _move(self, source_path: str, destination_path: str) -> Result[int]:
        copy_result = await self._copy(source_path, destination_path)
        if copy_result.is_failure:
            return copy_result

        try:
            delete_result = await self.source.delete_file(source_path)
        except Exception as e:
            delete_result = Result.fail(UnexpectedError(e))

        if delete_result.is_failure:
            logger.warning(
                f"Copied '{source_path}' to '{destination_path}' but could not delete the source"
            )
            return Result.from_failure(
                delete_result,
                "Failed to delete source file after copying; "
                "destination file may now exist as a duplicate",
            )

        return Result.ok(
            copy_result.value,
            f"Moved file from '{source_path}' (source provider) to "
            f"'{destination_path}' (destination provider)",
        )

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    async def copy_files(self, pairs: Iterable[TransferPair]) -> Result[TransferSummary]:
        """
        Copy every (source_path, destination_path) pair, continuing past failures.

        Returns:
            Result whose value is a TransferSummary; a failure carries every
            per-pair error
        """
        return await self._run_batch("copy", "Copied", pairs, self._copy)

    async def move_files(self, pairs: Iterable[TransferPair]) -> Result[TransferSummary]:
        """Move every pair, continuing past failures."""
        return await self._run_batch("move", "Moved", pairs, self._move)

    async def _run_batch(self, verb: str, done: str, pairs, transfer) -> Result[TransferSummary]:
        invalid = self._invalid_providers(verb)
        if invalid:
            return invalid

        pairs = list(pairs or [])
        if not pairs:
            return Result.fail(
                ArgumentError("File pairs cannot be empty", argument="pairs"),
                f"Invalid file pairs provided for cross-provider {verb}",
            )

        summary = TransferSummary(total=len(pairs))
        errors = []
        logger.info(f"Starting batch {verb} of {summary.total} files")

        for source_path, destination_path in pairs:
            if self.cancelled:
                logger.info(f"Batch {verb} cancelled after {summary.processed} files")
                result = Result.fail(
                    OperationCancelledError(
                        "Operation cancelled", processed=summary.processed, total=summary.total
                    ),
                    f"Cancelled {verb} after processing {summary.processed}/{summary.total} files",
                )
                result.value = summary
                return result

            invalid = self._invalid_paths(verb, source_path, destination_path)
            item = invalid or await transfer(source_path, destination_path)
            if item.is_failure:
                logger.warning(f"Failed to {verb} '{source_path}' to '{destination_path}'")
                summary.failed_paths.append(source_path)
                errors.extend(item.errors)
                continue

            summary.processed += 1
            summary.bytes_processed += item.value or 0
            self._notify_progress(
                TransferProgress(
                    bytes_processed=summary.bytes_processed,
                    files_processed=summary.processed,
                    total_files=summary.total,
                )
            )

        logger.info(
            f"Batch {verb} complete: {summary.processed} succeeded, {summary.failed} failed"
        )

        if errors or summary.failed_paths:
            result = Result.fail(
                message=(
                    f"Failed to {verb} some files: "
                    f"{summary.processed}/{summary.total} succeeded"
                )
            ).with_errors(errors)
            result.value = summary
            return result

        return Result.ok(
            summary,
            f"{done} all {summary.total} files from source provider to destination provider",
        )

    # ------------------------------------------------------------------
    # Deep copy
    # ------------------------------------------------------------------

    async def deep_copy(
        self,
        source_path: str,
        destination_path: str,
        skip_files: bool = False,
        search_pattern: str | None = None,
    ) -> Result[TransferSummary]:
        """
        Copy a file or a whole directory structure, including empty directories.

        Args:
            source_path: File or directory to copy
            destination_path: Target path on the destination provider
            skip_files: Recreate the directory structure only
            search_pattern: Glob applied to file names (None copies every file)

        Returns:
            Result whose value is a TransferSummary; PartialOperationError
            lists every failed path when some items failed
        """
        invalid = self._invalid_providers("deep copy") or self._invalid_paths(
            "deep copy", source_path, destination_path
        )
        if invalid:
            return invalid

        if self.source is self.destination and is_same_or_descendant(
            destination_path, source_path
        ):
            if normalize_path(source_path).lower() == normalize_path(destination_path).lower():
                error = FileSystemError(
                    "Source and destination paths cannot be the same", path=source_path
                )
                message = "Source and destination paths must be different for deep copying"
            else:
                error = FileSystemError(
                    "Destination cannot be inside the source directory", path=destination_path
                )
                message = "Destination must not be inside the source for deep copying"
            return Result.fail(error, message)

        if self.cancelled:
            return Result.fail(
                OperationCancelledError("Operation cancelled"),
                f"Cancelled deep copying from '{source_path}' to '{destination_path}'",
            )

        try:
            return await self._deep_copy(source_path, destination_path, skip_files, search_pattern)
        except Exception as e:
            logger.exception(f"Unexpected error deep copying '{source_path}'")
            return Result.fail(
                UnexpectedError(e),
                f"Unexpected error deep copying from '{source_path}' to '{destination_path}'",
            )

    async def _deep_copy(
        self,
        source_path: str,
        destination_path: str,
        skip_files: bool,
        search_pattern: str | None,
    ) -> Result[TransferSummary]:
        file_check = await self.source.file_exists(source_path)
        directory_check = Result.fail()
        if file_check.is_failure:
            directory_check = await self.source.directory_exists(source_path)

        if file_check.is_failure and directory_check.is_failure:
            return (
                Result.fail(message=f"Source '{source_path}' does not exist")
                .with_errors(file_check.errors + directory_check.errors)
                .with_messages(file_check.messages + directory_check.messages)
            )

        if file_check.is_success:
            return await self._deep_copy_file(
                source_path, destination_path, skip_files, search_pattern
            )
        return await self._deep_copy_directory(
            source_path, destination_path, skip_files, search_pattern
        )

    async def _deep_copy_file(
        self,
        source_path: str,
        destination_path: str,
        skip_files: bool,
        search_pattern: str | None,
    ) -> Result[TransferSummary]:
        if skip_files:
            return Result.ok(
                TransferSummary(total=0, skipped=1),
                f"Skipped copying file from '{source_path}' to '{destination_path}' "
                "as skip_files is set",
            )
        if not matches_pattern(file_name(source_path), search_pattern):
            return Result.ok(
                TransferSummary(total=0, skipped=1),
                f"Skipped copying file from '{source_path}' to '{destination_path}' "
                f"as it does not match the search pattern '{search_pattern}'",
            )

        copy_result = await self._copy(source_path, destination_path)
        if copy_result.is_failure:
            result = Result.from_failure(copy_result)
            result.value = TransferSummary(total=1, failed_paths=[source_path])
            return result

        summary = TransferSummary(processed=1, total=1, bytes_processed=copy_result.value)
        self._notify_progress(
            TransferProgress(
                bytes_processed=summary.bytes_processed, files_processed=1, total_files=1
            )
        )
        return Result.ok(
            summary,
            f"Deep copied file from '{source_path}' (source provider) to "
            f"'{destination_path}' (destination provider)",
        )

    async def _deep_copy_directory(
        self,
        source_path: str,
        destination_path: str,
        skip_files: bool,
        search_pattern: str | None,
    ) -> Result[TransferSummary]:
        directories_result = await self.source.list_directories(source_path, recursive=True)
        if directories_result.is_failure:
            return Result.from_failure(
                directories_result, f"Failed to list directories under '{source_path}'"
            )
        directories = [normalize_path(source_path), *directories_result.value]

        files: list[str] = []
        if not skip_files:
            files_result = await self.source.list_files(
                source_path, search_pattern=search_pattern, recursive=True
            )
            if files_result.is_failure:
                return Result.from_failure(
                    files_result, f"Failed to list files under '{source_path}'"
                )
            files = files_result.value

        summary = TransferSummary(total=len(directories) + len(files))
        logger.info(
            f"Deep copying '{source_path}' to '{destination_path}': "
            f"{len(directories)} directories, {len(files)} files"
        )

        # Parents always have shorter paths than their descendants
        for directory in sorted(directories, key=len):
            if self.cancelled:
                return self._deep_copy_cancelled(source_path, destination_path, summary)

            target = join_path(destination_path, relative_path(directory, source_path))
            create_result = await self.destination.create_directory(target)
            if create_result.is_failure:
                logger.warning(f"Failed to create directory '{target}'")
                summary.failed_paths.append(directory)
                continue

            summary.processed += 1
            self._report(summary)

        for path in files:
            if self.cancelled:
                return self._deep_copy_cancelled(source_path, destination_path, summary)

            target = join_path(destination_path, relative_path(path, source_path))
            copy_result = await self._copy(path, target)
            if copy_result.is_failure:
                logger.warning(f"Failed to copy '{path}' to '{target}'")
                summary.failed_paths.append(path)
                continue

            summary.processed += 1
            summary.bytes_processed += copy_result.value
            self._report(summary)

        if summary.failed_paths:
            result = Result.fail(
                PartialOperationError(
                    "Partial deep copy failure",
                    failed_paths=summary.failed_paths,
                    processed=summary.processed,
                    total=summary.total,
                ),
                f"Deep copied {summary.processed}/{summary.total} items from '{source_path}' "
                f"to '{destination_path}', {summary.failed} failed",
            )
            result.value = summary
            return result

        if skip_files:
            suffix = " (files skipped)"
        elif search_pattern:
            suffix = f" (filtered by '{search_pattern}')"
        else:
            suffix = ""
        return Result.ok(
            summary,
            f"Deep copied structure from '{source_path}' (source provider) to "
            f"'{destination_path}' (destination provider){suffix}",
        )

    def _report(self, summary: TransferSummary) -> None:
        self._notify_progress(
            TransferProgress(
                bytes_processed=summary.bytes_processed,
                files_processed=summary.processed,
                total_files=summary.total,
            )
        )

    @staticmethod
    def _deep_copy_cancelled(
        source_path: str, destination_path: str, summary: TransferSummary
    ) -> Result[TransferSummary]:
        result = Result.fail(
            OperationCancelledError(
                "Operation cancelled", processed=summary.processed, total=summary.total
            ),
            f"Cancelled deep copying from '{source_path}' to '{destination_path}' "
            f"after processing {summary.processed}/{summary.total} items",
        )
        result.value = summary
        return result


# ----------------------------------------------------------------------
# Convenience functions
# ----------------------------------------------------------------------


def _service(
    source: FileStorageProvider,
    destination: FileStorageProvider,
    progress_callback: ProgressCallback | None,
    cancel_event: asyncio.Event | None,
) -> TransferService:
    config = TransferConfig(progress_callback=progress_callback)
    return TransferService(source, destination, config, cancel_event=cancel_event)


async def copy_file(
    source: FileStorageProvider,
    destination: FileStorageProvider,
    source_path: str,
    destination_path: str,
    progress_callback: ProgressCallback | None = None,
    cancel_event: asyncio.Event | None = None,
) -> Result[int]:
    """Copy one file between providers."""
    service = _service(source, destination, progress_callback, cancel_event)
    return await service.copy_file(source_path, destination_path)


async def copy_files(
    source: FileStorageProvider,
    destination: FileStorageProvider,
    pairs: Iterable[TransferPair],
    progress_callback: ProgressCallback | None = None,
    cancel_event: asyncio.Event | None = None,
) -> Result[TransferSummary]:
    """Copy many files between providers, continuing past failures."""
    service = _service(source, destination, progress_callback, cancel_event)
    return await service.copy_files(pairs)


async def move_file(
    source: FileStorageProvider,
    destination: FileStorageProvider,
    source_path: str,
    destination_path: str,
    progress_callback: ProgressCallback | None = None,
    cancel_event: asyncio.Event | None = None,
) -> Result[int]:
    """Move one file between providers."""
    service = _service(source, destination, progress_callback, cancel_event)
    return await service.move_file(source_path, destination_path)


async def move_files(
    source: FileStorageProvider,
    destination: FileStorageProvider,
    pairs: Iterable[TransferPair],
    progress_callback: ProgressCallback | None = None,
    cancel_event: asyncio.Event | None = None,
) -> Result[TransferSummary]:
    """Move many files between providers, continuing past failures."""
    service = _service(source, destination, progress_callback, cancel_event)
    return await service.move_files(pairs)


async def deep_copy(
    source: FileStorageProvider,
    destination: FileStorageProvider,
    source_path: str,
    destination_path: str,
    skip_files: bool = False,
    search_pattern: str | None = None,
    progress_callback: ProgressCallback | None = None,
    cancel_event: asyncio.Event | None = None,
) -> Result[TransferSummary]:
    """
    Deep copy a file or directory between providers.

    Args:
        source: Source provider
        destination: Destination provider
        source_path: File or directory to copy
        destination_path: Target path
        skip_files: Recreate directories only
        search_pattern: Glob applied to file names
        progress_callback: Optional progress callback
        cancel_event: Optional shared cancellation signal

    Returns:
        Result with a TransferSummary
    """
    service = _service(source, destination, progress_callback, cancel_event)
    return await service.deep_copy(source_path, destination_path, skip_files, search_pattern)
