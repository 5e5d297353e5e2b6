"""
Pieces shared by the bundled back-ends.
"""

from collections.abc import Iterable

from stowage.core.errors import ArgumentError, PartialOperationError, StorageError, UnexpectedError
from stowage.core.models import FileMetadata
from stowage.core.result import Result
from stowage.interfaces.provider import FileStorageProvider, MetadataUpdate


def invalid_batch() -> Result[None]:
    return Result.fail(
        ArgumentError("Paths cannot be empty", argument="paths"), "Invalid paths provided"
    )


def delete_batch_result(
    total: int, failures: Iterable[tuple[str, StorageError]]
) -> Result[None]:
    """
    Outcome of a delete_files call.

    Args:
        total: Number of paths in the batch
        failures: (path, error) for every path that could not be deleted
    """
    failures = list(failures)
    if not failures:
        return Result.ok(message=f"Deleted all {total} files")

    succeeded = total - len(failures)
    partial = PartialOperationError(
        "Some files could not be deleted",
        failed_paths=[path for path, _ in failures],
        processed=succeeded,
        total=total,
    )
    return (
        Result.fail(message=f"Failed to delete some files: {succeeded}/{total} succeeded")
        .with_errors(error for _, error in failures)
        .with_error(partial)
    )


async def update_metadata(
    provider: FileStorageProvider, path: str, update: MetadataUpdate
) -> Result[FileMetadata]:
    """Read-modify-write of a file's metadata through the provider's own calls."""
    message = f"Failed to update metadata for '{path}'"
    if update is None:
        return Result.fail(
            ArgumentError("Metadata update cannot be empty", argument="update"),
            "Invalid metadata update provided",
        )

    current = await provider.get_file_metadata(path)
    if current.is_failure:
        return Result.from_failure(current, message)

    try:
        updated = update(current.value)
    except Exception as e:
        return Result.fail(UnexpectedError(e), f"Unexpected error updating metadata for '{path}'")
    if updated is None:
        return Result.fail(
            ArgumentError("Metadata update returned nothing", argument="update"), message
        )

    stored = await provider.set_file_metadata(path, updated)
    if stored.is_failure:
        return Result.from_failure(stored, message)

    refreshed = await provider.get_file_metadata(path)
    if refreshed.is_failure:
        return Result.from_failure(refreshed, message)
    return Result.ok(refreshed.value, f"Updated metadata for file at '{path}'")
