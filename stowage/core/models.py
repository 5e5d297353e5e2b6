"""
Value types shared by providers, the transfer engine and the tree walker.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class FileMetadata:
    """
    Metadata describing a stored file.

    Attributes:
        path: Provider-relative path ("/" separated)
        length: Size in bytes
        last_modified: Last modification time, if the backend tracks it
        properties: Free-form key/value metadata
    """

    path: str
    length: int = 0
    last_modified: datetime | None = None
    properties: dict[str, str] = field(default_factory=dict)

    @property
    def parent(self) -> str | None:
        """Path before the last "/", or None for root-level files."""
        if "/" not in self.path:
            return None
        return self.path.rsplit("/", 1)[0]

    @property
    def name(self) -> str:
        """Path segment after the last "/"."""
        return self.path.rsplit("/", 1)[-1]

    @property
    def extension(self) -> str | None:
        """Name segment after the last ".", or None when there is no dot."""
        name = self.name
        if "." not in name:
            return None
        return name.rsplit(".", 1)[-1]

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "length": self.length,
            "last_modified": self.last_modified.isoformat() if self.last_modified else None,
            "properties": dict(self.properties),
        }


@dataclass(frozen=True)
class TransferProgress:
    """
    Snapshot pushed to a progress callback.

    Attributes:
        bytes_processed: Cumulative bytes moved so far
        files_processed: Items completed so far
        total_files: Items expected in total, -1 when unknown
    """

    bytes_processed: int = 0
    files_processed: int = 0
    total_files: int = -1

    @property
    def percent(self) -> float | None:
        """Completion percentage, None when the total is unknown."""
        if self.total_files < 0:
            return None
        if self.total_files == 0:
            return 100.0
        return (self.files_processed / self.total_files) * 100


@dataclass
class TransferSummary:
    """
    Outcome counters of a batch or deep copy operation.

    Attributes:
        processed: Items completed successfully
        total: Items attempted (known up front)
        bytes_processed: Bytes moved by completed items
        failed_paths: Source paths that failed
        skipped: Items skipped by filters
    """

    processed: int = 0
    total: int = 0
    bytes_processed: int = 0
    failed_paths: list[str] = field(default_factory=list)
    skipped: int = 0

    @property
    def failed(self) -> int:
        return len(self.failed_paths)

    @property
    def success(self) -> bool:
        """Check if the operation completed without failures."""
        return not self.failed_paths

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "processed": self.processed,
            "total": self.total,
            "failed": self.failed,
            "skipped": self.skipped,
            "bytes_processed": self.bytes_processed,
            "success": self.success,
            "failed_paths": self.failed_paths[:10],  # First 10 only
        }
