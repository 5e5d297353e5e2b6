"""
Stowage Core Module.

Provides shared infrastructure for providers, behaviors and engines:
- Error hierarchy
- Result values
- Metadata and progress models
- Path helpers
- Health check infrastructure
- TTL cache
- Logging and configuration

Usage:
    from stowage.core import (
        # Errors
        StorageError,
        FileSystemError,
        PartialOperationError,

        # Results
        Result,

        # Models
        FileMetadata,
        TransferProgress,
    )
"""

from .cache import TTLCache
from .config import StowageConfig, configure, get_config
from .errors import (
    AmbiguousError,
    ArgumentError,
    DuplicateNameError,
    EncryptionError,
    FileSystemError,
    InvalidBehaviorError,
    NotFoundError,
    OperationCancelledError,
    PartialOperationError,
    SerializationError,
    StorageError,
    UnexpectedError,
)
from .health import HealthCheckResult, HealthStatus, check_health_with_timeout
from .logger import get_logger, set_logger
from .models import FileMetadata, TransferProgress, TransferSummary
from .result import Result

__all__ = [
    "AmbiguousError",
    "ArgumentError",
    "DuplicateNameError",
    "EncryptionError",
    "FileMetadata",
    "FileSystemError",
    "HealthCheckResult",
    "HealthStatus",
    "InvalidBehaviorError",
    "NotFoundError",
    "OperationCancelledError",
    "PartialOperationError",
    "Result",
    "SerializationError",
    "StorageError",
    "StowageConfig",
    "TTLCache",
    "TransferProgress",
    "TransferSummary",
    "UnexpectedError",
    "check_health_with_timeout",
    "configure",
    "get_config",
    "get_logger",
    "set_logger",
]
