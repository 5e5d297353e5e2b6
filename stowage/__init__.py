"""
Stowage - Composable File Storage Providers

A uniform abstraction over file storage back-ends with support for:
- Named provider registrations with Singleton/Scoped/Transient lifetimes
- Behavior pipelines (logging, retry with backoff, metadata and listing caching)
- JSON object and encrypted content helpers
- Streaming copies, moves and deep copies between any two providers
- Directory tree rendering as text or HTML

Usage - Registry:
    >>> from stowage import FileStorageFactory, ProviderLifetime
    >>>
    >>> factory = FileStorageFactory()
    >>> factory.register_provider(
    ...     "inbox",
    ...     lambda b: b.use_local("./inbox").with_lifetime(ProviderLifetime.SINGLETON).with_retry(),
    ... )
    >>> factory.register_provider("scratch", lambda b: b.use_in_memory("scratch").with_logging())
    >>> inbox = factory.create_provider("inbox")

Usage - Transfers:
    >>> from stowage import TransferService
    >>>
    >>> service = TransferService(inbox, factory.create_provider("scratch"))
    >>> result = await service.deep_copy("2024", "archive/2024", search_pattern="*.pdf")
    >>> if result.is_failure:
    ...     print(result.value.failed_paths)

Usage - Tree:
    >>> from stowage import render_directory
    >>>
    >>> result = await render_directory(inbox)
    >>> print(result.value)
"""

from stowage.backends import InMemoryFileStorageProvider, LocalFileStorageProvider
from stowage.behaviors import (
    CachingFileStorageBehavior,
    CachingOptions,
    FileStorageBehavior,
    LoggingFileStorageBehavior,
    LoggingOptions,
    RetryFileStorageBehavior,
    RetryOptions,
)
from stowage.core import (
    AmbiguousError,
    ArgumentError,
    DuplicateNameError,
    EncryptionError,
    FileMetadata,
    FileSystemError,
    HealthCheckResult,
    HealthStatus,
    InvalidBehaviorError,
    NotFoundError,
    OperationCancelledError,
    PartialOperationError,
    Result,
    SerializationError,
    StorageError,
    StowageConfig,
    TransferProgress,
    TransferSummary,
    TTLCache,
    UnexpectedError,
    configure,
    get_config,
    get_logger,
    set_logger,
)
from stowage.extensions import (
    generate_key,
    read_bytes,
    read_encrypted,
    read_object,
    read_text,
    traverse_files,
    write_bytes,
    write_encrypted,
    write_object,
    write_text,
)
from stowage.factory import (
    FactoryContext,
    FileStorageBuilder,
    FileStorageFactory,
    ProviderConfig,
    ProviderLifetime,
)
from stowage.interfaces import FileContent, FileStorageProvider, MetadataUpdate
from stowage.transfer import (
    TransferConfig,
    TransferService,
    copy_file,
    copy_files,
    deep_copy,
    move_file,
    move_files,
)
from stowage.tree import (
    HtmlTreeRenderer,
    TextTreeRenderer,
    TreeNode,
    TreeRenderer,
    render_directory,
)

__version__ = "0.1.0"

__all__ = [
    "AmbiguousError",
    "ArgumentError",
    "CachingFileStorageBehavior",
    "CachingOptions",
    "DuplicateNameError",
    "EncryptionError",
    "FactoryContext",
    "FileContent",
    "FileMetadata",
    "FileStorageBehavior",
    "FileStorageBuilder",
    "FileStorageFactory",
    "FileStorageProvider",
    "FileSystemError",
    "HealthCheckResult",
    "HealthStatus",
    "HtmlTreeRenderer",
    "InMemoryFileStorageProvider",
    "InvalidBehaviorError",
    "LocalFileStorageProvider",
    "LoggingFileStorageBehavior",
    "LoggingOptions",
    "MetadataUpdate",
    "NotFoundError",
    "OperationCancelledError",
    "PartialOperationError",
    "ProviderConfig",
    "ProviderLifetime",
    "Result",
    "RetryFileStorageBehavior",
    "RetryOptions",
    "SerializationError",
    "StorageError",
    "StowageConfig",
    "TTLCache",
    "TextTreeRenderer",
    "TransferConfig",
    "TransferProgress",
    "TransferService",
    "TransferSummary",
    "TreeNode",
    "TreeRenderer",
    "UnexpectedError",
    "configure",
    "copy_file",
    "copy_files",
    "deep_copy",
    "generate_key",
    "get_config",
    "get_logger",
    "move_file",
    "move_files",
    "read_bytes",
    "read_encrypted",
    "read_object",
    "read_text",
    "render_directory",
    "set_logger",
    "traverse_files",
    "write_bytes",
    "write_encrypted",
    "write_object",
    "write_text",
]
