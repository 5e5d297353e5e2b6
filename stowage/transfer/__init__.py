"""
Stowage Transfer Module.

Copies, moves and mirrors files between two providers.

Usage:
    >>> from stowage.transfer import TransferService, TransferConfig, deep_copy
    >>>
    >>> # Quick deep copy
    >>> result = await deep_copy(source, destination, "reports", "archive/reports")
    >>>
    >>> # With configuration
    >>> config = TransferConfig(progress_callback=print)
    >>> service = TransferService(source, destination, config)
    >>> result = await service.copy_files([("a.txt", "b.txt")])
"""

from .service import (
    TransferConfig,
    TransferPair,
    TransferService,
    copy_file,
    copy_files,
    deep_copy,
    move_file,
    move_files,
)

__all__ = [
    "TransferConfig",
    "TransferPair",
    "TransferService",
    "copy_file",
    "copy_files",
    "deep_copy",
    "move_file",
    "move_files",
]
