"""
Stowage Storage Backends.

Available backends:
- memory: In-memory storage for testing and development
- local: Local filesystem storage (aiofiles)
"""

from .local import LocalFileStorageProvider
from .memory import InMemoryFileStorageProvider

__all__ = [
    "InMemoryFileStorageProvider",
    "LocalFileStorageProvider",
]
