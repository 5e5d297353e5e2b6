"""
Stowage provider interfaces.
"""

from .provider import FileContent, FileStorageProvider, MetadataUpdate

__all__ = [
    "FileContent",
    "FileStorageProvider",
    "MetadataUpdate",
]
