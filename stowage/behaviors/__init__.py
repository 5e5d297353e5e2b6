"""
Stowage provider behaviors.

Decorators that add a cross-cutting concern around any provider:
- logging: records every call with timing
- retry: re-issues transient failures with exponential backoff
- caching: remembers existence checks and metadata lookups
"""

from .base import FileStorageBehavior
from .caching import CachingFileStorageBehavior, CachingOptions
from .logging import LoggingFileStorageBehavior, LoggingOptions
from .retry import RetryFileStorageBehavior, RetryOptions

__all__ = [
    "CachingFileStorageBehavior",
    "CachingOptions",
    "FileStorageBehavior",
    "LoggingFileStorageBehavior",
    "LoggingOptions",
    "RetryFileStorageBehavior",
    "RetryOptions",
]
