"""
Base class for provider behaviors.

A behavior is a decorator around exactly one inner provider. It satisfies
the full provider interface itself, so behaviors stack: each one wraps
whatever the previous step produced.
"""

from abc import ABC

from stowage.core.errors import ArgumentError
from stowage.interfaces.provider import FileStorageProvider


class FileStorageBehavior(FileStorageProvider, ABC):
    """
    Abstract decorator around an inner provider.

    Subclasses implement every capability method explicitly, either
    intercepting the call or forwarding it unchanged to inner_provider.
    """

    def __init__(self, inner_provider: FileStorageProvider):
        if inner_provider is None:
            msg = "inner_provider is required"
            raise ArgumentError(msg, argument="inner_provider")
        self._inner_provider = inner_provider

    @property
    def inner_provider(self) -> FileStorageProvider:
        return self._inner_provider

    @property
    def location_name(self) -> str:
        return self._inner_provider.location_name

    @property
    def description(self) -> str:
        return self._inner_provider.description

    def unwrap(self) -> FileStorageProvider:
        """Return the innermost (base) provider of the behavior chain."""
        provider: FileStorageProvider = self._inner_provider
        while isinstance(provider, FileStorageBehavior):
            provider = provider.inner_provider
        return provider

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._inner_provider!r})"
