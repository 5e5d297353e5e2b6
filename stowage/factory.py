"""
Provider Factory - named provider registrations with lifetimes and behaviors

Register a provider configuration once, then resolve composed provider
instances by name or by type anywhere in the application.

Usage:
    >>> from stowage.factory import FileStorageFactory, ProviderLifetime
    >>>
    >>> factory = FileStorageFactory()
    >>> factory.register_provider(
    ...     "documents",
    ...     lambda builder: builder.use_local("./documents")
    ...     .with_lifetime(ProviderLifetime.SINGLETON)
    ...     .with_logging()
    ...     .with_retry(),
    ... )
    >>> provider = factory.create_provider("documents")
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

from stowage.backends.local import LocalFileStorageProvider
from stowage.backends.memory import InMemoryFileStorageProvider
from stowage.behaviors.caching import CachingFileStorageBehavior, CachingOptions
from stowage.behaviors.logging import LoggingFileStorageBehavior, LoggingOptions
from stowage.behaviors.retry import RetryFileStorageBehavior, RetryOptions
from stowage.core.cache import TTLCache
from stowage.core.config import StowageConfig, get_config
from stowage.core.errors import (
    AmbiguousError,
    ArgumentError,
    DuplicateNameError,
    InvalidBehaviorError,
    NotFoundError,
)
from stowage.core.logger import get_logger
from stowage.interfaces.provider import FileStorageProvider

logger = get_logger(__name__)

P = TypeVar("P", bound=FileStorageProvider)


class ProviderLifetime(Enum):
    """How long a resolved provider instance is reused."""

    SINGLETON = "singleton"  # One instance for the life of the factory
    SCOPED = "scoped"  # Fresh instance per resolution
    TRANSIENT = "transient"  # Fresh instance per resolution


@dataclass
class FactoryContext:
    """
    Explicit collaborators handed to provider and behavior factories.

    Attributes:
        config: Library defaults (chunk size, retry and cache settings)
        logger: Logger given to logging and retry behaviors (None uses get_logger)
        cache: Cache shared by every caching behavior built from this context
    """

    config: StowageConfig = field(default_factory=get_config)
    logger: Any = None
    cache: TTLCache | None = None

    def __post_init__(self):
        if self.cache is None:
            self.cache = TTLCache(
                ttl_seconds=self.config.cache_ttl_seconds,
                max_size=self.config.cache_max_size,
            )


ProviderFactory = Callable[[FactoryContext], FileStorageProvider]
BehaviorFactory = Callable[[FileStorageProvider, FactoryContext], FileStorageProvider | None]


@dataclass(frozen=True)
class ProviderConfig:
    """Immutable registration: how to build the base provider and what to wrap it in."""

    name: str
    lifetime: ProviderLifetime
    provider_factory: ProviderFactory
    behaviors: tuple[BehaviorFactory, ...] = ()


def apply_behaviors(
    provider: FileStorageProvider,
    behaviors: tuple[BehaviorFactory, ...] | list[BehaviorFactory],
    context: FactoryContext,
    name: str | None = None,
) -> FileStorageProvider:
    """
    Wrap provider in each behavior, in order.

    Raises:
        InvalidBehaviorError: If a behavior factory returns None
    """
    current = provider
    for behavior in behaviors:
        wrapped = behavior(current, context)
        if wrapped is None:
            msg = "Behavior returned no provider"
            raise InvalidBehaviorError(msg, name=name)
        current = wrapped
    return current


class FileStorageBuilder:
    """
    Fluent configuration of one provider registration.

    Accumulates a base provider factory, a lifetime (SCOPED unless set)
    and an ordered behavior list. Nothing is constructed until build()
    or until the owning factory resolves the registration.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self.provider_factory: ProviderFactory | None = None
        self.lifetime = ProviderLifetime.SCOPED
        self.behaviors: list[BehaviorFactory] = []

    def use_factory(self, provider_factory: ProviderFactory) -> "FileStorageBuilder":
        """Use a callable receiving the FactoryContext to build the base provider."""
        if provider_factory is None:
            msg = "provider_factory is required"
            raise ArgumentError(msg, argument="provider_factory")
        self.provider_factory = provider_factory
        return self

    def use(self, provider_type: type[P], *args: Any, **kwargs: Any) -> "FileStorageBuilder":
        """Build the base provider by calling provider_type(*args, **kwargs)."""
        return self.use_factory(lambda context: provider_type(*args, **kwargs))

    def use_in_memory(
        self, location_name: str = "InMemory", files: dict[str, bytes] | None = None
    ) -> "FileStorageBuilder":
        return self.use_factory(
            lambda context: InMemoryFileStorageProvider(
                location_name=location_name,
                files=files,
                chunk_size=context.config.chunk_size,
            )
        )

    def use_local(
        self, root_path: str | Path, location_name: str = "Local", ensure_root: bool = True
    ) -> "FileStorageBuilder":
        return self.use_factory(
            lambda context: LocalFileStorageProvider(
                root_path=root_path,
                location_name=location_name,
                ensure_root=ensure_root,
                chunk_size=context.config.chunk_size,
            )
        )

    def with_lifetime(self, lifetime: ProviderLifetime | str) -> "FileStorageBuilder":
        self.lifetime = ProviderLifetime(lifetime) if isinstance(lifetime, str) else lifetime
        return self

    def with_behavior(self, behavior_factory: BehaviorFactory) -> "FileStorageBuilder":
        """Append a behavior; behaviors wrap in the order they are added."""
        if behavior_factory is None:
            msg = "behavior_factory is required"
            raise ArgumentError(msg, argument="behavior_factory")
        self.behaviors.append(behavior_factory)
        return self

    def with_logging(self, options: LoggingOptions | None = None) -> "FileStorageBuilder":
        return self.with_behavior(
            lambda provider, context: LoggingFileStorageBehavior(
                provider, logger=context.logger, options=options
            )
        )

    def with_retry(self, options: RetryOptions | None = None) -> "FileStorageBuilder":
        def build_retry(provider: FileStorageProvider, context: FactoryContext):
            config = context.config
            retry_options = options or RetryOptions(
                max_retries=config.retry_max_retries,
                initial_delay_seconds=config.retry_initial_delay_seconds,
                backoff_factor=config.retry_backoff_factor,
                max_delay_seconds=config.retry_max_delay_seconds,
            )
            return RetryFileStorageBehavior(provider, logger=context.logger, options=retry_options)

        return self.with_behavior(build_retry)

    def with_caching(self, options: CachingOptions | None = None) -> "FileStorageBuilder":
        return self.with_behavior(
            lambda provider, context: CachingFileStorageBehavior(
                provider, cache=context.cache, options=options
            )
        )

    def to_config(self) -> ProviderConfig:
        """Freeze the builder into a ProviderConfig."""
        if self.provider_factory is None:
            msg = f"No base provider configured for '{self.name}'"
            raise ArgumentError(msg, argument="provider_factory", name=self.name)
        return ProviderConfig(
            name=self.name,
            lifetime=self.lifetime,
            provider_factory=self.provider_factory,
            behaviors=tuple(self.behaviors),
        )

    def build(self, context: FactoryContext | None = None) -> FileStorageProvider:
        """Construct the composed provider directly, without a registry."""
        config = self.to_config()
        context = context or FactoryContext()
        return apply_behaviors(
            config.provider_factory(context), config.behaviors, context, config.name
        )


class _SingletonCell:
    """Lazily built value, published at most once even under concurrent first access."""

    def __init__(self):
        self._lock = threading.Lock()
        self._value: FileStorageProvider | None = None

    def get(self, build: Callable[[], FileStorageProvider]) -> FileStorageProvider:
        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                self._value = build()
            return self._value

    def update(
        self,
        build: Callable[[], FileStorageProvider],
        wrap: Callable[[FileStorageProvider], FileStorageProvider],
    ) -> FileStorageProvider:
        """Build if needed, wrap and publish the result as one step."""
        with self._lock:
            current = self._value if self._value is not None else build()
            self._value = wrap(current)
            return self._value


class FileStorageFactory:
    """
    Registry of named provider configurations.

    Registration stores configuration only. Resolution builds the base
    provider, wraps it in every behavior in registration order and,
    for SINGLETON registrations, caches the composed instance.
    """

    def __init__(self, context: FactoryContext | None = None):
        self.context = context or FactoryContext()
        self._configs: dict[str, ProviderConfig] = {}
        self._singletons: dict[str, _SingletonCell] = {}
        self._lock = threading.Lock()

    @property
    def names(self) -> list[str]:
        """Registered provider names, in registration order."""
        with self._lock:
            return list(self._configs)

    def is_registered(self, name: str) -> bool:
        with self._lock:
            return name in self._configs

    def register_provider(
        self, name: str, configure: Callable[[FileStorageBuilder], Any]
    ) -> "FileStorageFactory":
        """
        Register a provider configuration under name.

        Args:
            name: Unique, non-blank registration name
            configure: Callable populating a FileStorageBuilder

        Raises:
            DuplicateNameError: If name is blank or already registered
            ArgumentError: If configure sets no base provider
        """
        if not name or not name.strip():
            msg = "Provider name cannot be empty"
            raise DuplicateNameError(msg, name=name)

        builder = FileStorageBuilder(name)
        if configure is not None:
            configure(builder)
        config = builder.to_config()

        with self._lock:
            if name in self._configs:
                msg = f"A provider with name '{name}' is already registered"
                raise DuplicateNameError(msg, name=name)
            self._configs[name] = config
            if config.lifetime is ProviderLifetime.SINGLETON:
                self._singletons[name] = _SingletonCell()

        logger.debug(f"Registered provider '{name}' ({config.lifetime.value})")
        return self

    def _get_config(self, name: str) -> ProviderConfig:
        with self._lock:
            config = self._configs.get(name)
        if config is None:
            msg = f"No file storage provider registered with name '{name}'"
            raise NotFoundError(msg, name=name)
        return config

    def _build(self, config: ProviderConfig) -> FileStorageProvider:
        provider = config.provider_factory(self.context)
        return apply_behaviors(provider, config.behaviors, self.context, config.name)

    def _resolve(self, config: ProviderConfig) -> FileStorageProvider:
        if config.lifetime is ProviderLifetime.SINGLETON:
            return self._singletons[config.name].get(lambda: self._build(config))
        return self._build(config)

    def create_provider(self, name: str) -> FileStorageProvider:
        """
        Resolve a composed provider by registration name.

        Raises:
            NotFoundError: If name is not registered
            InvalidBehaviorError: If a behavior factory returns None
        """
        return self._resolve(self._get_config(name))

    def create_provider_of_type(self, shape: type[P]) -> P:
        """
        Resolve the single registration whose composed provider is a shape instance.

        Every registration is resolved to check it, which builds fresh
        SCOPED and TRANSIENT instances as a side effect.

        Raises:
            NotFoundError: If no registration matches
            AmbiguousError: If several registrations match (all names listed)
        """
        with self._lock:
            configs = list(self._configs.values())

        matches = [
            (config.name, provider)
            for config in configs
            if isinstance(provider := self._resolve(config), shape)
        ]

        if not matches:
            msg = f"No file storage provider of type {shape.__name__} is registered"
            raise NotFoundError(msg, name=shape.__name__)
        if len(matches) > 1:
            names = [name for name, _ in matches]
            msg = (
                f"Multiple file storage providers of type {shape.__name__} are registered: "
                f"{', '.join(names)}"
            )
            raise AmbiguousError(msg, names=names)
        return matches[0][1]

    def with_behavior(
        self, name: str | None, behavior_factory: BehaviorFactory
    ) -> "FileStorageFactory":
        """
        Wrap SINGLETON instances in one more behavior, building them first if needed.

        Args:
            name: Registration to re-wrap, or None for every registration
            behavior_factory: Behavior applied on top of the current instance

        SCOPED and TRANSIENT registrations are not affected, since they are
        rebuilt from their configuration on every resolution.

        Raises:
            NotFoundError: If name is given and not registered
            InvalidBehaviorError: If behavior_factory returns None
        """
        if behavior_factory is None:
            msg = "behavior_factory is required"
            raise ArgumentError(msg, argument="behavior_factory")

        if name is None:
            with self._lock:
                configs = list(self._configs.values())
        else:
            configs = [self._get_config(name)]

        for config in configs:
            if config.lifetime is not ProviderLifetime.SINGLETON:
                continue
            self._singletons[config.name].update(
                lambda config=config: self._build(config),
                lambda current, config=config: apply_behaviors(
                    current, (behavior_factory,), self.context, config.name
                ),
            )
            logger.debug(f"Re-wrapped singleton provider '{config.name}'")

        return self
