"""
StowageConfig - defaults shared by behaviors, the transfer engine and the CLI.

Values can come from code, environment variables (STOWAGE_*) or a YAML file.

Example:
    >>> from stowage.core.config import StowageConfig, configure
    >>>
    >>> config = StowageConfig(chunk_size=1024 * 1024, retry_max_retries=5)
    >>> configure(config)
    >>>
    >>> # Or from the environment (.env is loaded first)
    >>> config = StowageConfig.from_env()
    >>>
    >>> # Or from a YAML file:
    >>> # stowage.yaml
    >>> # transfer:
    >>> #   chunk_size: ${STOWAGE_CHUNK_SIZE:-65536}
    >>> # retry:
    >>> #   max_retries: 5
    >>> config = StowageConfig.from_file("stowage.yaml")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from stowage.core.env import get_env
from stowage.core.logger import get_logger

logger = get_logger(__name__)


@dataclass
class StowageConfig:
    """
    Library-wide defaults.

    Attributes:
        chunk_size: Bytes per chunk when streaming file content
        retry_max_retries: Retries attempted by the retry behavior
        retry_initial_delay_seconds: Delay before the first retry
        retry_backoff_factor: Multiplier applied to the delay after each retry
        retry_max_delay_seconds: Upper bound for a single retry delay
        cache_ttl_seconds: Time-to-live of entries cached by the caching behavior
        cache_max_size: Maximum entries held by the default cache
        log_level: Level used by the logging behavior and the CLI
    """

    chunk_size: int = 64 * 1024
    retry_max_retries: int = 3
    retry_initial_delay_seconds: float = 0.5
    retry_backoff_factor: float = 2.0
    retry_max_delay_seconds: float = 30.0
    cache_ttl_seconds: float = 300.0
    cache_max_size: int = 2048
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            msg = f"chunk_size must be positive, got {self.chunk_size}"
            raise ValueError(msg)
        if self.retry_max_retries < 0:
            msg = f"retry_max_retries cannot be negative, got {self.retry_max_retries}"
            raise ValueError(msg)
        self.log_level = self.log_level.upper()

    @classmethod
    def from_env(cls, load_dotenv: bool = True) -> StowageConfig:
        """
        Create configuration from environment variables.

        Environment variables:
            STOWAGE_CHUNK_SIZE: Streaming chunk size in bytes
            STOWAGE_RETRY_MAX_RETRIES: Retry attempts
            STOWAGE_RETRY_INITIAL_DELAY: First retry delay in seconds
            STOWAGE_RETRY_BACKOFF_FACTOR: Delay multiplier
            STOWAGE_RETRY_MAX_DELAY: Delay cap in seconds
            STOWAGE_CACHE_TTL: Cache entry lifetime in seconds
            STOWAGE_CACHE_MAX_SIZE: Cache capacity
            STOWAGE_LOG_LEVEL: Log level name

        Args:
            load_dotenv: If True, loads .env file before reading variables
        """
        env = get_env()
        if load_dotenv:
            env.load()

        defaults = cls()
        return cls(
            chunk_size=env.get_int("STOWAGE_CHUNK_SIZE", defaults.chunk_size),
            retry_max_retries=env.get_int("STOWAGE_RETRY_MAX_RETRIES", defaults.retry_max_retries),
            retry_initial_delay_seconds=env.get_float(
                "STOWAGE_RETRY_INITIAL_DELAY", defaults.retry_initial_delay_seconds
            ),
            retry_backoff_factor=env.get_float(
                "STOWAGE_RETRY_BACKOFF_FACTOR", defaults.retry_backoff_factor
            ),
            retry_max_delay_seconds=env.get_float(
                "STOWAGE_RETRY_MAX_DELAY", defaults.retry_max_delay_seconds
            ),
            cache_ttl_seconds=env.get_float("STOWAGE_CACHE_TTL", defaults.cache_ttl_seconds),
            cache_max_size=env.get_int("STOWAGE_CACHE_MAX_SIZE", defaults.cache_max_size),
            log_level=env.get("STOWAGE_LOG_LEVEL", defaults.log_level) or defaults.log_level,
        )

    @classmethod
    def from_file(cls, file_path: str | Path, substitute_env: bool = True) -> StowageConfig:
        """
        Load configuration from a YAML file.

        Supports environment variable substitution using ${VAR} syntax.
        Recognised sections: transfer, retry, cache, logging.
        """
        path = Path(file_path)
        if not path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        with path.open() as f:
            data = yaml.safe_load(f)

        if not data:
            return cls()

        if substitute_env:
            env = get_env()
            env.load()
            data = env.expand(data)

        return cls(**cls._fields_from_sections(data))

    @staticmethod
    def _fields_from_sections(data: dict[str, Any]) -> dict[str, Any]:
        """Flatten YAML sections into constructor keyword arguments."""
        transfer = data.get("transfer") or {}
        retry = data.get("retry") or {}
        cache = data.get("cache") or {}
        logging_data = data.get("logging") or {}

        fields: dict[str, Any] = {}
        if "chunk_size" in transfer:
            fields["chunk_size"] = int(transfer["chunk_size"])
        if "max_retries" in retry:
            fields["retry_max_retries"] = int(retry["max_retries"])
        if "initial_delay_seconds" in retry:
            fields["retry_initial_delay_seconds"] = float(retry["initial_delay_seconds"])
        if "backoff_factor" in retry:
            fields["retry_backoff_factor"] = float(retry["backoff_factor"])
        if "max_delay_seconds" in retry:
            fields["retry_max_delay_seconds"] = float(retry["max_delay_seconds"])
        if "ttl_seconds" in cache:
            fields["cache_ttl_seconds"] = float(cache["ttl_seconds"])
        if "max_size" in cache:
            fields["cache_max_size"] = int(cache["max_size"])
        if "level" in logging_data:
            fields["log_level"] = str(logging_data["level"])
        return fields


# Global configuration singleton
_global_config: StowageConfig | None = None


def get_config() -> StowageConfig:
    """Get the global stowage configuration."""
    global _global_config
    if _global_config is None:
        _global_config = StowageConfig()
    return _global_config


def configure(config: StowageConfig) -> None:
    """Set the global stowage configuration."""
    global _global_config
    _global_config = config
    logger.info(f"Stowage configured: chunk_size={config.chunk_size}")
