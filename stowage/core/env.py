"""
Environment access for stowage settings.

Reads STOWAGE_* variables (after an optional .env file) and expands
${VAR}, ${VAR:-default} and ${VAR:?message} references found in values
loaded from configuration files.
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from dotenv import load_dotenv

N = TypeVar("N", int, float)

_REFERENCE = re.compile(r"\$\{(?P<name>[^}:]+)(?::(?P<op>[-?])(?P<arg>[^}]*))?\}")


def _resolve_reference(match: re.Match[str]) -> str:
    name, op, arg = match.group("name", "op", "arg")
    value = os.environ.get(name)
    if value is not None:
        return value
    if op == "-":
        return arg
    if op == "?":
        raise ValueError(arg or f"Required variable not set: {name}")
    # unknown variables stay visible in the output
    return match.group(0)


class EnvManager:
    """
    Typed view over os.environ with .env loading.

    Example:
        >>> env = EnvManager(project_root=".")
        >>> env.load()
        >>> env.get_int("STOWAGE_CHUNK_SIZE", 65536)
    """

    def __init__(self, project_root: Path | str | None = None, auto_load: bool = False):
        self.project_root = Path(project_root) if project_root else Path.cwd()
        self.loaded = False

        if auto_load:
            self.load()

    def load(self, env_file: str | Path | None = None, override: bool = False) -> bool:
        """
        Load a .env file into os.environ.

        Args:
            env_file: File to load (defaults to .env in project_root)
            override: Replace variables that are already set

        Returns:
            False when the file does not exist
        """
        path = self.project_root / ".env" if env_file is None else Path(env_file)
        if not path.is_file():
            return False

        load_dotenv(path, override=override)
        self.loaded = True
        return True

    def get(self, key: str, default: str | None = None) -> str | None:
        return os.environ.get(key, default)

    def _number(self, key: str, default: N, convert: Callable[[str], N]) -> N:
        raw = os.environ.get(key)
        if raw is None:
            return default
        try:
            return convert(raw)
        except ValueError:
            return default

    def get_int(self, key: str, default: int = 0) -> int:
        """Integer value of key; default when unset or unparsable."""
        return self._number(key, default, int)

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Float value of key; default when unset or unparsable."""
        return self._number(key, default, float)

    def expand(self, value: Any) -> Any:
        """
        Expand ${...} references in a string, or in every string of a nested
        dict/list structure. Other values are returned unchanged.

        Raises:
            ValueError: For a ${VAR:?message} reference to an unset variable
        """
        if isinstance(value, str):
            return _REFERENCE.sub(_resolve_reference, value)
        if isinstance(value, dict):
            return {key: self.expand(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self.expand(item) for item in value]
        return value


_global_env: EnvManager | None = None


def get_env() -> EnvManager:
    """Process-wide EnvManager rooted at the working directory."""
    global _global_env
    if _global_env is None:
        _global_env = EnvManager()
    return _global_env
