"""
Path helpers for provider-relative, "/"-separated paths.

The root of a provider is the empty string. Comparisons that decide
whether one path lies under another are case-insensitive.
"""

import fnmatch

MATCH_ALL_PATTERNS = frozenset({"", "*", "*.*"})


def normalize_path(path: str | None) -> str:
    """Convert backslashes, collapse duplicate separators and strip edge slashes."""
    if not path:
        return ""
    parts = [part for part in path.replace("\\", "/").split("/") if part and part != "."]
    return "/".join(parts)


def join_path(base: str, relative: str) -> str:
    """Join two provider paths, tolerating an empty side."""
    base = normalize_path(base)
    relative = normalize_path(relative)
    if not base:
        return relative
    if not relative:
        return base
    return f"{base}/{relative}"


def file_name(path: str) -> str:
    return normalize_path(path).rsplit("/", 1)[-1]


def parent_path(path: str) -> str:
    """Parent of a path; the root's children have parent ""."""
    normalized = normalize_path(path)
    if "/" not in normalized:
        return ""
    return normalized.rsplit("/", 1)[0]


def relative_path(path: str, root: str) -> str:
    """
    Strip root from the front of path (case-insensitive) and trim the separator.

    A path that does not start with root is returned unchanged.
    """
    normalized = normalize_path(path)
    root = normalize_path(root)
    if not root:
        return normalized
    if normalized.lower().startswith(root.lower()):
        return normalized[len(root):].lstrip("/")
    return normalized


def is_same_or_descendant(path: str, root: str) -> bool:
    """Check whether path equals root or lies inside it (case-insensitive)."""
    path = normalize_path(path).lower()
    root = normalize_path(root).lower()
    if not root:
        return True
    return path == root or path.startswith(root + "/")


def matches_pattern(name: str, pattern: str | None) -> bool:
    """
    Glob-style, case-insensitive match of a file or directory name.

    None, "", "*" and "*.*" match every name, including names without a dot.
    """
    if pattern is None or pattern in MATCH_ALL_PATTERNS:
        return True
    return fnmatch.fnmatchcase(name.lower(), pattern.lower())
