"""
Tree renderers - turn a walked directory tree into text.

A renderer receives every node in pre-order through render_node, then
one render_totals call (unless files were skipped), and finally hands
back the accumulated output from to_text.
"""

import html
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")
_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_size(size: int) -> str:
    """
    Human-readable byte size with up to two decimals.

    Example:
        >>> format_size(150)
        '150 B'
        >>> format_size(1536)
        '1.5 KB'
    """
    value = float(size)
    for unit in _SIZE_UNITS:
        if abs(value) < 1024 or unit == _SIZE_UNITS[-1]:
            text = f"{value:.2f}".rstrip("0").rstrip(".")
            return f"{text} {unit}"
        value /= 1024
    return f"{size} B"  # pragma: no cover


@dataclass
class TreeNode:
    """
    Rendering projection of one file or directory.

    Directories carry aggregated file_count/total_size over their whole
    subtree; files carry their own size and modification time.
    """

    name: str
    is_directory: bool
    size: int = 0
    last_modified: datetime | None = None
    file_count: int = 0
    total_size: int = 0
    children: list["TreeNode"] = field(default_factory=list)
    is_last: bool = False
    prefix: str = ""

    def describe(self) -> str:
        """Name plus the parenthesised summary shared by the reference renderers."""
        if self.is_directory:
            return f"{self.name} ({self.file_count} files, {format_size(self.total_size)})"
        modified = (
            self.last_modified.strftime(_TIMESTAMP_FORMAT) if self.last_modified else "N/A"
        )
        return f"{self.name} ({format_size(self.size)}, {modified})"


class TreeRenderer(ABC):
    """Pluggable output format for the tree walker."""

    @abstractmethod
    def render_node(self, node: TreeNode, depth: int) -> None:
        """Render one node; called in pre-order, depth 0 being the walk root."""

    @abstractmethod
    def render_totals(self, file_count: int, total_size: int) -> None:
        """Render the grand totals; called once, after every node."""

    @abstractmethod
    def to_text(self) -> str:
        """Return the accumulated output."""

    def __str__(self) -> str:
        return self.to_text()


class TextTreeRenderer(TreeRenderer):
    """
    Plain text with box-drawing connectors.

    Example output:
        / (2 files, 150 B)
        ├── a.txt (100 B, 2024-01-01 10:00:00)
        └── docs (1 files, 50 B)
            └── b.txt (50 B, 2024-01-01 10:00:00)
        Total: 2 files, 150 B
    """

    def __init__(self):
        self._lines: list[str] = []

    def render_node(self, node: TreeNode, depth: int) -> None:
        if depth == 0:
            self._lines.append(node.describe())
            child_prefix = ""
        else:
            connector = "└── " if node.is_last else "├── "
            self._lines.append(f"{node.prefix}{connector}{node.describe()}")
            child_prefix = node.prefix + ("    " if node.is_last else "│   ")

        for child in node.children:
            child.prefix = child_prefix

    def render_totals(self, file_count: int, total_size: int) -> None:
        self._lines.append(f"Total: {file_count} files, {format_size(total_size)}")

    def to_text(self) -> str:
        return "\n".join(self._lines) + "\n" if self._lines else ""


class HtmlTreeRenderer(TreeRenderer):
    """Nested <ul>/<li> markup; directories and files get distinct CSS classes."""

    def __init__(self, indent: int = 2):
        self.indent = indent
        self._lines: list[str] = []
        self._open: list[tuple[int, bool]] = []  # (depth, has_children)
        self._totals: str | None = None

    def _pad(self, depth: int) -> str:
        return " " * (self.indent * (depth + 1))

    def _close_to(self, depth: int) -> None:
        while self._open and self._open[-1][0] >= depth:
            open_depth, has_children = self._open.pop()
            if has_children:
                self._lines.append(f"{self._pad(open_depth)}</ul></li>")
            else:
                self._lines[-1] += "</li>"

    def render_node(self, node: TreeNode, depth: int) -> None:
        self._close_to(depth)
        css_class = "directory" if node.is_directory else "file"
        self._lines.append(
            f'{self._pad(depth)}<li class="{css_class}">{html.escape(node.describe())}'
        )
        if node.children:
            self._lines.append(f"{self._pad(depth)}<ul>")
        self._open.append((depth, bool(node.children)))

    def render_totals(self, file_count: int, total_size: int) -> None:
        self._close_to(0)
        self._totals = f"Total: {file_count} files, {format_size(total_size)}"

    def to_text(self) -> str:
        self._close_to(0)
        lines = ["<ul>", *self._lines]
        if self._totals is not None:
            lines.append(f'{self._pad(0)}<li class="totals">{html.escape(self._totals)}</li>')
        lines.append("</ul>")
        return "\n".join(lines) + "\n"
