"""
Directory tree walker.

Walks a provider depth-first, accumulating file counts and sizes bottom
up, then feeds the result to a TreeRenderer.

Usage:
    >>> from stowage.tree import render_directory, HtmlTreeRenderer
    >>>
    >>> result = await render_directory(provider, path="reports")
    >>> print(result.value)
    >>>
    >>> result = await render_directory(provider, renderer=HtmlTreeRenderer(), skip_files=True)
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

from stowage.core.errors import ArgumentError, OperationCancelledError, UnexpectedError
from stowage.core.logger import get_logger
from stowage.core.models import FileMetadata, TransferProgress
from stowage.core.paths import file_name, normalize_path
from stowage.core.result import Result
from stowage.interfaces.provider import FileStorageProvider
from stowage.tree.renderers import TextTreeRenderer, TreeNode, TreeRenderer

logger = get_logger(__name__)


@dataclass
class DirectoryNode:
    """Working tree built during traversal; totals include every descendant."""

    path: str
    files: list[FileMetadata] = field(default_factory=list)
    subdirectories: list["DirectoryNode"] = field(default_factory=list)
    total_size: int = 0
    file_count: int = 0


class _Walker:
    def __init__(
        self,
        provider: FileStorageProvider,
        skip_files: bool,
        progress_callback: Callable[[TransferProgress], None] | None,
        cancel_event: asyncio.Event | None,
    ):
        self.provider = provider
        self.skip_files = skip_files
        self.progress_callback = progress_callback
        self.cancel_event = cancel_event

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            msg = "Operation cancelled during render"
            raise OperationCancelledError(msg)

    def _notify_progress(self, node: DirectoryNode) -> None:
        if not self.progress_callback:
            return
        try:
            self.progress_callback(
                TransferProgress(
                    bytes_processed=node.total_size,
                    files_processed=node.file_count,
                    total_files=-1,
                )
            )
        except Exception as e:
            logger.warning(f"Progress callback failed: {e}")

    async def build(self, node: DirectoryNode) -> None:
        """Populate node recursively. Listing failures leave that level empty."""
        self._check_cancelled()

        directories = await self.provider.list_directories(node.path)
        if directories.is_success:
            for path in sorted(directories.value):
                child = DirectoryNode(path=path)
                node.subdirectories.append(child)
                await self.build(child)
                node.total_size += child.total_size
                node.file_count += child.file_count
        else:
            logger.debug(f"Skipping subdirectories of '{node.path}': {directories.messages}")

        if self.skip_files:
            return

        files = await self.provider.list_files(node.path)
        if files.is_failure:
            logger.debug(f"Skipping files of '{node.path}': {files.messages}")
            return

        for path in sorted(files.value):
            self._check_cancelled()
            metadata = await self.provider.get_file_metadata(path)
            if metadata.is_success:
                node.files.append(metadata.value)
                node.total_size += metadata.value.length
                node.file_count += 1

        self._notify_progress(node)


def to_tree_node(node: DirectoryNode) -> TreeNode:
    """Project a DirectoryNode into a TreeNode (files first, then subdirectories)."""
    tree_node = TreeNode(
        name=file_name(node.path) if node.path else "/",
        is_directory=True,
        file_count=node.file_count,
        total_size=node.total_size,
    )

    for metadata in node.files:
        tree_node.children.append(
            TreeNode(
                name=metadata.name,
                is_directory=False,
                size=metadata.length,
                last_modified=metadata.last_modified,
            )
        )
    tree_node.children.extend(to_tree_node(child) for child in node.subdirectories)

    for index, child in enumerate(tree_node.children):
        child.is_last = index == len(tree_node.children) - 1
    return tree_node


def _render(node: TreeNode, renderer: TreeRenderer, depth: int) -> None:
    renderer.render_node(node, depth)
    for child in node.children:
        _render(child, renderer, depth + 1)


async def walk_directory(
    provider: FileStorageProvider,
    path: str | None = None,
    skip_files: bool = False,
    progress_callback: Callable[[TransferProgress], None] | None = None,
    cancel_event: asyncio.Event | None = None,
) -> DirectoryNode:
    """
    Build the DirectoryNode tree rooted at path.

    Raises:
        OperationCancelledError: If cancel_event is set during the walk
    """
    root = DirectoryNode(path=normalize_path(path))
    walker = _Walker(provider, skip_files, progress_callback, cancel_event)
    await walker.build(root)
    return root


async def render_directory(
    provider: FileStorageProvider,
    renderer: TreeRenderer | None = None,
    path: str | None = None,
    skip_files: bool = False,
    progress_callback: Callable[[TransferProgress], None] | None = None,
    cancel_event: asyncio.Event | None = None,
) -> Result[str]:
    """
    Render the directory structure of a provider.

    Args:
        provider: Provider to walk
        renderer: Output format (TextTreeRenderer when None)
        path: Directory to start from (None or "" for the root)
        skip_files: Render directories only, without totals
        progress_callback: Receives a snapshot after each directory's files
        cancel_event: Cooperative cancellation signal

    Returns:
        Result whose value is the rendered text
    """
    renderer = renderer or TextTreeRenderer()
    start = normalize_path(path)

    if provider is None:
        return Result.fail(
            ArgumentError("Provider cannot be empty", argument="provider"),
            "Invalid provider provided for render",
        )
    if cancel_event is not None and cancel_event.is_set():
        return Result.fail(
            OperationCancelledError("Operation cancelled"),
            "Cancelled rendering storage provider structure",
        )

    try:
        root = await walk_directory(provider, start, skip_files, progress_callback, cancel_event)
        _render(to_tree_node(root), renderer, depth=0)
        if not skip_files:
            renderer.render_totals(root.file_count, root.total_size)
    except OperationCancelledError as e:
        return Result.fail(e, "Cancelled rendering storage provider structure")
    except Exception as e:
        logger.exception(f"Unexpected error rendering '{start}'")
        return Result.fail(
            UnexpectedError(e),
            f"Unexpected error rendering storage provider structure starting at '{start}'",
        )

    return Result.ok(
        renderer.to_text(), f"Rendered storage provider structure starting at '{start or '/'}'"
    )
