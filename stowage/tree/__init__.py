"""
Stowage Tree Module.

Walks a provider's directory structure and renders it as text or HTML.
"""

from .renderers import HtmlTreeRenderer, TextTreeRenderer, TreeNode, TreeRenderer, format_size
from .walker import DirectoryNode, render_directory, to_tree_node, walk_directory

__all__ = [
    "DirectoryNode",
    "HtmlTreeRenderer",
    "TextTreeRenderer",
    "TreeNode",
    "TreeRenderer",
    "format_size",
    "render_directory",
    "to_tree_node",
    "walk_directory",
]
