# wildpath/core/discovery/__init__.py
"""
Wildcard path discovery for wildpath.

This package splits a path into its static base directory and glob wildcard,
then walks the base directory with per-level pruning.
"""
# Re-export the main entry points for easier access
from .attributes import EntryAttributes
from .path_splitting import SplitResult, split_path
from .visitor import FileFilter, FileVisitor, VisitResult
from .walker import list_files, resolve_base_dir, walk, walk_wildcard_path

__all__ = [
    "EntryAttributes",
    "FileFilter",
    "FileVisitor",
    "SplitResult",
    "VisitResult",
    "list_files",
    "resolve_base_dir",
    "split_path",
    "walk",
    "walk_wildcard_path",
]
