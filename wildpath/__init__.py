"""
wildpath: list and walk files named by paths with embedded glob patterns.

    >>> from wildpath import list_files
    >>> list_files("src/**/*.py")
"""
from wildpath.core.discovery import (
    EntryAttributes,
    FileFilter,
    FileVisitor,
    SplitResult,
    VisitResult,
    list_files,
    split_path,
    walk,
)
from wildpath.exceptions import (
    BaseDirectoryNotFoundError,
    PatternError,
    ResolutionError,
    WildPathError,
)

__version__ = "0.1.0"

__all__ = [
    "BaseDirectoryNotFoundError",
    "EntryAttributes",
    "FileFilter",
    "FileVisitor",
    "PatternError",
    "ResolutionError",
    "SplitResult",
    "VisitResult",
    "WildPathError",
    "list_files",
    "split_path",
    "walk",
]
