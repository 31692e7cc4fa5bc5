# wildpath/core/discovery/visitor.py
"""
Visitor hooks and filter capability used by the tree walker.

Callers subclass `FileVisitor` and override only the hooks they need; every
hook returns a `VisitResult` that steers the traversal.
"""
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Protocol, Union, runtime_checkable

from wildpath.core.discovery.attributes import EntryAttributes


class VisitResult(Enum):
    # traversal instruction returned from every visitor hook.
    CONTINUE = "continue"
    SKIP_ENTRY = "skip_entry"
    SKIP_SUBTREE = "skip_subtree"
    SKIP_SIBLINGS = "skip_siblings"
    STOP = "stop"


class FileVisitor:
    """No-op visitor. Every hook continues the walk."""

    def pre_visit_directory(self, directory: Path, attributes: EntryAttributes) -> VisitResult:
        return VisitResult.CONTINUE

    def visit_file(self, path: Path, attributes: EntryAttributes) -> VisitResult:
        return VisitResult.CONTINUE

    def post_visit_directory(self, directory: Path, error: Optional[OSError]) -> VisitResult:
        return VisitResult.CONTINUE

    def visit_file_failed(self, path: Path, error: OSError) -> VisitResult:
        return VisitResult.CONTINUE


@runtime_checkable
class FileFilter(Protocol):
    """Secondary filter, consulted after a path already satisfies the wildcard."""

    def accept(self, path: Path, attributes: EntryAttributes) -> bool:
        ...


FilterLike = Union[FileFilter, Callable[[Path, EntryAttributes], bool]]


def filter_accepts(file_filter: Optional[FilterLike], path: Path, attributes: EntryAttributes) -> bool:
    # a missing filter accepts everything; plain callables are supported too.
    if file_filter is None:
        return True
    if isinstance(file_filter, FileFilter):
        return bool(file_filter.accept(path, attributes))
    return bool(file_filter(path, attributes))
