# wildpath/core/discovery/file_tree.py
"""
Depth-first, depth-limited directory enumeration with visitor hooks.

The start path sits at depth 0. Every directory strictly above `max_depth`
is offered to `pre_visit_directory` before any of its entries are read, then
its entries are visited, then `post_visit_directory` runs. Files, and
directories at `max_depth`, go to `visit_file`. Entries whose attributes
cannot be read, and symbolic link loops, go to `visit_file_failed`. A
directory that cannot be listed is closed with `post_visit_directory`
carrying the error.
"""
import errno
import os
from pathlib import Path
from typing import List, Optional, Set, Tuple, Union


from wildpath.core.discovery.attributes import EntryAttributes
from wildpath.core.discovery.visitor import FileVisitor, VisitResult
from wildpath.logging_setup import get_logger

log = get_logger(__name__)

_PRUNING_RESULTS = (VisitResult.SKIP_SUBTREE, VisitResult.SKIP_ENTRY)


class FileSystemLoopError(OSError):
    # a followed symbolic link leads back to one of its own ancestors.
    def __init__(self, path: Path):
        super().__init__(errno.ELOOP, "file system loop detected", str(path))


def _read_entry_attributes(entry: os.DirEntry, follow_symlinks: bool) -> EntryAttributes:
    if follow_symlinks:
        try:
            return EntryAttributes.from_stat(entry.stat(follow_symlinks=True))
        except FileNotFoundError:
            # broken link: report the link itself.
            pass
    return EntryAttributes.from_stat(entry.stat(follow_symlinks=False))


class _TreeWalker:
    def __init__(self, visitor: FileVisitor, max_depth: Optional[int], follow_symlinks: bool):
        self.visitor = visitor
        self.max_depth = max_depth
        self.follow_symlinks = follow_symlinks
        self._ancestors: Set[Tuple[int, int]] = set()

    def _at_depth_limit(self, depth: int) -> bool:
        return self.max_depth is not None and depth >= self.max_depth

    def visit(self, path: Path, attributes: EntryAttributes, depth: int) -> VisitResult:
        if not attributes.is_directory or self._at_depth_limit(depth):
            return self.visitor.visit_file(path, attributes)

        if self.follow_symlinks and attributes.file_key in self._ancestors:
            log.debug("file_system_loop_detected", path=str(path))
            return self.visitor.visit_file_failed(path, FileSystemLoopError(path))

        result = self.visitor.pre_visit_directory(path, attributes)
        if result is VisitResult.STOP or result is VisitResult.SKIP_SIBLINGS:
            return result
        if result in _PRUNING_RESULTS:
            return VisitResult.CONTINUE

        self._ancestors.add(attributes.file_key)
        try:
            result = self._visit_children(path, depth)
        finally:
            self._ancestors.discard(attributes.file_key)
        return result

    def _visit_children(self, directory: Path, depth: int) -> VisitResult:
        listing_error: Optional[OSError] = None
        entries: List[os.DirEntry] = []
        try:
            # the listing is materialized so no handle stays open while descending.
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            log.debug("directory_listing_failed", path=str(directory), error=str(e))
            listing_error = e

        for entry in entries:
            entry_path = Path(entry.path)
            try:
                attributes = _read_entry_attributes(entry, self.follow_symlinks)
            except OSError as e:
                result = self.visitor.visit_file_failed(entry_path, e)
            else:
                result = self.visit(entry_path, attributes, depth + 1)

            if result is VisitResult.STOP:
                return result
            if result is VisitResult.SKIP_SIBLINGS:
                break

        result = self.visitor.post_visit_directory(directory, listing_error)
        if result is VisitResult.STOP or result is VisitResult.SKIP_SIBLINGS:
            return result
        return VisitResult.CONTINUE


def walk_file_tree(
    start: Union[str, Path],
    visitor: FileVisitor,
    max_depth: Optional[int] = None,
    follow_symlinks: bool = False,
) -> Path:
    """
    Walks the tree rooted at `start`, calling `visitor` for every entry.

    `max_depth` of None means unlimited; 0 visits only `start` itself.
    Symbolic links below `start` are followed only when `follow_symlinks`
    is set. Returns `start`.
    """
    if max_depth is not None and max_depth < 0:
        raise ValueError(f"max_depth must not be negative: {max_depth}")

    start_path = Path(start)
    walker = _TreeWalker(visitor, max_depth, follow_symlinks)
    try:
        attributes = EntryAttributes.read(start_path, follow_symlinks=True)
    except OSError as e:
        visitor.visit_file_failed(start_path, e)
        return start_path

    walker.visit(start_path, attributes, 0)
    return start_path
