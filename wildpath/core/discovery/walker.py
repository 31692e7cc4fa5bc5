# wildpath/core/discovery/walker.py
import os
from pathlib import Path
from typing import List, Optional


from wildpath.core.discovery.attributes import EntryAttributes
from wildpath.core.discovery.file_tree import walk_file_tree
from wildpath.core.discovery.path_splitting import SplitResult, split_path
from wildpath.core.discovery.pattern_matching import LevelMatchers, MatcherFactory, compile_glob
from wildpath.core.discovery.visitor import FileVisitor, FilterLike, VisitResult, filter_accepts
from wildpath.exceptions import BaseDirectoryNotFoundError, ResolutionError
from wildpath.logging_setup import get_logger

log = get_logger(__name__)


class WildcardVisitor(FileVisitor):
    """
    Interposes wildcard pruning and matching in front of a caller's visitor.

    Directories that cannot lead to a match are skipped before they are
    read. Entries that match the full wildcard and pass the secondary filter
    are collected and handed to the caller's visitor.
    """

    def __init__(
        self,
        base_dir: Path,
        matchers: Optional[LevelMatchers],
        visitor: Optional[FileVisitor] = None,
        file_filter: Optional[FilterLike] = None,
        collected: Optional[List[Path]] = None,
    ):
        self.base_dir = base_dir
        self.matchers = matchers
        self.visitor = visitor
        self.file_filter = file_filter
        self.collected = collected
        self.matched_count = 0
        self.pruned_count = 0

    def _relative_parts(self, path: Path):
        return path.relative_to(self.base_dir).parts

    def pre_visit_directory(self, directory: Path, attributes: EntryAttributes) -> VisitResult:
        if self.matchers is not None and not self.matchers.accepts_directory(self._relative_parts(directory)):
            self.pruned_count += 1
            log.debug("directory_pruned", path=str(directory))
            return VisitResult.SKIP_SUBTREE
        if self.visitor is not None:
            return self.visitor.pre_visit_directory(directory, attributes)
        return VisitResult.CONTINUE

    def visit_file(self, path: Path, attributes: EntryAttributes) -> VisitResult:
        if self.matchers is not None and not self.matchers.matches(self._relative_parts(path)):
            return VisitResult.SKIP_ENTRY
        if not filter_accepts(self.file_filter, path, attributes):
            log.debug("entry_rejected_by_filter", path=str(path))
            return VisitResult.SKIP_ENTRY

        self.matched_count += 1
        if self.collected is not None:
            self.collected.append(path)
        if self.visitor is not None:
            return self.visitor.visit_file(path, attributes)
        return VisitResult.CONTINUE

    def post_visit_directory(self, directory: Path, error: Optional[OSError]) -> VisitResult:
        if self.visitor is not None:
            return self.visitor.post_visit_directory(directory, error)
        if error is not None:
            log.warning("walk_directory_failed", path=str(directory), error=str(error))
        return VisitResult.CONTINUE

    def visit_file_failed(self, path: Path, error: OSError) -> VisitResult:
        if self.visitor is not None:
            return self.visitor.visit_file_failed(path, error)
        # one unreadable entry must not abort the rest of the walk.
        log.warning("walk_entry_failed", path=str(path), error=str(error))
        return VisitResult.CONTINUE


def resolve_base_dir(split: SplitResult) -> Path:
    # canonical real path of the base directory; links inside the base are always resolved.
    try:
        return split.base_dir.resolve(strict=True)
    except FileNotFoundError as e:
        raise BaseDirectoryNotFoundError(f"base directory does not exist: {split.base_dir}") from e
    except (OSError, RuntimeError) as e:
        raise ResolutionError(f"cannot resolve base directory {split.base_dir}: {e}") from e


def ensure_listable(directory: Path):
    # raises ResolutionError when `directory` cannot be listed.
    try:
        with os.scandir(directory):
            pass
    except OSError as e:
        raise ResolutionError(f"cannot read base directory {directory}: {e}") from e


def walk_wildcard_path(
    split: SplitResult,
    follow_symlinks: bool = False,
    file_filter: Optional[FilterLike] = None,
    visitor: Optional[FileVisitor] = None,
    collected: Optional[List[Path]] = None,
    case_sensitive: bool = True,
    matcher_factory: MatcherFactory = compile_glob,
) -> Path:
    """
    Walks the base directory of `split`, reporting entries matching its wildcard.

    Matches are appended to `collected` (when given) and passed to `visitor`
    (when given). If the base resolves to a file, that file is the single
    result and nothing is walked. Returns the path the walk started from.
    """
    matchers = (
        LevelMatchers(split.wildcard, case_sensitive, matcher_factory)
        if split.wildcard is not None
        else None
    )
    start = resolve_base_dir(split)

    if not start.is_dir():
        log.info("walk_target_is_file", path=str(start))
        if collected is not None:
            collected.append(start)
        if visitor is not None:
            visitor.visit_file(start, EntryAttributes.read(start))
        return start

    ensure_listable(start)
    max_depth = split.max_depth
    log.info(
        "walk_started",
        base_dir=str(start),
        wildcard=split.wildcard,
        max_depth=max_depth if max_depth is not None else "unbounded",
        follow_symlinks=follow_symlinks,
    )
    wildcard_visitor = WildcardVisitor(start, matchers, visitor, file_filter, collected)
    walk_file_tree(start, wildcard_visitor, max_depth=max_depth, follow_symlinks=follow_symlinks)
    log.info(
        "walk_finished",
        base_dir=str(start),
        matched=wildcard_visitor.matched_count,
        pruned_directories=wildcard_visitor.pruned_count,
    )
    return start


def list_files(
    path_str: Optional[str],
    follow_symlinks: bool = False,
    file_filter: Optional[FilterLike] = None,
    case_sensitive: bool = True,
    cwd: Optional[str] = None,
) -> List[Path]:
    """
    Lists the entries matching a path that may contain a glob expression.

    Without a glob the immediate children of the directory are listed (or
    the file itself). Order follows directory enumeration; sort the result
    if a stable order is needed. An empty list means nothing matched.
    """
    split = split_path(path_str, cwd=cwd)
    collected: List[Path] = []
    walk_wildcard_path(
        split,
        follow_symlinks=follow_symlinks,
        file_filter=file_filter,
        collected=collected,
        case_sensitive=case_sensitive,
    )
    return collected


def walk(
    path_str: Optional[str],
    visitor: FileVisitor,
    follow_symlinks: bool = False,
    file_filter: Optional[FilterLike] = None,
    case_sensitive: bool = True,
    cwd: Optional[str] = None,
) -> Path:
    """
    Streams the entries matching `path_str` to `visitor` without collecting them.

    Returns the path the walk started from.
    """
    if visitor is None:
        raise ValueError("a file visitor is required")
    split = split_path(path_str, cwd=cwd)
    return walk_wildcard_path(
        split,
        follow_symlinks=follow_symlinks,
        file_filter=file_filter,
        visitor=visitor,
        case_sensitive=case_sensitive,
    )
