# wildpath/core/filters.py
"""
Ready-made secondary filters.

Each filter is consulted only after an entry already satisfies the wildcard,
so none of them prune the walk; they only veto what gets reported.
"""
from pathlib import Path
from typing import Dict, List, Optional

import pathspec

from wildpath.config.settings import EntryType
from wildpath.core.discovery.attributes import EntryAttributes
from wildpath.core.discovery.visitor import FilterLike, filter_accepts
from wildpath.exceptions import PatternError
from wildpath.logging_setup import get_logger

log = get_logger(__name__)


def _relative_posix(path: Path, root: Path, is_dir: bool) -> str:
    # path relative to `root` in gitignore form; directories get a trailing slash.
    try:
        rel = path.relative_to(root).as_posix()
    except ValueError:
        rel = path.name
    return rel + "/" if is_dir else rel


def compile_gitignore_spec(patterns: List[str]) -> Optional[pathspec.PathSpec]:
    # compiles gitignore-style lines into a pathspec object for matching.
    if not patterns:
        return None
    try:
        return pathspec.PathSpec.from_lines(pathspec.patterns.GitWildMatchPattern, patterns)
    except Exception as e:
        raise PatternError(f"error compiling exclude patterns {patterns}: {e}") from e


def load_gitignore_spec(directory: Path) -> Optional[pathspec.PathSpec]:
    # loads and compiles the .gitignore of `directory`, if it has a readable one.
    gitignore_file = directory / ".gitignore"
    if not gitignore_file.is_file():
        return None
    try:
        with gitignore_file.open("r", encoding="utf-8", errors="ignore") as f_obj:
            spec = pathspec.PathSpec.from_lines(pathspec.patterns.GitWildMatchPattern, f_obj)
            log.debug("loaded_gitignore", path=str(gitignore_file))
            return spec
    except Exception as e:
        log.warning("failed_to_parse_gitignore_file", path=str(gitignore_file), error=str(e))
    return None


class ExcludePatternFilter:
    """Rejects entries matching gitignore-style exclude patterns relative to `root`."""

    def __init__(self, patterns: List[str], root: Path):
        self.root = root
        self.spec = compile_gitignore_spec(list(patterns))

    def accept(self, path: Path, attributes: EntryAttributes) -> bool:
        if self.spec is None:
            return True
        return not self.spec.match_file(_relative_posix(path, self.root, attributes.is_directory))


class GitignoreFilter:
    """
    Rejects entries ignored by a .gitignore between the entry and `root`.

    Each directory's .gitignore is read at most once per filter instance.
    """

    def __init__(self, root: Path):
        self.root = root
        self._specs: Dict[Path, Optional[pathspec.PathSpec]] = {}

    def _spec_for(self, directory: Path) -> Optional[pathspec.PathSpec]:
        if directory not in self._specs:
            self._specs[directory] = load_gitignore_spec(directory)
        return self._specs[directory]

    def accept(self, path: Path, attributes: EntryAttributes) -> bool:
        directory = path.parent
        while True:
            spec = self._spec_for(directory)
            if spec is not None:
                if spec.match_file(_relative_posix(path, directory, attributes.is_directory)):
                    log.debug("entry_gitignored", path=str(path), gitignore_dir=str(directory))
                    return False
            if directory == self.root or directory.parent == directory:
                return True
            if not directory.is_relative_to(self.root):
                return True
            directory = directory.parent


class HiddenFilter:
    """Rejects entries with a dot-prefixed component below `root`."""

    def __init__(self, root: Path):
        self.root = root

    def accept(self, path: Path, attributes: EntryAttributes) -> bool:
        try:
            parts = path.relative_to(self.root).parts
        except ValueError:
            parts = (path.name,)
        return not any(part.startswith(".") and part not in (".", "..") for part in parts)


class EntryTypeFilter:
    def __init__(self, entry_type: EntryType):
        self.entry_type = entry_type

    def accept(self, path: Path, attributes: EntryAttributes) -> bool:
        if self.entry_type is EntryType.FILE:
            return attributes.is_regular_file
        if self.entry_type is EntryType.DIRECTORY:
            return attributes.is_directory
        if self.entry_type is EntryType.SYMLINK:
            return attributes.is_symbolic_link
        return True


class SizeFilter:
    # inclusive bounds in bytes; None leaves a side open.
    def __init__(self, min_size: Optional[int] = None, max_size: Optional[int] = None):
        self.min_size = min_size
        self.max_size = max_size

    def accept(self, path: Path, attributes: EntryAttributes) -> bool:
        if self.min_size is not None and attributes.size < self.min_size:
            return False
        if self.max_size is not None and attributes.size > self.max_size:
            return False
        return True


class ModifiedSinceFilter:
    def __init__(self, since: float):
        self.since = since

    def accept(self, path: Path, attributes: EntryAttributes) -> bool:
        return attributes.modified >= self.since


class CompositeFilter:
    """Accepts an entry only if every member filter accepts it."""

    def __init__(self, filters: List[FilterLike]):
        self.filters = filters

    def accept(self, path: Path, attributes: EntryAttributes) -> bool:
        return all(filter_accepts(f, path, attributes) for f in self.filters)


def all_of(*filters: Optional[FilterLike]) -> Optional[FilterLike]:
    # combines filters, dropping missing ones; None when nothing is left.
    present = [f for f in filters if f is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return CompositeFilter(present)
