# wildpath/core/discovery/pattern_matching.py
import re
from pathlib import PurePath
from typing import Callable, List, Optional, Pattern, Sequence, Union

from wcmatch import glob as wcglob

from wildpath.core.discovery.path_splitting import NORM_SEPARATOR, spans_directories
from wildpath.exceptions import PatternError
from wildpath.logging_setup import get_logger

log = get_logger(__name__)

# '*' stays inside one segment, '**' crosses segments, braces expand, dot entries are not special.
GLOB_FLAGS = wcglob.GLOBSTAR | wcglob.BRACE | wcglob.DOTGLOB | wcglob.FORCEUNIX

RelativePath = Union[str, PurePath, Sequence[str]]


def _as_posix(relative_path: RelativePath) -> str:
    if isinstance(relative_path, str):
        return relative_path
    if isinstance(relative_path, PurePath):
        return relative_path.as_posix()
    return NORM_SEPARATOR.join(relative_path)


class GlobMatcher:
    """A compiled glob, matched against paths relative to a base directory."""

    def __init__(self, pattern: str, regexes: List[Pattern[str]]):
        self.pattern = pattern
        self._regexes = regexes

    def matches(self, relative_path: RelativePath) -> bool:
        candidate = _as_posix(relative_path)
        return any(regex.fullmatch(candidate) for regex in self._regexes)

    def __repr__(self) -> str:
        return f"GlobMatcher({self.pattern!r})"


def compile_glob(pattern: str, case_sensitive: bool = True) -> GlobMatcher:
    # compiles a glob into a matcher; a brace group yields one regex per alternative.
    flags = GLOB_FLAGS if case_sensitive else GLOB_FLAGS | wcglob.IGNORECASE
    try:
        include_regexes, _ = wcglob.translate(pattern, flags=flags)
        compiled = [re.compile(regex) for regex in include_regexes]
    except Exception as e:
        raise PatternError(f"error compiling glob pattern '{pattern}': {e}") from e
    log.debug("glob_compiled", pattern=pattern, alternatives=len(compiled))
    return GlobMatcher(pattern, compiled)


MatcherFactory = Callable[[str, bool], GlobMatcher]


def _separator_inside_group(wildcard: str) -> bool:
    # true when a separator sits inside a brace group or bracket set.
    brace_depth = 0
    in_bracket = False
    for char in wildcard:
        if in_bracket:
            if char == "]":
                in_bracket = False
            elif char == NORM_SEPARATOR:
                return True
        elif char == "[":
            in_bracket = True
        elif char == "{":
            brace_depth += 1
        elif char == "}" and brace_depth:
            brace_depth -= 1
        elif char == NORM_SEPARATOR and brace_depth:
            return True
    return False


class LevelMatchers:
    """
    One matcher per wildcard prefix, built once before a walk.

    `for_level(k)` tests a directory `k` segments below the base directory
    against the first `k` segments of the wildcard. Those prefix tests only
    prune: a level that could still lead to a match (after a '**' segment, or
    when a group spans separators and segments no longer line up with path
    components) has no matcher and accepts everything.
    """

    def __init__(
        self,
        wildcard: str,
        case_sensitive: bool = True,
        matcher_factory: MatcherFactory = compile_glob,
    ):
        self.wildcard = wildcard
        self.segments: List[str] = wildcard.split(NORM_SEPARATOR)
        self.full = matcher_factory(wildcard, case_sensitive)
        self.prunable = not _separator_inside_group(wildcard)
        self.is_recursive = any(spans_directories(segment, wildcard) for segment in self.segments)

        self._levels: List[Optional[GlobMatcher]] = []
        open_ended = not self.prunable
        last = len(self.segments)
        for k in range(1, last + 1):
            open_ended = open_ended or spans_directories(self.segments[k - 1], wildcard)
            if open_ended:
                self._levels.append(None)
            elif k == last:
                self._levels.append(self.full)
            else:
                self._levels.append(matcher_factory(NORM_SEPARATOR.join(self.segments[:k]), case_sensitive))

        log.debug(
            "level_matchers_built",
            wildcard=wildcard,
            levels=len(self._levels),
            prunable=self.prunable,
            recursive=self.is_recursive,
        )

    def __len__(self) -> int:
        return len(self._levels)

    def for_level(self, level: int) -> Optional[GlobMatcher]:
        return self._levels[level - 1]

    def accepts_directory(self, relative_parts: Sequence[str]) -> bool:
        # false only when no path below this directory can satisfy the full wildcard.
        level = len(relative_parts)
        if level == 0:
            return True
        if level > len(self._levels):
            return self.is_recursive or not self.prunable
        matcher = self._levels[level - 1]
        return matcher is None or matcher.matches(relative_parts)

    def matches(self, relative_path: RelativePath) -> bool:
        return self.full.matches(relative_path)
