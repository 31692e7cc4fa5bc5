# wildpath/core/discovery/path_splitting.py
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from wildpath.logging_setup import get_logger

log = get_logger(__name__)

NORM_SEPARATOR = "/"
RECURSIVE_TOKEN = "**"

# first glob expression in a path: brace group, bracket set, run of '?', '*' or '**'.
GLOB_CHARS_REGEX = re.compile(r"\{.+\}|\[.+\]|\?+|\*{1,2}")
_SEPARATOR_RUNS = re.compile(r"/{2,}")


def spans_directories(segment: str, wildcard: str) -> bool:
    """
    True when `segment` of `wildcard` can match more than one path component.

    `**` only crosses separators as a whole segment (`b**` behaves like `b*`),
    unless a brace group can expand it into one, e.g. `{**,x}`.
    """
    return segment == RECURSIVE_TOKEN or ("{" in wildcard and RECURSIVE_TOKEN in segment)


@dataclass(frozen=True)
class SplitResult:
    """
    A path split into its static base directory and its wildcard suffix.

    `base_dir` is always absolute and lexically normalized. `wildcard` is None
    when the path holds no glob expression, in which case `base_dir` itself is
    the target.
    """
    base_dir: Path
    wildcard: Optional[str] = None

    @property
    def is_recursive(self) -> bool:
        return any(spans_directories(segment, self.wildcard) for segment in self.segments)

    @property
    def segments(self) -> List[str]:
        return self.wildcard.split(NORM_SEPARATOR) if self.wildcard else []

    @property
    def max_depth(self) -> Optional[int]:
        """
        How deep below `base_dir` the walk has to go; None means unlimited.

        Without a wildcard only the immediate children are listed. A bounded
        wildcard needs one level per segment and nothing more.
        """
        if self.wildcard is None:
            return 1
        if self.is_recursive:
            return None
        return self.wildcard.count(NORM_SEPARATOR) + 1

    def joined(self) -> str:
        # the split path put back together with the canonical separator.
        if self.wildcard is None:
            return self.base_dir.as_posix()
        return self.base_dir.as_posix().rstrip(NORM_SEPARATOR) + NORM_SEPARATOR + self.wildcard

    def __str__(self) -> str:
        return f"base_dir={self.base_dir} wildcard={self.wildcard}"


def normalize_separators(path_str: str) -> str:
    # converts back slashes to forward slashes and collapses repeated separators.
    return _SEPARATOR_RUNS.sub(NORM_SEPARATOR, path_str.replace("\\", NORM_SEPARATOR))


def _absolute(path_str: str, cwd: Optional[str]) -> Path:
    # absolute and lexically normalized; symbolic links are left alone.
    base = cwd if cwd is not None else os.getcwd()
    return Path(os.path.normpath(os.path.join(base, path_str)))


def split_path(path_str: Optional[str], cwd: Optional[str] = None) -> SplitResult:
    """
    Splits `path_str` into an absolute base directory and a glob wildcard.

    Never fails. Empty input means the current directory without a wildcard.
    Relative paths are resolved against `cwd` (default: the process working
    directory).

    Escaped metacharacters are not recognised: back slashes are normalized
    to separators before the glob expression is searched for.
    """
    if path_str is None or not path_str.strip():
        return SplitResult(_absolute(".", cwd), None)

    normalized = normalize_separators(path_str.strip())
    glob_match = GLOB_CHARS_REGEX.search(normalized)

    if glob_match is None:
        result = SplitResult(_absolute(normalized, cwd), None)
        log.debug("path_split_without_wildcard", path=path_str, base_dir=str(result.base_dir))
        return result

    glob_start = glob_match.start()

    if glob_start == 0:
        base_dir = _absolute(".", cwd)
        wildcard = normalized
    else:
        separator_index = normalized.rfind(NORM_SEPARATOR, 0, glob_start)
        if separator_index > -1:
            # any literal characters between the separator and the glob stay in the wildcard.
            base_dir = _absolute(normalized[:separator_index + 1], cwd)
            wildcard = normalized[separator_index + 1:]
        else:
            # the glob sits in the first segment: fold that segment into the wildcard
            # unless it is only a drive, which has to stay in the base directory.
            head = normalized[:glob_start]
            drive, first_name = os.path.splitdrive(head)
            if first_name:
                base_dir = _absolute(drive or ".", cwd)
                wildcard = first_name + normalized[glob_start:]
            else:
                base_dir = Path(os.path.abspath(drive))
                wildcard = normalized[glob_start:]

    if wildcard.endswith(NORM_SEPARATOR):
        wildcard = wildcard[:-1]

    result = SplitResult(base_dir, wildcard)
    log.debug("path_split", path=path_str, base_dir=str(base_dir), wildcard=wildcard)
    return result
