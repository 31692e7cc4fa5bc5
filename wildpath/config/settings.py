from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional
from wildpath.logging_setup import get_logger

log = get_logger(__name__)

class SortMethod(Enum):
    # defines how matched entries are ordered before output.
    NONE = "none"
    NAME = "name"
    SIZE = "size"
    MTIME = "mtime"

    @classmethod
    def from_string(cls, s: Optional[str]) -> Optional["SortMethod"]:
        if not s:
            return None
        try:
            return cls(s.lower())
        except ValueError:
            log.warning("invalid_sort_method_string", input_string=s)
            return None

class OutputFormat(Enum):
    # defines how matched entries are printed.
    PLAIN = "plain"
    NULL = "null"
    JSON = "json"
    LONG = "long"

    @classmethod
    def from_string(cls, s: Optional[str]) -> Optional["OutputFormat"]:
        if not s:
            return None
        try:
            return cls(s.lower())
        except ValueError:
            log.warning("invalid_output_format_string", input_string=s)
            return None

class EntryType(Enum):
    # restricts reported entries to one kind.
    ANY = "any"
    FILE = "file"
    DIRECTORY = "dir"
    SYMLINK = "symlink"

    @classmethod
    def from_string(cls, s: Optional[str]) -> "EntryType":
        if not s:
            return cls.ANY
        try:
            return cls(s.lower())
        except ValueError:
            log.warning("invalid_entry_type_string", input_string=s)
            return cls.ANY

DEFAULT_SORT_METHOD = SortMethod.NONE
DEFAULT_OUTPUT_FORMAT = OutputFormat.PLAIN
DEFAULT_ENTRY_TYPE = EntryType.ANY
DEFAULT_SHOW_SUMMARY = False

@dataclass
class WalkConfig:
    # holds all configuration parameters for a single run.
    patterns: List[str] = field(default_factory=list)
    follow_symlinks: bool = False
    exclude_patterns: List[str] = field(default_factory=list)
    respect_gitignore: bool = False
    include_hidden: bool = True
    entry_type: EntryType = DEFAULT_ENTRY_TYPE
    min_size: Optional[int] = None
    max_size: Optional[int] = None
    case_sensitive: bool = True
    sort_method: SortMethod = DEFAULT_SORT_METHOD
    output_format: OutputFormat = DEFAULT_OUTPUT_FORMAT
    absolute_paths: bool = False
    output_file: Optional[Path] = None
    clipboard: bool = False
    show_summary: bool = DEFAULT_SHOW_SUMMARY

    # internal state, not set directly by user flags.
    cwd: Path = field(init=False)

    def __post_init__(self):
        # relative patterns and displayed paths are anchored here.
        self.cwd = Path.cwd()
        if self.min_size is not None and self.max_size is not None and self.min_size > self.max_size:
            log.warning("size_bounds_exclude_everything", min_size=self.min_size, max_size=self.max_size)
