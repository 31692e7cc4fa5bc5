# wildpath/core/discovery/attributes.py
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union


@dataclass(frozen=True)
class EntryAttributes:
    """
    Snapshot of the attributes of one visited entry.

    Built from an `os.stat_result`. When symbolic links are followed the
    snapshot describes the link target, so `is_symbolic_link` is only true for
    links that were not (or could not be) followed.
    """
    is_regular_file: bool
    is_directory: bool
    is_symbolic_link: bool
    is_other: bool
    size: int
    modified: float
    accessed: float
    created: float
    file_key: Tuple[int, int]

    @classmethod
    def from_stat(cls, st: os.stat_result) -> "EntryAttributes":
        mode = st.st_mode
        is_file = stat.S_ISREG(mode)
        is_dir = stat.S_ISDIR(mode)
        is_link = stat.S_ISLNK(mode)
        return cls(
            is_regular_file=is_file,
            is_directory=is_dir,
            is_symbolic_link=is_link,
            is_other=not (is_file or is_dir or is_link),
            size=st.st_size,
            modified=st.st_mtime,
            accessed=st.st_atime,
            # st_birthtime only exists on some platforms.
            created=getattr(st, "st_birthtime", st.st_ctime),
            file_key=(st.st_dev, st.st_ino),
        )

    @classmethod
    def read(cls, path: Union[str, Path], follow_symlinks: bool = True) -> "EntryAttributes":
        # reads attributes of `path`, falling back to the link itself for broken links.
        if follow_symlinks:
            try:
                return cls.from_stat(os.stat(path))
            except FileNotFoundError:
                return cls.from_stat(os.lstat(path))
        return cls.from_stat(os.lstat(path))
