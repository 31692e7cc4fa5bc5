# wildpath/core/output.py
"""handles rendering matched entries and writing them to stdout, a file, or the clipboard."""
import datetime
import io
import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import pyperclip  # type: ignore
from rich.console import Console as RichConsole
from rich.table import Table

from wildpath.config.settings import OutputFormat, SortMethod
from wildpath.core.discovery.attributes import EntryAttributes
from wildpath.exceptions import OutputError
from wildpath.logging_setup import get_logger

log = get_logger(__name__)


@dataclass
class MatchedEntry:
    path: Path
    display: str
    attributes: Optional[EntryAttributes]

    @property
    def kind(self) -> str:
        attrs = self.attributes
        if attrs is None:
            return "unknown"
        if attrs.is_symbolic_link:
            return "symlink"
        if attrs.is_directory:
            return "dir"
        if attrs.is_regular_file:
            return "file"
        return "other"


def describe_entries(paths: List[Path], cwd: Path, absolute_paths: bool = False) -> List[MatchedEntry]:
    # pairs each path with its display form and (lstat) attributes.
    entries: List[MatchedEntry] = []
    for path in paths:
        display = str(path) if absolute_paths else os.path.relpath(path, cwd)
        try:
            attributes: Optional[EntryAttributes] = EntryAttributes.read(path, follow_symlinks=False)
        except OSError as e:
            log.warning("entry_vanished_before_output", path=str(path), error=str(e))
            attributes = None
        entries.append(MatchedEntry(path, display, attributes))
    return entries


def sort_entries(entries: List[MatchedEntry], method: SortMethod) -> List[MatchedEntry]:
    if method is SortMethod.NAME:
        return sorted(entries, key=lambda e: e.display)
    if method is SortMethod.SIZE:
        return sorted(entries, key=lambda e: (e.attributes.size if e.attributes else -1, e.display))
    if method is SortMethod.MTIME:
        return sorted(entries, key=lambda e: (e.attributes.modified if e.attributes else 0.0, e.display))
    return list(entries)


def _iso_mtime(attrs: Optional[EntryAttributes]) -> Optional[str]:
    if attrs is None:
        return None
    return datetime.datetime.fromtimestamp(attrs.modified, tz=datetime.timezone.utc).isoformat()


def render_long_listing(entries: List[MatchedEntry], console: RichConsole):
    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("type")
    table.add_column("size", justify="right")
    table.add_column("modified (utc)")
    table.add_column("path", overflow="fold")
    for entry in entries:
        attrs = entry.attributes
        size = f"{attrs.size:,}" if attrs is not None else "?"
        modified = _iso_mtime(attrs) or "?"
        table.add_row(entry.kind, size, modified[:19], entry.display)
    console.print(table)


def format_matches(entries: List[MatchedEntry], output_format: OutputFormat) -> str:
    """renders entries as text in the requested format."""
    if output_format is OutputFormat.NULL:
        return "".join(f"{e.display}\0" for e in entries)
    if output_format is OutputFormat.JSON:
        payload = [
            {
                "path": e.display,
                "type": e.kind,
                "size": e.attributes.size if e.attributes else None,
                "modified": _iso_mtime(e.attributes),
            }
            for e in entries
        ]
        return json.dumps(payload, indent=2) + "\n"
    if output_format is OutputFormat.LONG:
        buffer = io.StringIO()
        render_long_listing(entries, RichConsole(file=buffer, width=200, color_system=None))
        return buffer.getvalue()
    return "".join(f"{e.display}\n" for e in entries)


def write_to_stdout(text_content: str):
    # writes text to standard output.
    try:
        sys.stdout.write(text_content)
        sys.stdout.flush()
    except Exception as e:
        log.warning("stdout_write_failed_trying_binary_fallback", error=str(e))
        try:
            sys.stdout.buffer.write(text_content.encode("utf-8", errors="replace"))
            sys.stdout.buffer.flush()
        except Exception as inner_e:
            log.critical("stdout_binary_fallback_failed_critical_error", error=str(inner_e))


def write_to_file(output_file_path: Path, text_content: str):
    # writes text content to the specified file path.
    log.info("writing_output_to_file", path=str(output_file_path))
    try:
        output_file_path.write_text(text_content, encoding="utf-8")
    except Exception as e:
        raise OutputError(f"failed to write to file '{output_file_path}': {e}") from e


def copy_to_clipboard(text_content: str) -> bool:
    """
    copies text content to the system clipboard using pyperclip.
    returns true if successful, false otherwise.
    """
    log.info("attempting_to_copy_output_to_clipboard")
    try:
        pyperclip.copy(text_content)
        log.info("successfully_copied_to_clipboard_via_pyperclip")
        return True
    except pyperclip.PyperclipException as e:
        log.warning(
            "clipboard_copy_failed_pyperclip_exception",
            error=str(e),
            note="ensure clipboard utility (xclip/pbcopy) is installed and accessible.",
        )
        return False
