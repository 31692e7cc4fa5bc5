import logging
import os
from pathlib import Path

import pytest
import structlog

from wildpath.core.discovery import list_files, resolve_base_dir, split_path, walk, walk_wildcard_path
from wildpath.core.discovery.pattern_matching import compile_glob
from wildpath.core.discovery.visitor import FileVisitor, VisitResult
from wildpath.exceptions import BaseDirectoryNotFoundError, PatternError, ResolutionError

symlinks_supported = pytest.mark.skipif(
    not hasattr(os, "symlink") or os.name == "nt", reason="symbolic links need a POSIX file system"
)


def _ls(pattern, base, **kwargs):
    return list_files(pattern, cwd=str(base), **kwargs)


# --- the listing scenarios on root/a/b/x.txt, root/a/c/y.xml, root/d.xml ---

def test_single_level_wildcard(fixture_tree, real_root):
    assert _ls("root/*.xml", fixture_tree) == [real_root / "d.xml"]


def test_recursive_wildcard_includes_base_level(fixture_tree, real_root):
    assert set(_ls("root/**/*.xml", fixture_tree)) == {real_root / "a" / "c" / "y.xml", real_root / "d.xml"}


def test_wildcard_in_middle_segment(fixture_tree, real_root):
    assert _ls("root/a/*/x.txt", fixture_tree) == [real_root / "a" / "b" / "x.txt"]


def test_directory_without_wildcard_lists_children(fixture_tree, real_root):
    assert set(_ls("root", fixture_tree)) == {real_root / "a", real_root / "d.xml"}


def test_missing_base_directory(fixture_tree):
    with pytest.raises(BaseDirectoryNotFoundError):
        _ls("root/does-not-exist/*.txt", fixture_tree)


def test_missing_base_is_a_resolution_error(fixture_tree):
    with pytest.raises(ResolutionError):
        _ls("nowhere/**", fixture_tree)


def test_no_match_is_an_empty_list(fixture_tree):
    assert _ls("root/**/*.nothing", fixture_tree) == []


def test_file_target_is_the_single_result(fixture_tree, real_root):
    assert _ls("root/d.xml", fixture_tree) == [real_root / "d.xml"]


# --- matching details ---

def test_case_insensitive_matching(fixture_tree, real_root):
    assert _ls("root/*.XML", fixture_tree) == []
    assert _ls("root/*.XML", fixture_tree, case_sensitive=False) == [real_root / "d.xml"]


def test_brace_group_spanning_separators(fixture_tree, real_root):
    result = set(_ls("root/{a/b,a/c}/*", fixture_tree))
    assert result == {real_root / "a" / "b" / "x.txt", real_root / "a" / "c" / "y.xml"}


def test_directories_at_the_last_level_can_match(fixture_tree, real_root):
    assert set(_ls("root/a/*", fixture_tree)) == {real_root / "a" / "b", real_root / "a" / "c"}


def test_recursive_wildcard_does_not_report_directories(fixture_tree, real_root):
    result = set(_ls("root/**/*", fixture_tree))
    assert result == {real_root / "a" / "b" / "x.txt", real_root / "a" / "c" / "y.xml", real_root / "d.xml"}


def test_invalid_pattern_raises_before_walking(fixture_tree, opened_directories):
    with pytest.raises(PatternError):
        _ls("root/{1..5000}", fixture_tree)
    assert opened_directories == []


# --- pruning and the depth bound ---

def test_walk_never_goes_deeper_than_the_wildcard(tmp_path, make_tree, opened_directories):
    make_tree(tmp_path / "root", {"l1/f.txt": None, "l1/l2/l3/l4/f.txt": None})
    real_root = (tmp_path / "root").resolve()
    assert _ls("root/*/*.txt", tmp_path) == [real_root / "l1" / "f.txt"]
    assert set(opened_directories) == {real_root, real_root / "l1"}


def test_non_matching_directories_are_not_read(tmp_path, make_tree, opened_directories):
    make_tree(tmp_path / "root", {"a/b/x.txt": None, "a/c/y.txt": None, "z/w.txt": None})
    real_root = (tmp_path / "root").resolve()
    assert _ls("root/a*/b/*.txt", tmp_path) == [real_root / "a" / "b" / "x.txt"]
    assert real_root / "a" / "c" not in opened_directories
    assert real_root / "z" not in opened_directories


def test_recursive_pattern_prunes_before_the_globstar(tmp_path, make_tree, opened_directories):
    make_tree(tmp_path / "root", {"a/deep/x.txt": None, "z/deep/w.txt": None})
    real_root = (tmp_path / "root").resolve()
    assert _ls("root/{a,b}/**/*.txt", tmp_path) == [real_root / "a" / "deep" / "x.txt"]
    assert not any(real_root / "z" in (p, *p.parents) for p in opened_directories)


@pytest.mark.parametrize("pattern", [
    "**/*.txt",
    "a/**/*.py",
    "*/*/*.txt",
    "a/*/c/*",
    "{a,b}/**/[xy]*",
    "**/c/*.py",
])
def test_pruned_walk_finds_every_matching_file(tmp_path, make_tree, pattern):
    make_tree(tmp_path / "root", {
        "x.txt": None,
        "a/x.txt": None,
        "a/b/x.txt": None,
        "a/b/c/y.py": None,
        "a/q/c/x.py": None,
        "b/c/y.txt": None,
        "b/c/d/e/x.py": None,
        "z/c/w.py": None,
    })
    real_root = (tmp_path / "root").resolve()
    matcher = compile_glob(pattern)
    expected = set()
    for dirpath, _, filenames in os.walk(real_root):
        for name in filenames:
            full = Path(dirpath) / name
            if matcher.matches(full.relative_to(real_root)):
                expected.add(full)
    assert set(_ls(f"root/{pattern}", tmp_path)) == expected


# --- filters and visitors ---

def test_filter_callable_vetoes_matches(fixture_tree, real_root):
    result = _ls("root/**/*.xml", fixture_tree, file_filter=lambda path, attrs: path.name != "d.xml")
    assert result == [real_root / "a" / "c" / "y.xml"]


def test_filter_object_receives_attributes(fixture_tree, real_root):
    seen = []

    class OnlyFiles:
        def accept(self, path, attributes):
            seen.append(path)
            return attributes.is_regular_file

    assert _ls("root/*", fixture_tree, file_filter=OnlyFiles()) == [real_root / "d.xml"]
    # only wildcard matches reach the filter
    assert set(seen) == {real_root / "a", real_root / "d.xml"}


def test_filter_errors_propagate(fixture_tree):
    def broken(path, attributes):
        raise RuntimeError("filter blew up")

    with pytest.raises(RuntimeError, match="filter blew up"):
        _ls("root/*.xml", fixture_tree, file_filter=broken)


class _Collector(FileVisitor):
    def __init__(self, stop_after=None):
        self.files = []
        self.failed_dirs = []
        self.stop_after = stop_after

    def visit_file(self, path, attributes):
        self.files.append(path)
        if self.stop_after is not None and len(self.files) >= self.stop_after:
            return VisitResult.STOP
        return VisitResult.CONTINUE

    def post_visit_directory(self, directory, error):
        if error is not None:
            self.failed_dirs.append(directory)
        return VisitResult.CONTINUE


def test_walk_streams_matches_and_returns_base(fixture_tree, real_root):
    visitor = _Collector()
    assert walk("root/**/*.xml", visitor, cwd=str(fixture_tree)) == real_root
    assert set(visitor.files) == {real_root / "a" / "c" / "y.xml", real_root / "d.xml"}


def test_walk_requires_a_visitor(fixture_tree):
    with pytest.raises(ValueError):
        walk("root/*", None, cwd=str(fixture_tree))


def test_walk_on_file_target_visits_it_once(fixture_tree, real_root):
    visitor = _Collector()
    assert walk("root/d.xml", visitor, cwd=str(fixture_tree)) == real_root / "d.xml"
    assert visitor.files == [real_root / "d.xml"]


def test_visitor_stop_ends_the_walk(fixture_tree):
    visitor = _Collector(stop_after=1)
    collected = []
    walk_wildcard_path(split_path("root/**/*", cwd=str(fixture_tree)), visitor=visitor, collected=collected)
    assert len(visitor.files) == 1
    assert collected == visitor.files


def test_unreadable_directory_is_skipped_without_visitor(fixture_tree, real_root, monkeypatch):
    real_scandir = os.scandir

    def failing_scandir(path="."):
        if Path(path).name == "b":
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr("wildpath.core.discovery.file_tree.os.scandir", failing_scandir)
    assert set(_ls("root/**/*", fixture_tree)) == {real_root / "a" / "c" / "y.xml", real_root / "d.xml"}

    visitor = _Collector()
    walk("root/**/*", visitor, cwd=str(fixture_tree))
    assert visitor.failed_dirs == [real_root / "a" / "b"]


def test_resolve_base_dir_returns_real_path(fixture_tree, real_root):
    assert resolve_base_dir(split_path("root/a/../*.xml", cwd=str(fixture_tree))) == real_root


def test_unreadable_base_directory_is_a_resolution_error(fixture_tree, real_root, monkeypatch):
    real_scandir = os.scandir

    def failing_scandir(path="."):
        if Path(path) == real_root:
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr("wildpath.core.discovery.file_tree.os.scandir", failing_scandir)
    with pytest.raises(ResolutionError, match="cannot read base directory"):
        _ls("root/*.xml", fixture_tree)
    with pytest.raises(ResolutionError):
        walk("root/**/*", _Collector(), cwd=str(fixture_tree))


def test_globstar_inside_a_segment_stays_in_one_level(tmp_path, make_tree, opened_directories):
    make_tree(tmp_path / "root", {"b.txt": None, "bx/deep/f.txt": None, "c.txt": None})
    real_root = (tmp_path / "root").resolve()
    assert set(_ls("root/b**", tmp_path)) == {real_root / "b.txt", real_root / "bx"}
    assert set(opened_directories) == {real_root}


def test_library_use_writes_nothing_to_stdout(fixture_tree, capsys, monkeypatch):
    structlog.reset_defaults()
    monkeypatch.setattr(logging.getLogger("wildpath"), "handlers", [logging.NullHandler()])
    assert _ls("root/**/*.xml", fixture_tree)
    assert capsys.readouterr().out == ""


@symlinks_supported
class TestSymbolicLinks:
    def test_symlinked_base_is_resolved(self, fixture_tree, real_root):
        os.symlink(real_root, fixture_tree / "rootlink", target_is_directory=True)
        assert _ls("rootlink/*.xml", fixture_tree) == [real_root / "d.xml"]

    def test_links_below_base_are_followed_only_on_request(self, fixture_tree, real_root):
        os.symlink(real_root / "a" / "c", real_root / "link", target_is_directory=True)
        assert _ls("root/*/*.xml", fixture_tree) == []
        assert _ls("root/*/*.xml", fixture_tree, follow_symlinks=True) == [real_root / "link" / "y.xml"]

    def test_symlink_loop_does_not_hang(self, fixture_tree, real_root):
        os.symlink(real_root / "a", real_root / "a" / "loop", target_is_directory=True)
        result = set(_ls("root/**/*.txt", fixture_tree, follow_symlinks=True))
        assert result == {real_root / "a" / "b" / "x.txt"}

    def test_symlink_type_filter_sees_unfollowed_links(self, fixture_tree, real_root):
        os.symlink(real_root / "d.xml", real_root / "alias.xml")
        only_links = lambda path, attributes: attributes.is_symbolic_link
        assert _ls("root/*.xml", fixture_tree, file_filter=only_links) == [real_root / "alias.xml"]
