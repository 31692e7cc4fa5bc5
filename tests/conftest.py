import os
from pathlib import Path

import pytest

from wildpath.core.discovery.visitor import FileVisitor, VisitResult


def create_project_structure(base_path: Path, files_to_create: dict):
    """
    Creates a directory structure with files.
    files_to_create = {"dir/file.py": "content", "another.txt": "text"}
    """
    for rel_path, content in files_to_create.items():
        file_path = base_path / rel_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content if content is not None else f"content of {rel_path}")


@pytest.fixture
def fixture_tree(tmp_path: Path) -> Path:
    """The root/a/b/x.txt, root/a/c/y.xml, root/d.xml tree; returns tmp_path."""
    create_project_structure(tmp_path / "root", {
        "a/b/x.txt": "x",
        "a/c/y.xml": "<y/>",
        "d.xml": "<d/>",
    })
    return tmp_path


@pytest.fixture
def real_root(fixture_tree: Path) -> Path:
    return (fixture_tree / "root").resolve()


class RecordingVisitor(FileVisitor):
    """Records every hook call as (event, path) and answers from a script."""

    def __init__(self, answers=None):
        self.events = []
        self.answers = answers or {}

    def _answer(self, event, path):
        self.events.append((event, path))
        return self.answers.get((event, Path(path).name), VisitResult.CONTINUE)

    def pre_visit_directory(self, directory, attributes):
        return self._answer("pre", directory)

    def visit_file(self, path, attributes):
        return self._answer("file", path)

    def post_visit_directory(self, directory, error):
        self.events.append(("post", directory))
        if error is not None:
            self.events.append(("post_error", directory))
        return VisitResult.CONTINUE

    def visit_file_failed(self, path, error):
        self.events.append(("failed", path))
        self.events.append(("failed_type", type(error).__name__))
        return VisitResult.CONTINUE

    def paths(self, event):
        return [p for e, p in self.events if e == event]


@pytest.fixture
def recording_visitor():
    return RecordingVisitor


@pytest.fixture
def opened_directories(monkeypatch):
    """Records every directory the tree walker lists."""
    opened = []
    real_scandir = os.scandir

    def recording_scandir(path="."):
        opened.append(Path(path))
        return real_scandir(path)

    monkeypatch.setattr("wildpath.core.discovery.file_tree.os.scandir", recording_scandir)
    return opened


@pytest.fixture
def make_tree():
    return create_project_structure
