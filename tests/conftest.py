import logging
from pathlib import PurePosixPath

import pytest

import projview


class MemoryFileSystem:
    """In-memory stand-in for projview.LocalFileSystem."""

    def __init__(self, root, files=(), dirs=(), unreadable=(), contents=None):
        self.root = PurePosixPath(root)
        self.files = {self.root / f for f in files}
        self.dirs = {self.root} | {self.root / d for d in dirs}
        for f in list(self.files) + list(self.dirs):
            self.dirs.update(p for p in f.parents if self.root in p.parents or p == self.root)
        self.unreadable = {self.root / d for d in unreadable}
        self.contents = {self.root / k: v for k, v in (contents or {}).items()}
        self.files.update(self.contents)
        self.listed = []

    def list_names(self, path):
        path = PurePosixPath(path)
        self.listed.append(path)
        if path in self.unreadable:
            raise PermissionError(13, "Permission denied", str(path))
        if path not in self.dirs:
            raise FileNotFoundError(2, "No such file or directory", str(path))
        return [p.name for p in self.files | self.dirs if p.parent == path and p != path]

    def is_file(self, path):
        return PurePosixPath(path) in self.files

    def is_dir(self, path):
        return PurePosixPath(path) in self.dirs

    def read_text(self, path):
        return self.contents[PurePosixPath(path)]


@pytest.fixture
def make_fs():
    def _make(files=(), dirs=(), unreadable=(), contents=None, root="/work/proj"):
        return MemoryFileSystem(root, files, dirs, unreadable, contents)
    return _make


@pytest.fixture
def sample_fs(make_fs):
    # proj/ with b.txt, a.txt and sub/c.txt
    return make_fs(files=["b.txt", "a.txt", "sub/c.txt"])


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    for handler in list(projview.logger.handlers):
        projview.logger.removeHandler(handler)
    projview.logger.setLevel(logging.NOTSET)
