#!/usr/bin/env python3
"""
projview.py — write a textual overview of a project's directory structure.

The tree is written to proj_structure.txt in the project root and then echoed
to stdout. Paths listed in .overviewignore are left out; the file is created
on first run (with Git defaults) and the user may add more patterns then.

Defaults:
  - Root is current directory (.)
  - Files are listed before subdirectories at every level
  - Unicode line drawing

Options:
  -V, --version      Show version and exit
  --no-setup         Never prompt; a missing .overviewignore means "no extra patterns"
  --quiet            Write proj_structure.txt but do not echo it
  -v, --verbose      Debug logging on stderr

Pattern rules (.overviewignore):
  - One pattern per line; blank lines and lines starting with # are skipped
  - A pattern is a path relative to the project root, matched literally
    (case-sensitive, no globs). It matches itself and everything below it:
        build        -> build, build/a.o, build/x/y
        docs/old.md  -> docs/old.md only
  - Absolute paths are rejected with a warning.
  - .overviewignore itself is always ignored.

Known limitation: symlinked directories are followed, and a symlink loop
will recurse until the OS path limit is hit.
"""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import _version

IGNORE_FILENAME = ".overviewignore"
OUTPUT_FILENAME = "proj_structure.txt"
DEFAULT_PATTERNS: Tuple[str, ...] = (".git", ".gitignore")

_DEFAULT_IGNORE_HEADER = "# Ignore Git folders and files"
_ABSOLUTE_RE = re.compile(r"^(?:[/\\]|[A-Za-z]:[/\\])")

logger = logging.getLogger("projview")


def setup_logger(verbose: bool = False) -> logging.Logger:
    """Configure the projview logger once; diagnostics go to stderr."""
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger


def _glyphs() -> dict:
    return {"tee": "├── ", "vert": "│   ", "sep": "│"}


class LocalFileSystem:
    """The slice of the real filesystem the walker and pattern loader need."""

    def list_names(self, path: Path) -> List[str]:
        return os.listdir(path)

    def is_file(self, path: Path) -> bool:
        return os.path.isfile(path)

    def is_dir(self, path: Path) -> bool:
        return os.path.isdir(path)

    def read_text(self, path: Path) -> str:
        return Path(path).read_text(encoding="utf-8", errors="replace")


LOCAL_FS = LocalFileSystem()


# ------------------------------------------------------------------------------
# Patterns
# ------------------------------------------------------------------------------

@dataclass(frozen=True)
class PatternSet:
    patterns: Tuple[str, ...] = (IGNORE_FILENAME,)

    def __iter__(self):
        return iter(self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)

    def matches(self, rel_path: str) -> bool:
        return is_ignored(rel_path, self)


def is_ignored(rel_path: str, patterns: Iterable[str]) -> bool:
    """True if rel_path is a pattern or lies below one (literal, case-sensitive)."""
    for pattern in patterns:
        if rel_path == pattern or rel_path.startswith(pattern + "/"):
            return True
    return False


def _is_absolute_pattern(pattern: str) -> bool:
    return bool(_ABSOLUTE_RE.match(pattern))


def parse_patterns(text: str) -> List[str]:
    out: List[str] = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if _is_absolute_pattern(line):
            logger.warning("Ignoring absolute pattern '%s' in %s; patterns are relative to the project root",
                           line, IGNORE_FILENAME)
            continue
        out.append(line)
    return out


def load_patterns(root: Path, fs: LocalFileSystem = LOCAL_FS) -> PatternSet:
    ignore_path = Path(root) / IGNORE_FILENAME
    seed = [IGNORE_FILENAME]
    if not fs.is_file(ignore_path):
        logger.debug("No %s at %s; using built-in patterns only", IGNORE_FILENAME, ignore_path)
        return PatternSet(tuple(seed))
    try:
        text = fs.read_text(ignore_path)
    except OSError as e:
        logger.warning("Could not read %s: %s", ignore_path, e)
        return PatternSet(tuple(seed))

    patterns = seed + parse_patterns(text)
    logger.debug("Loaded %d pattern(s) from %s", len(patterns) - 1, ignore_path)
    return PatternSet(tuple(patterns))


# ------------------------------------------------------------------------------
# Setup prompt
# ------------------------------------------------------------------------------

def _read_line(prompt: str = "") -> Optional[str]:
    try:
        return input(prompt).strip()
    except EOFError:
        return None


def create_overviewignore(root: Path) -> Path:
    """
    Create .overviewignore with the Git defaults, then offer to append more
    patterns, one per line, until an empty line.
    """
    ignore_path = Path(root) / IGNORE_FILENAME
    body = [_DEFAULT_IGNORE_HEADER, *DEFAULT_PATTERNS]
    ignore_path.write_text("\n".join(body) + "\n", encoding="utf-8")
    print(f"{IGNORE_FILENAME} has been created at {ignore_path} with prefilled Git ignore patterns.")

    while True:
        answer = _read_line(f"Would you like to add more patterns to {IGNORE_FILENAME}? (y/n): ")
        if answer is None or answer[:1] in ("N", "n"):
            print(f"No additional patterns added to {IGNORE_FILENAME}.")
            break
        if answer[:1] in ("Y", "y"):
            print("Enter additional patterns to ignore (press Enter on an empty line to finish):")
            with ignore_path.open("a", encoding="utf-8") as f:
                while True:
                    pattern = _read_line()
                    if not pattern:
                        break
                    f.write(pattern + "\n")
            break
        print("Please answer y or n.")

    return ignore_path


# ------------------------------------------------------------------------------
# Tree
# ------------------------------------------------------------------------------

def _child_rel(rel: str, name: str) -> str:
    return f"{rel}/{name}" if rel else name


def walk(
    directory: Path,
    indent: str = "",
    patterns: Iterable[str] = PatternSet(),
    fs: LocalFileSystem = LOCAL_FS,
    rel: str = "",
) -> List[str]:
    """
    Render the contents of directory, files first then subdirectories, each
    group sorted by name. rel is directory's path relative to the project root.
    """
    lines: List[str] = []
    g = _glyphs()

    try:
        names = sorted(fs.list_names(directory))
    except OSError as e:
        logger.debug("Skipping unreadable directory %s: %s", directory, e)
        return lines

    for name in names:
        if is_ignored(_child_rel(rel, name), patterns):
            continue
        if fs.is_file(directory / name):
            lines.append(indent + g["tee"] + name)

    for name in names:
        child_rel = _child_rel(rel, name)
        if is_ignored(child_rel, patterns):
            continue
        child = directory / name
        if fs.is_dir(child):
            lines.append(indent + g["tee"] + name + "/")
            lines.extend(walk(child, indent + g["vert"], patterns, fs, child_rel))

    return lines


def build_tree(root: Path, patterns: PatternSet, fs: LocalFileSystem = LOCAL_FS) -> List[str]:
    g = _glyphs()
    # "." has no name until resolved
    name = root.resolve().name if isinstance(root, Path) else root.name
    out: List[str] = [f"{name or root}/", g["sep"]]
    out.extend(walk(root, "", patterns, fs))
    return out


def render(lines: Sequence[str]) -> str:
    return "".join(line + "\n" for line in lines)


def write_artifact(path: Path, lines: Sequence[str]) -> Path:
    path = Path(path)
    with path.open("w", encoding="utf-8", errors="replace", newline="\n") as f:
        f.write(render(lines))
    return path


def echo_artifact(path: Path) -> None:
    sys.stdout.write(Path(path).read_text(encoding="utf-8", errors="replace"))
    sys.stdout.flush()


# ------------------------------------------------------------------------------
# CLI
# ------------------------------------------------------------------------------

@dataclass(frozen=True)
class Options:
    root: Path
    setup: bool = True
    echo: bool = True
    verbose: bool = False

    @property
    def ignore_path(self) -> Path:
        return self.root / IGNORE_FILENAME

    @property
    def output_path(self) -> Path:
        return self.root / OUTPUT_FILENAME


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    if argv is None:
        argv = sys.argv[1:]

    ap = argparse.ArgumentParser(
        prog="projview",
        formatter_class=argparse.RawTextHelpFormatter,
        description=f"Write the project tree to {OUTPUT_FILENAME}, honoring {IGNORE_FILENAME}.",
    )
    ap.add_argument("path", nargs="?", default=".", help="Project root (default: current directory)")
    ap.add_argument("-V", "--version", action="store_true", help="Show version and exit")
    ap.add_argument("--no-setup", dest="setup", action="store_false",
                    help=f"Do not prompt to create {IGNORE_FILENAME} when it is missing")
    ap.add_argument("--quiet", dest="echo", action="store_false",
                    help=f"Do not echo {OUTPUT_FILENAME} to stdout")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    return ap.parse_args(argv)


def run(opt: Options, fs: LocalFileSystem = LOCAL_FS) -> Path:
    """One full pass: setup if needed, load patterns, write the tree, echo it."""
    if opt.setup and not opt.ignore_path.exists():
        create_overviewignore(opt.root)

    patterns = load_patterns(opt.root, fs)

    # The artifact exists before the walk so it is listed like any other file.
    out_path = opt.output_path
    out_path.open("w", encoding="utf-8").close()

    lines = build_tree(opt.root, patterns, fs)
    write_artifact(out_path, lines)
    logger.debug("Wrote %d line(s) to %s", len(lines), out_path)

    if opt.echo:
        echo_artifact(out_path)
    return out_path


def main(argv: Optional[List[str]] = None) -> int:
    ns = parse_args(argv)

    if ns.version:
        print(_version.__version__)
        return 0

    opt = Options(
        root=Path(ns.path),
        setup=bool(ns.setup),
        echo=bool(ns.echo),
        verbose=bool(ns.verbose),
    )
    setup_logger(opt.verbose)

    if not opt.root.is_dir():
        print(f"Not a directory: {opt.root}", file=sys.stderr)
        return 1

    try:
        run(opt)
    except OSError as e:
        print(f"Failed to write {e.filename or opt.output_path}: {e.strerror or e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
