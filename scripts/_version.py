"""
Single source of truth for the projview version.

A VERSION file at the checkout root wins; an installed copy falls back to
its distribution metadata.
"""
from __future__ import annotations

from importlib import metadata
from pathlib import Path

DIST_NAME = "projview"


def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def read_version(default: str = "0.0.0") -> str:
    p = repo_root() / "VERSION"
    try:
        v = p.read_text(encoding="utf-8").strip()
        if v:
            return v
    except OSError:
        pass
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return default


__version__ = read_version()
