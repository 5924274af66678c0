"""Filesystem landmark predicates.

All checks use `os.stat` metadata only and never open file contents. Paths that
do not exist, or cannot be stat'ed at all, are reported as `False`.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
import stat


def _stat_mode(path: str) -> int | None:
    """Return the `st_mode` of `path`, or `None` when it cannot be stat'ed."""

    if not path:
        return None
    try:
        return os.stat(path).st_mode
    except (OSError, ValueError):
        return None


def is_regular_file(path: str) -> bool:
    """Return whether `path` is a regular file (not a directory)."""

    mode = _stat_mode(path)
    return mode is not None and stat.S_ISREG(mode)


def is_directory(path: str) -> bool:
    """Return whether `path` is a directory."""

    mode = _stat_mode(path)
    return mode is not None and stat.S_ISDIR(mode)


def is_executable_file(path: str) -> bool:
    """Return whether `path` is a regular file with any execute bit set."""

    mode = _stat_mode(path)
    if mode is None or not stat.S_ISREG(mode):
        return False
    return bool(mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))


def compiled_suffix(optimize: bool) -> str:
    """Return the suffix appended to a landmark to find its compiled variant."""

    return "o" if optimize else "c"


def is_module_landmark(path: str, optimize: bool = False) -> bool:
    """Return whether `path`, or its compiled variant, is a regular file."""

    if is_regular_file(path):
        return True
    return is_regular_file(path + compiled_suffix(optimize))


@dataclass(frozen=True, slots=True)
class LandmarkProbe:
    """Landmark predicates bound to one optimize setting."""

    optimize: bool = False

    def is_file(self, path: str) -> bool:
        return is_regular_file(path)

    def is_dir(self, path: str) -> bool:
        return is_directory(path)

    def is_executable(self, path: str) -> bool:
        return is_executable_file(path)

    def is_module(self, path: str) -> bool:
        return is_module_landmark(path, self.optimize)
