"""Executable location helpers.

Responsibilities:
- Ask the platform for the running binary's own path when it can tell us.
- Resolve an invocation name to an absolute, symlink-free executable path
  via the name itself or a `PATH` search.
- Report the containing directory as the anchor for prefix discovery.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
import sys
from typing import Callable, Protocol

from ..errors import SymlinkLoopError
from ..models.datatypes import ResolvedExecutable
from .buffer import POSIX, PathFlavor, absolutize, join_path, reduce_to_parent
from .probe import is_executable_file

DEFAULT_SYMLINK_HOP_LIMIT = 40


class SelfPathProvider(Protocol):
    """Platform capability returning the running executable's own path."""

    def executable_path(self) -> str | None:
        """Return the executable path, or `None` when the platform cannot tell."""


@dataclass(frozen=True, slots=True)
class ProcfsSelfPath:
    """Read the executable path from procfs self-reference links."""

    links: tuple[str, ...] = ("/proc/self/exe", "/proc/curproc/file")

    def executable_path(self) -> str | None:
        for link in self.links:
            try:
                return os.readlink(link)
            except OSError:
                continue
        return None


@dataclass(frozen=True, slots=True)
class StaticSelfPath:
    """Self-path provider returning a fixed value (`None` means unavailable)."""

    path: str | None = None

    def executable_path(self) -> str | None:
        return self.path


def default_self_path_provider() -> SelfPathProvider:
    """Return the self-path provider for the running platform."""

    if sys.platform.startswith("win"):
        return StaticSelfPath()
    return ProcfsSelfPath()


def resolve_program_name(argv0: str, provider: SelfPathProvider) -> str:
    """Return the platform's own executable path, falling back to `argv0`."""

    resolved = provider.executable_path()
    if resolved:
        return resolved
    return argv0


def _readlink_or_none(path: str) -> str | None:
    """Return the target of symlink `path`, or `None` when it is not a link."""

    try:
        return os.readlink(path)
    except (OSError, ValueError):
        return None


class ExecutableLocator:
    """Resolve an invocation name to the executable's canonical directory."""

    def __init__(
        self,
        flavor: PathFlavor = POSIX,
        *,
        getcwd: Callable[[], str] = os.getcwd,
        readlink: Callable[[str], str | None] = _readlink_or_none,
        is_executable: Callable[[str], bool] = is_executable_file,
        hop_limit: int = DEFAULT_SYMLINK_HOP_LIMIT,
    ) -> None:
        """Initialize the locator with its filesystem collaborators."""

        self._flavor = flavor
        self._getcwd = getcwd
        self._readlink = readlink
        self._is_executable = is_executable
        self._hop_limit = hop_limit

    def locate(self, program: str, search_path: str | None) -> ResolvedExecutable:
        """Locate the executable for `program`.

        A program name containing a separator is used as a path directly;
        otherwise each `search_path` entry is tried left to right. When no
        candidate is found the result has an empty path and directory.

        Raises:
            SymlinkLoopError: If symlink resolution exceeds the hop limit.
        """

        candidate = self._candidate_path(program, search_path)
        if not candidate:
            return ResolvedExecutable(program=program, path="", directory="")

        if not self._flavor.is_absolute(candidate):
            candidate = absolutize(candidate, self._flavor, self._getcwd)
        resolved = self.resolve_symlinks(candidate)
        return ResolvedExecutable(
            program=program,
            path=resolved,
            directory=reduce_to_parent(resolved, self._flavor),
        )

    def search(self, program: str, search_path: str) -> str:
        """Return the first executable `program` on `search_path`, or `""`."""

        for entry in search_path.split(self._flavor.delim):
            candidate = join_path(entry[: self._flavor.max_length], program, self._flavor)
            if self._is_executable(candidate):
                return candidate
        return ""

    def resolve_symlinks(self, path: str) -> str:
        """Follow `path` through symlinks until it names a non-link.

        Absolute targets replace the path; relative targets are joined onto
        the parent of the current link.
        """

        current = path
        hops = 0
        target = self._readlink(current)
        while target is not None:
            hops += 1
            if hops > self._hop_limit:
                raise SymlinkLoopError(path=current, hop_limit=self._hop_limit)
            if self._flavor.is_absolute(target):
                current = target[: self._flavor.max_length]
            else:
                current = join_path(reduce_to_parent(current, self._flavor), target, self._flavor)
            target = self._readlink(current)
        return current

    def _candidate_path(self, program: str, search_path: str | None) -> str:
        """Return the unresolved executable path for `program`."""

        if not program:
            return ""
        if self._flavor.sep in program:
            return program[: self._flavor.max_length]
        if search_path is None:
            return ""
        return self.search(program, search_path)
