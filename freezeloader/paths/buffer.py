"""Bounded, separator-aware path string operations.

Responsibilities:
- Join path components with exactly one separator under a hard length bound.
- Strip the final separator-delimited segment for upward directory walks.
- Convert relative paths to absolute ones against the working directory.

Key types:
- `PathFlavor`: separator, list delimiter and maximum length of one platform.
- `PathBuffer`: mutable path value whose operations keep the length bound.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Callable

from ..errors import PathContractError

DEFAULT_MAX_PATH_LENGTH = 4096


@dataclass(frozen=True, slots=True)
class PathFlavor:
    """Path syntax of one platform.

    Attributes:
        sep: Directory separator.
        delim: Search-path list delimiter.
        max_length: Longest path any operation may produce.
    """

    sep: str = "/"
    delim: str = ":"
    max_length: int = DEFAULT_MAX_PATH_LENGTH

    @classmethod
    def native(cls, max_length: int = DEFAULT_MAX_PATH_LENGTH) -> PathFlavor:
        """Return the flavor of the running platform."""

        return cls(sep=os.sep, delim=os.pathsep, max_length=max_length)

    def is_absolute(self, path: str) -> bool:
        """Return whether `path` starts at the filesystem root."""

        return path.startswith(self.sep)


POSIX = PathFlavor()


def join_path(base: str, component: str, flavor: PathFlavor = POSIX) -> str:
    """Join `component` onto `base`.

    An absolute component replaces the base. Otherwise exactly one separator
    is inserted. The component is truncated so the result never exceeds
    `flavor.max_length`.

    Raises:
        PathContractError: If `base` alone is already longer than the limit.
    """

    if flavor.is_absolute(component):
        head = ""
    else:
        head = base
        if head and not head.endswith(flavor.sep) and len(head) < flavor.max_length:
            head += flavor.sep
    if len(head) > flavor.max_length:
        raise PathContractError(
            operation="join",
            path=base,
            detail=f"base exceeds {flavor.max_length} characters",
        )
    room = flavor.max_length - len(head)
    return head + component[:room]


def reduce_to_parent(path: str, flavor: PathFlavor = POSIX) -> str:
    """Strip the last separator-delimited segment of `path`.

    `"/a/b/c"` becomes `"/a/b"` and `"/a"` becomes `""`.

    Raises:
        PathContractError: If `path` contains no separator.
    """

    index = path.rfind(flavor.sep)
    if index < 0:
        raise PathContractError(
            operation="reduce_to_parent",
            path=path,
            detail="path contains no separator",
        )
    return path[:index]


def strip_segments(path: str, count: int, flavor: PathFlavor = POSIX) -> str:
    """Reduce `path` by up to `count` segments, collapsing to the root separator.

    A path that runs out of separators collapses to the root instead of
    violating the `reduce_to_parent` precondition.
    """

    reduced = path
    for _ in range(count):
        if flavor.sep not in reduced:
            reduced = ""
            break
        reduced = reduce_to_parent(reduced, flavor)
    return reduced or flavor.sep


def absolutize(
    path: str,
    flavor: PathFlavor = POSIX,
    getcwd: Callable[[], str] = os.getcwd,
) -> str:
    """Return `path` made absolute against the working directory.

    A leading `./` is dropped before joining.

    Raises:
        PathContractError: If the working directory cannot be determined.
    """

    if flavor.is_absolute(path):
        return path
    try:
        cwd = getcwd()[: flavor.max_length]
    except OSError as exc:
        raise PathContractError(
            operation="absolutize",
            path=path,
            detail=f"working directory is unavailable: {exc.strerror or exc}",
        ) from exc
    relative = path
    if relative.startswith("." + flavor.sep):
        relative = relative[2:]
    return join_path(cwd, relative, flavor)


class PathBuffer:
    """Mutable, length-bounded path value used by the upward directory walks."""

    __slots__ = ("_value", "flavor")

    def __init__(self, value: str = "", flavor: PathFlavor = POSIX) -> None:
        """Initialize the buffer, truncating `value` to the flavor's limit."""

        self.flavor = flavor
        self._value = value[: flavor.max_length]

    @property
    def value(self) -> str:
        """Return the current path text."""

        return self._value

    def join(self, component: str) -> PathBuffer:
        """Join `component` in place and return the buffer."""

        self._value = join_path(self._value, component, self.flavor)
        return self

    def reduce(self) -> PathBuffer:
        """Strip the final segment in place and return the buffer."""

        self._value = reduce_to_parent(self._value, self.flavor)
        return self

    def absolutize(self, getcwd: Callable[[], str] = os.getcwd) -> PathBuffer:
        """Make the path absolute in place and return the buffer."""

        self._value = absolutize(self._value, self.flavor, getcwd)
        return self

    def copy(self) -> PathBuffer:
        """Return an independent buffer holding the same path."""

        return PathBuffer(self._value, self.flavor)

    def __str__(self) -> str:
        return self._value

    def __len__(self) -> int:
        return len(self._value)

    def __bool__(self) -> bool:
        return bool(self._value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PathBuffer):
            return self._value == other._value and self.flavor == other.flavor
        if isinstance(other, str):
            return self._value == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"PathBuffer({self._value!r})"
