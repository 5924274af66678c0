"""Unit tests for bounded path joining, reduction and absolutization."""

from __future__ import annotations

import pytest

from freezeloader.errors import PathContractError
from freezeloader.paths.buffer import (
    PathBuffer,
    PathFlavor,
    absolutize,
    join_path,
    reduce_to_parent,
    strip_segments,
)


def test_join_path_inserts_exactly_one_separator() -> None:
    """Join should add a separator only when the base does not already end with one."""

    assert join_path("/a", "b") == "/a/b"
    assert join_path("/a/", "b") == "/a/b"
    assert join_path("", "b") == "b"
    assert join_path("/a", "b/c") == "/a/b/c"


def test_join_path_absolute_component_replaces_base_idempotently() -> None:
    """An absolute component should replace the base, so repeated joins are stable."""

    assert join_path("/base/dir", "/x") == "/x"
    assert join_path(join_path("/base", "/x"), "/x") == "/x"


def test_join_path_truncates_component_to_maximum_length() -> None:
    """Join should truncate the component deterministically at the length bound."""

    flavor = PathFlavor(max_length=10)

    joined = join_path("/abc", "defghijkl", flavor)

    assert joined == "/abc/defgh"
    assert len(joined) == 10


def test_join_path_rejects_base_longer_than_maximum() -> None:
    """A base that already exceeds the bound is a contract violation."""

    with pytest.raises(PathContractError, match="exceeds 10 characters"):
        join_path("/" + "a" * 12, "b", PathFlavor(max_length=10))


def test_reduce_to_parent_strips_last_segment() -> None:
    """Reduction should strip exactly one trailing segment."""

    assert reduce_to_parent("/a/b/c") == "/a/b"
    assert reduce_to_parent("/a") == ""
    assert reduce_to_parent("/a/b/") == "/a/b"


def test_reduce_to_parent_fails_fast_without_separator() -> None:
    """Reducing a path with no separator must fail instead of returning the input."""

    with pytest.raises(PathContractError, match="no separator"):
        reduce_to_parent("relative")


def test_strip_segments_collapses_to_root_separator() -> None:
    """Canonical reduction should yield the root separator instead of an empty path."""

    assert strip_segments("/opt/app/rt/lib", 2) == "/opt/app"
    assert strip_segments("/lib/python2.1", 2) == "/"
    assert strip_segments("lib/python2.1", 2) == "/"


def test_absolutize_uses_working_directory_and_drops_dot_slash() -> None:
    """Relative paths should be joined onto the working directory without `./`."""

    def getcwd() -> str:
        return "/work"

    assert absolutize("./bin/app", getcwd=getcwd) == "/work/bin/app"
    assert absolutize("bin/app", getcwd=getcwd) == "/work/bin/app"
    assert absolutize("/already/absolute", getcwd=getcwd) == "/already/absolute"


def test_path_buffer_operations_mutate_in_place() -> None:
    """Buffer operations should chain and leave copies untouched."""

    buffer = PathBuffer("/opt/app")
    snapshot = buffer.copy()

    buffer.join("rt").join("lib").reduce()

    assert buffer == "/opt/app/rt"
    assert snapshot == "/opt/app"
    assert str(buffer) == "/opt/app/rt"
    assert len(buffer) == len("/opt/app/rt")


def test_path_buffer_walk_terminates_on_empty_string() -> None:
    """Repeated reduction of an absolute path should end at the empty string."""

    buffer = PathBuffer("/a/b")
    visited: list[str] = []
    while buffer:
        visited.append(buffer.value)
        buffer.reduce()

    assert visited == ["/a/b", "/a"]


def test_windows_flavor_uses_its_own_separator() -> None:
    """Path operations should follow the flavor's separator."""

    flavor = PathFlavor(sep="\\", delim=";")

    assert join_path("C:\\app", "lib", flavor) == "C:\\app\\lib"
    assert reduce_to_parent("C:\\app\\lib", flavor) == "C:\\app"


def test_absolutize_reports_unavailable_working_directory() -> None:
    """A working directory that no longer exists should be a contract error, not an OSError."""

    def getcwd() -> str:
        raise FileNotFoundError(2, "No such file or directory")

    with pytest.raises(PathContractError, match="working directory is unavailable") as exc_info:
        absolutize("bin/app", getcwd=getcwd)

    assert exc_info.value.operation == "absolutize"
    assert absolutize("/abs/app", getcwd=getcwd) == "/abs/app"
