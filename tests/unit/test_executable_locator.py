"""Unit tests for executable location, PATH search and symlink resolution."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from freezeloader.errors import SymlinkLoopError
from freezeloader.paths.locator import (
    ExecutableLocator,
    ProcfsSelfPath,
    StaticSelfPath,
    resolve_program_name,
)
from tests.fixture_paths import make_file


def test_locate_relative_path_is_absolutized(tmp_path: Path) -> None:
    """A program name with a separator should be used directly and made absolute."""

    make_file(tmp_path / "bin" / "app", executable=True)
    locator = ExecutableLocator(getcwd=lambda: str(tmp_path))

    resolved = locator.locate("./bin/app", None)

    assert resolved.path == f"{tmp_path}/bin/app"
    assert resolved.directory == f"{tmp_path}/bin"
    assert resolved.found


def test_locate_searches_path_for_first_executable(tmp_path: Path) -> None:
    """PATH search should skip non-executable candidates and take the first match."""

    not_runnable = tmp_path / "first"
    runnable = tmp_path / "second"
    later = tmp_path / "third"
    make_file(not_runnable / "app", executable=False)
    make_file(runnable / "app", executable=True)
    make_file(later / "app", executable=True)
    locator = ExecutableLocator()

    search_path = os.pathsep.join([str(not_runnable), str(runnable), str(later)])
    resolved = locator.locate("app", search_path)

    assert resolved.path == str(runnable / "app")
    assert resolved.directory == str(runnable)


def test_locate_returns_empty_result_when_nothing_matches(tmp_path: Path) -> None:
    """A bare name not on PATH should yield an empty path and directory."""

    locator = ExecutableLocator()

    on_path = locator.locate("app", str(tmp_path))
    without_path = locator.locate("app", None)

    assert on_path.path == ""
    assert on_path.directory == ""
    assert not on_path.found
    assert without_path.directory == ""


def test_locate_follows_three_link_chain_to_absolute_target(tmp_path: Path) -> None:
    """A chain of relative links ending in an absolute link should resolve to its target."""

    real = make_file(tmp_path / "real" / "app", executable=True)
    links = tmp_path / "links"
    links.mkdir()
    (links / "link3").symlink_to(real)
    (links / "link2").symlink_to("link3")
    (links / "link1").symlink_to("link2")
    locator = ExecutableLocator()

    resolved = locator.locate(str(links / "link1"), None)

    assert resolved.path == str(real)
    assert resolved.directory == str(real.parent)


def test_locate_joins_relative_link_onto_link_parent(tmp_path: Path) -> None:
    """A relative link target should be interpreted against the link's directory."""

    real = make_file(tmp_path / "b" / "app", executable=True)
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "app").symlink_to(Path("..") / "b" / "app")
    locator = ExecutableLocator()

    resolved = locator.locate(str(tmp_path / "a" / "app"), None)

    assert resolved.path == f"{tmp_path}/a/../b/app"
    assert Path(resolved.path).resolve() == real.resolve()


def test_locate_reports_symlink_cycle(tmp_path: Path) -> None:
    """A cyclic link chain should raise instead of looping forever."""

    (tmp_path / "loop_a").symlink_to("loop_b")
    (tmp_path / "loop_b").symlink_to("loop_a")
    locator = ExecutableLocator(hop_limit=5)

    with pytest.raises(SymlinkLoopError) as exc_info:
        locator.locate(str(tmp_path / "loop_a"), None)

    assert exc_info.value.hop_limit == 5
    assert exc_info.value.stage == "locate"


def test_locate_with_injected_readlink_replaces_path_on_absolute_target() -> None:
    """Absolute link targets should replace the current path outright."""

    links = {"/usr/bin/app": "/opt/app/bin/app"}
    locator = ExecutableLocator(readlink=links.get)

    resolved = locator.locate("/usr/bin/app", None)

    assert resolved.path == "/opt/app/bin/app"
    assert resolved.directory == "/opt/app/bin"


def test_resolve_program_name_prefers_platform_self_path() -> None:
    """The platform self path should win, falling back to argv0 when unavailable."""

    assert resolve_program_name("app", StaticSelfPath("/opt/app/bin/app")) == "/opt/app/bin/app"
    assert resolve_program_name("app", StaticSelfPath(None)) == "app"


def test_procfs_self_path_reads_first_available_link(tmp_path: Path) -> None:
    """Procfs provider should try each link in order and return `None` when all fail."""

    target = make_file(tmp_path / "real-app", executable=True)
    link = tmp_path / "self-exe"
    link.symlink_to(target)

    provider = ProcfsSelfPath(links=(str(tmp_path / "missing"), str(link)))
    unavailable = ProcfsSelfPath(links=(str(tmp_path / "missing"),))

    assert provider.executable_path() == str(target)
    assert unavailable.executable_path() is None
