"""Unit tests for prefix and exec-prefix discovery."""

from __future__ import annotations

from dataclasses import replace
import io
from pathlib import Path

from freezeloader.config import LoaderConfig
from freezeloader.models.datatypes import DiscoveryOutcome
from freezeloader.paths.prefix import PrefixResolver, split_home
from freezeloader.telemetry.logger import BootLogger
from tests.fixture_paths import LANDMARK, make_file, make_installed_tree


def test_upward_walk_finds_nearest_installed_tree(
    tmp_path: Path, tree_config: LoaderConfig
) -> None:
    """The walk should stop at the nearest ancestor holding the library landmark."""

    make_installed_tree(tmp_path)
    inner = make_installed_tree(tmp_path / "outer" / "inner")
    make_file(tmp_path / LANDMARK, "unrelated")
    make_file(inner / "bin" / LANDMARK, "unrelated")
    resolver = PrefixResolver(tree_config)

    resolution = resolver.resolve(str(inner / "bin"))

    assert resolution.prefix_outcome is DiscoveryOutcome.FOUND_INSTALLED
    assert resolution.library_dir == f"{inner}/rt/lib"
    assert resolution.prefix == str(inner)
    assert resolution.exec_prefix_outcome is DiscoveryOutcome.FOUND_INSTALLED
    assert resolution.dynload_dir == f"{inner}/rt/lib/lib-dynload"
    assert resolution.exec_prefix == str(inner)


def test_walk_accepts_compiled_landmark_variant(
    tmp_path: Path, tree_config: LoaderConfig
) -> None:
    """Only the compiled landmark variant for the optimize mode should count."""

    make_file(tmp_path / "app" / "rt" / "lib" / f"{LANDMARK}o")
    resolver = PrefixResolver(tree_config)
    optimized_resolver = PrefixResolver(replace(tree_config, optimize=True))

    plain = resolver.search_for_prefix(str(tmp_path / "app" / "bin"), None)
    optimized = optimized_resolver.search_for_prefix(str(tmp_path / "app" / "bin"), None)

    assert plain.outcome is DiscoveryOutcome.NOT_FOUND
    assert optimized.outcome is DiscoveryOutcome.FOUND_INSTALLED
    assert optimized.path == f"{tmp_path}/app/rt/lib/{LANDMARK}"


def test_home_override_is_trusted_without_filesystem_checks(
    tmp_path: Path, tree_config: LoaderConfig
) -> None:
    """An explicit runtime home should win even when the walk would find a tree."""

    make_installed_tree(tmp_path / "app")
    resolver = PrefixResolver(tree_config)

    resolution = resolver.resolve(str(tmp_path / "app" / "bin"), "/nonexistent/home")

    assert resolution.prefix_outcome is DiscoveryOutcome.FOUND_INSTALLED
    assert resolution.prefix == "/nonexistent/home"
    assert resolution.library_dir == "/nonexistent/home/rt/lib"
    assert resolution.exec_prefix == "/nonexistent/home"
    assert resolution.dynload_dir == "/nonexistent/home/rt/lib/lib-dynload"


def test_home_override_splits_prefix_and_exec_prefix(tree_config: LoaderConfig) -> None:
    """A delimited runtime home should give separate prefix and exec-prefix roots."""

    resolver = PrefixResolver(tree_config)

    resolution = resolver.resolve("", "/p:/e")

    assert resolution.prefix == "/p"
    assert resolution.exec_prefix == "/e"
    assert resolution.dynload_dir == "/e/rt/lib/lib-dynload"
    assert split_home("/p:/e", ":") == ("/p", "/e")
    assert split_home("/only", ":") == ("/only", "/only")


def test_build_tree_is_detected_and_left_unreduced(
    tmp_path: Path, tree_config: LoaderConfig
) -> None:
    """A build-system marker should yield raw build-tree paths and default roots."""

    build = tmp_path / "build"
    make_file(build / "Modules" / "Setup")
    make_file(build / "Lib" / LANDMARK)
    make_installed_tree(tmp_path)
    resolver = PrefixResolver(tree_config)

    resolution = resolver.resolve(str(build))

    assert resolution.prefix_outcome is DiscoveryOutcome.FOUND_IN_BUILD_TREE
    assert resolution.library_dir == f"{build}/./Lib"
    assert resolution.prefix == tree_config.prefix
    assert resolution.exec_prefix_outcome is DiscoveryOutcome.FOUND_IN_BUILD_TREE
    assert resolution.dynload_dir == f"{build}/Modules"
    assert resolution.exec_prefix == tree_config.effective_exec_prefix


def test_build_marker_without_library_falls_back_to_walk(
    tmp_path: Path, tree_config: LoaderConfig
) -> None:
    """A marker without the build-tree library should not stop the upward walk."""

    build = tmp_path / "build"
    make_file(build / "Modules" / "Setup")
    make_installed_tree(tmp_path)
    resolver = PrefixResolver(tree_config)

    discovery = resolver.search_for_prefix(str(build), None)

    assert discovery.outcome is DiscoveryOutcome.FOUND_INSTALLED
    assert discovery.path == f"{tmp_path}/rt/lib/{LANDMARK}"


def test_compiled_default_prefix_is_used_when_walk_fails(tmp_path: Path) -> None:
    """The compiled-in prefix should be accepted when it holds the landmark."""

    default_root = make_installed_tree(tmp_path / "usr")
    config = LoaderConfig(prefix=str(default_root), library_dir="rt/lib", landmark=LANDMARK)
    resolver = PrefixResolver(config)

    resolution = resolver.resolve(str(tmp_path / "elsewhere" / "bin"))

    assert resolution.prefix_outcome is DiscoveryOutcome.FOUND_INSTALLED
    assert resolution.prefix == str(default_root)
    assert resolution.exec_prefix == str(default_root)


def test_not_found_warns_and_falls_back_to_defaults(
    tmp_path: Path,
    tree_config: LoaderConfig,
    boot_logger: BootLogger,
    boot_sink: io.StringIO,
) -> None:
    """Missing roots should emit distinct warnings and use compiled-in defaults."""

    resolver = PrefixResolver(tree_config, logger=boot_logger)

    resolution = resolver.resolve(str(tmp_path / "nowhere" / "bin"))

    assert resolution.prefix_outcome is DiscoveryOutcome.NOT_FOUND
    assert resolution.exec_prefix_outcome is DiscoveryOutcome.NOT_FOUND
    assert resolution.prefix == tree_config.prefix
    assert resolution.library_dir == f"{tree_config.prefix}/rt/lib"
    assert resolution.dynload_dir == f"{tree_config.prefix}/lib/lib-dynload"
    output = boot_sink.getvalue()
    assert "Could not find platform independent libraries <prefix>" in output
    assert "Could not find platform dependent libraries <exec_prefix>" in output
    assert "Consider setting $PYTHONHOME to <prefix>[:<exec_prefix>]" in output


def test_quiet_discovery_suppresses_warnings(
    tmp_path: Path,
    tree_config: LoaderConfig,
    boot_logger: BootLogger,
    boot_sink: io.StringIO,
) -> None:
    """Discovery warnings should be suppressed when configured quiet."""

    resolver = PrefixResolver(replace(tree_config, quiet_discovery=True), logger=boot_logger)

    resolution = resolver.resolve(str(tmp_path / "nowhere" / "bin"))

    assert resolution.prefix_outcome is DiscoveryOutcome.NOT_FOUND
    assert boot_sink.getvalue() == ""


def test_empty_executable_directory_skips_walk(
    tmp_path: Path, tree_config: LoaderConfig
) -> None:
    """An unknown executable directory should go straight to compiled-in defaults."""

    make_installed_tree(tmp_path)
    resolver = PrefixResolver(tree_config, getcwd=lambda: str(tmp_path))

    resolution = resolver.resolve("")

    assert resolution.prefix_outcome is DiscoveryOutcome.NOT_FOUND
    assert resolution.exec_prefix_outcome is DiscoveryOutcome.NOT_FOUND
