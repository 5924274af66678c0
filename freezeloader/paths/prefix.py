"""Prefix and exec-prefix discovery.

Responsibilities:
- Locate the platform-independent runtime root ("prefix") and the
  platform-dependent extension root ("exec-prefix") from the executable's
  directory, trying in order: the runtime-home override, build-tree
  detection, an upward walk, and the compiled-in defaults.
- Reduce installed results to their canonical short form and fall back to
  compiled-in defaults with a warning when nothing is found.

Key types:
- `PrefixResolver`: runs both searches and produces a `PrefixResolution`.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Callable

from ..models.datatypes import Discovery, DiscoveryOutcome, PrefixResolution
from ..telemetry.logger import BootLogger
from .buffer import PathBuffer, PathFlavor, join_path, reduce_to_parent, strip_segments
from .probe import LandmarkProbe

if TYPE_CHECKING:
    from ..config import LoaderConfig


def split_home(home: str, delimiter: str) -> tuple[str, str]:
    """Split a runtime-home value into its prefix and exec-prefix parts.

    `"<prefix>:<exec_prefix>"` yields both parts; a value without a
    delimiter is used for both.
    """

    prefix_part, found, exec_part = home.partition(delimiter)
    if not found:
        return home, home
    return prefix_part, exec_part


class PrefixResolver:
    """Discover prefix and exec-prefix for one executable directory."""

    def __init__(
        self,
        config: LoaderConfig,
        *,
        flavor: PathFlavor | None = None,
        probe: LandmarkProbe | None = None,
        getcwd: Callable[[], str] = os.getcwd,
        logger: BootLogger | None = None,
    ) -> None:
        """Initialize the resolver with build constants and filesystem collaborators."""

        self._config = config
        self._flavor = flavor or config.flavor()
        self._probe = probe or LandmarkProbe(optimize=config.optimize)
        self._getcwd = getcwd
        self._logger = logger

    @property
    def library_dir(self) -> str:
        return self._config.effective_library_dir

    @property
    def library_depth(self) -> int:
        """Return how many path segments the library directory spans."""

        return len([segment for segment in self.library_dir.split(self._flavor.sep) if segment])

    def _join(self, base: str, *components: str) -> str:
        """Join several components onto `base`."""

        joined = base
        for component in components:
            joined = join_path(joined, component, self._flavor)
        return joined

    def search_for_prefix(self, argv0_path: str, home: str | None) -> Discovery:
        """Search for the landmark file below a library directory.

        The returned path names the landmark itself.
        """

        config = self._config
        if home is not None:
            prefix_part, _ = split_home(home, self._flavor.delim)
            return Discovery(
                DiscoveryOutcome.FOUND_INSTALLED,
                self._join(prefix_part, self.library_dir, config.landmark),
            )

        if argv0_path:
            marker = self._join(argv0_path, config.build_marker)
            if self._probe.is_file(marker):
                candidate = self._join(
                    argv0_path, config.vpath, config.build_library_dir, config.landmark
                )
                if self._probe.is_module(candidate):
                    return Discovery(DiscoveryOutcome.FOUND_IN_BUILD_TREE, candidate)

            found = self._walk_up(
                argv0_path, (self.library_dir, config.landmark), self._probe.is_module
            )
            if found:
                return Discovery(DiscoveryOutcome.FOUND_INSTALLED, found)

        candidate = self._join(config.prefix, self.library_dir, config.landmark)
        if self._probe.is_module(candidate):
            return Discovery(DiscoveryOutcome.FOUND_INSTALLED, candidate)

        return Discovery(DiscoveryOutcome.NOT_FOUND)

    def search_for_exec_prefix(self, argv0_path: str, home: str | None) -> Discovery:
        """Search for the extension-module directory below a library directory.

        The returned path names the extension-module directory itself.
        """

        config = self._config
        if home is not None:
            _, exec_part = split_home(home, self._flavor.delim)
            return Discovery(
                DiscoveryOutcome.FOUND_INSTALLED,
                self._join(exec_part, self.library_dir, config.dynload_dir),
            )

        if argv0_path:
            marker = self._join(argv0_path, config.build_marker)
            if self._probe.is_file(marker):
                return Discovery(
                    DiscoveryOutcome.FOUND_IN_BUILD_TREE,
                    reduce_to_parent(marker, self._flavor),
                )

            found = self._walk_up(
                argv0_path, (self.library_dir, config.dynload_dir), self._probe.is_dir
            )
            if found:
                return Discovery(DiscoveryOutcome.FOUND_INSTALLED, found)

        candidate = self._join(config.effective_exec_prefix, self.library_dir, config.dynload_dir)
        if self._probe.is_dir(candidate):
            return Discovery(DiscoveryOutcome.FOUND_INSTALLED, candidate)

        return Discovery(DiscoveryOutcome.NOT_FOUND)

    def _walk_up(
        self,
        start: str,
        components: tuple[str, ...],
        predicate: Callable[[str], bool],
    ) -> str:
        """Test `start/components` on each ancestor of `start`; return the first hit or `""`."""

        directory = PathBuffer(start, self._flavor).absolutize(self._getcwd)
        while directory:
            candidate = directory.copy()
            for component in components:
                candidate.join(component)
            if predicate(candidate.value):
                return candidate.value
            directory.reduce()
        return ""

    def resolve(self, argv0_path: str, home: str | None = None) -> PrefixResolution:
        """Resolve both roots, warning and falling back to defaults when not found."""

        config = self._config
        prefix_discovery = self.search_for_prefix(argv0_path, home)
        if prefix_discovery.outcome.found:
            library_dir = reduce_to_parent(prefix_discovery.path, self._flavor)
        else:
            self._warn("Could not find platform independent libraries <prefix>")
            library_dir = self._join(config.prefix, self.library_dir)

        exec_discovery = self.search_for_exec_prefix(argv0_path, home)
        if exec_discovery.outcome.found:
            dynload_dir = exec_discovery.path
        else:
            self._warn("Could not find platform dependent libraries <exec_prefix>")
            dynload_dir = self._join(config.effective_exec_prefix, "lib", config.dynload_dir)

        if not prefix_discovery.outcome.found or not exec_discovery.outcome.found:
            self._warn(
                f"Consider setting ${config.home_env_var} to "
                f"<prefix>[{self._flavor.delim}<exec_prefix>]"
            )

        if prefix_discovery.outcome is DiscoveryOutcome.FOUND_INSTALLED:
            prefix = strip_segments(library_dir, self.library_depth, self._flavor)
        else:
            prefix = config.prefix

        if exec_discovery.outcome is DiscoveryOutcome.FOUND_INSTALLED:
            exec_prefix = strip_segments(dynload_dir, self.library_depth + 1, self._flavor)
        else:
            exec_prefix = config.effective_exec_prefix

        resolution = PrefixResolution(
            prefix_outcome=prefix_discovery.outcome,
            exec_prefix_outcome=exec_discovery.outcome,
            library_dir=library_dir,
            dynload_dir=dynload_dir,
            prefix=prefix,
            exec_prefix=exec_prefix,
        )
        if self._logger is not None:
            self._logger.log_stage_complete(
                "prefix",
                prefix=resolution.prefix,
                prefix_outcome=resolution.prefix_outcome.value,
                exec_prefix=resolution.exec_prefix,
                exec_prefix_outcome=resolution.exec_prefix_outcome.value,
            )
        return resolution

    def _warn(self, message: str) -> None:
        """Emit a discovery warning unless discovery diagnostics are suppressed."""

        if self._logger is not None and not self._config.quiet_discovery:
            self._logger.warning(message)
