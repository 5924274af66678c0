"""Core datatypes shared across freezeloader modules.

Responsibilities:
- Represent the immutable records produced while bootstrapping one process.
- Keep discovery outcomes explicit so reduction and warning rules stay visible.

Key types:
- `ResolvedExecutable`, `DiscoveryOutcome`, `Discovery`, `PrefixResolution`,
  `SearchPathEntry`, `AssembledSearchPath`, `LaunchEnvironment`,
  and `BootstrapContext`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import os
from typing import Callable, Mapping


class DiscoveryOutcome(Enum):
    """Result of one prefix or exec-prefix search."""

    FOUND_INSTALLED = "installed"
    FOUND_IN_BUILD_TREE = "build_tree"
    NOT_FOUND = "not_found"

    @property
    def found(self) -> bool:
        """Return whether the search located anything at all."""

        return self is not DiscoveryOutcome.NOT_FOUND


@dataclass(frozen=True, slots=True)
class ResolvedExecutable:
    """Canonical location of the running binary.

    Attributes:
        program: Program name the locator started from.
        path: Absolute, symlink-resolved executable path (empty when not found).
        directory: Directory containing `path`; the anchor for all later search.
    """

    program: str
    path: str
    directory: str

    @property
    def found(self) -> bool:
        """Return whether an executable path was located."""

        return bool(self.path)


@dataclass(frozen=True, slots=True)
class Discovery:
    """One search result: the outcome and the raw discovered path."""

    outcome: DiscoveryOutcome
    path: str = ""


@dataclass(frozen=True, slots=True)
class PrefixResolution:
    """Resolved runtime roots for one bootstrap.

    Attributes:
        prefix_outcome: Outcome of the platform-independent search.
        exec_prefix_outcome: Outcome of the platform-dependent search.
        library_dir: Prefix directory used to qualify relative template entries.
        dynload_dir: Extension-module directory appended to the search path.
        prefix: Canonical, reduced prefix reported to the runtime.
        exec_prefix: Canonical, reduced exec-prefix reported to the runtime.
    """

    prefix_outcome: DiscoveryOutcome
    exec_prefix_outcome: DiscoveryOutcome
    library_dir: str
    dynload_dir: str
    prefix: str
    exec_prefix: str


@dataclass(frozen=True, slots=True)
class SearchPathEntry:
    """One default-template entry, either absolute or prefix-relative."""

    text: str
    absolute: bool


@dataclass(frozen=True, slots=True)
class AssembledSearchPath:
    """Final delimiter-joined module search path."""

    entries: tuple[str, ...]
    delimiter: str

    @property
    def text(self) -> str:
        """Return the search path as one delimited string."""

        return self.delimiter.join(self.entries)


@dataclass(frozen=True, slots=True)
class LaunchEnvironment:
    """Process inputs the bootstrap reads: arguments, environment, working directory."""

    argv: tuple[str, ...]
    environ: Mapping[str, str] = field(default_factory=dict)
    getcwd: Callable[[], str] = os.getcwd

    @property
    def argv0(self) -> str:
        """Return the invocation name, or an empty string for an empty argv."""

        return self.argv[0] if self.argv else ""


@dataclass(frozen=True, slots=True)
class BootstrapContext:
    """Everything computed before handing the search path to the runtime.

    Attributes:
        strategy: Name of the strategy that produced the search path.
        executable: Resolved executable location.
        archive_path: Location of the bundled script archive.
        search_path: Final search path handed to the runtime.
        resolution: Prefix resolution, for strategies that walk for one.
        used_static_fallback: Whether assembly failed and the static template was used.
    """

    strategy: str
    executable: ResolvedExecutable
    archive_path: str
    search_path: AssembledSearchPath
    resolution: PrefixResolution | None = None
    used_static_fallback: bool = False
