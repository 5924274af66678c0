"""Search-path strategies and the initialize-once calculator.

Responsibilities:
- Provide the two deployment strategies behind one interface: `simple`
  (archive co-located with the executable) and `legacy` (full prefix and
  exec-prefix walk).
- Compute the bootstrap context exactly once per calculator, however often
  it is queried.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from ..errors import BootstrapFatalError, SearchPathAssemblyError
from ..models.datatypes import (
    AssembledSearchPath,
    BootstrapContext,
    LaunchEnvironment,
    ResolvedExecutable,
)
from ..telemetry.logger import BootLogger
from .assembler import (
    SearchPathAssembler,
    archive_beside_executable,
    archive_under_prefix,
    parse_template,
)
from .buffer import PathFlavor
from .locator import ExecutableLocator
from .prefix import PrefixResolver
from .probe import LandmarkProbe

if TYPE_CHECKING:
    from ..config import LoaderConfig


class SearchPathStrategy(Protocol):
    """Compute the bootstrap context for a located executable."""

    name: str

    def compute(
        self,
        executable: ResolvedExecutable,
        environment: LaunchEnvironment,
    ) -> BootstrapContext:
        """Return the bootstrap context for `executable`."""


class CoLocatedArchiveStrategy:
    """Search the archive next to the executable, then the executable directory."""

    name = "simple"

    def __init__(self, config: LoaderConfig, *, flavor: PathFlavor | None = None) -> None:
        """Initialize the strategy with build constants."""

        self._config = config
        self._flavor = flavor or config.flavor()

    def compute(
        self,
        executable: ResolvedExecutable,
        environment: LaunchEnvironment,
    ) -> BootstrapContext:
        _ = environment
        if not executable.directory:
            raise BootstrapFatalError(
                stage="search_path",
                detail=f"dirname failed: no executable directory for `{executable.program}`.",
                hint="Start the launcher through a path or from a directory on $PATH.",
            )
        archive_path = archive_beside_executable(
            executable.directory, self._config.archive_name, self._flavor
        )
        return BootstrapContext(
            strategy=self.name,
            executable=executable,
            archive_path=archive_path,
            search_path=AssembledSearchPath(
                entries=(archive_path, executable.directory),
                delimiter=self._flavor.delim,
            ),
        )


class PrefixWalkStrategy:
    """Discover prefix and exec-prefix, then assemble the full search path."""

    name = "legacy"

    def __init__(
        self,
        config: LoaderConfig,
        *,
        flavor: PathFlavor | None = None,
        probe: LandmarkProbe | None = None,
        logger: BootLogger | None = None,
    ) -> None:
        """Initialize the strategy with build constants and diagnostics."""

        self._config = config
        self._flavor = flavor or config.flavor()
        self._probe = probe or LandmarkProbe(optimize=config.optimize)
        self._logger = logger

    def compute(
        self,
        executable: ResolvedExecutable,
        environment: LaunchEnvironment,
    ) -> BootstrapContext:
        config = self._config
        resolver = PrefixResolver(
            config,
            flavor=self._flavor,
            probe=self._probe,
            getcwd=environment.getcwd,
            logger=self._logger,
        )
        home = config.runtime_home(environment.environ)
        resolution = resolver.resolve(executable.directory, home)

        if config.archive_anchor == "executable" and executable.directory:
            archive_path = archive_beside_executable(
                executable.directory, config.archive_name, self._flavor
            )
        else:
            archive_path = archive_under_prefix(
                resolution,
                default_prefix=config.prefix,
                archive_name=config.prefix_archive_name,
                version=config.version,
                library_depth=resolver.library_depth,
                flavor=self._flavor,
            )

        template_text = config.effective_default_path(self._flavor)
        used_static_fallback = False
        try:
            search_path = SearchPathAssembler(self._flavor).assemble(
                override=config.runtime_path(environment.environ),
                archive_path=archive_path,
                template=parse_template(template_text, self._flavor),
                prefix=resolution.library_dir,
                exec_dir=resolution.dynload_dir,
            )
        except SearchPathAssemblyError as exc:
            if self._logger is not None:
                self._logger.warning(f"Could not assemble dynamic search path: {exc}")
                self._logger.warning("Using default static search path.")
            search_path = AssembledSearchPath(
                entries=tuple(template_text.split(self._flavor.delim)),
                delimiter=self._flavor.delim,
            )
            used_static_fallback = True

        return BootstrapContext(
            strategy=self.name,
            executable=executable,
            archive_path=archive_path,
            search_path=search_path,
            resolution=resolution,
            used_static_fallback=used_static_fallback,
        )


def create_strategy(
    config: LoaderConfig,
    *,
    flavor: PathFlavor | None = None,
    probe: LandmarkProbe | None = None,
    logger: BootLogger | None = None,
) -> SearchPathStrategy:
    """Return the strategy named by `config.strategy`."""

    if config.strategy == "simple":
        return CoLocatedArchiveStrategy(config, flavor=flavor)
    if config.strategy == "legacy":
        return PrefixWalkStrategy(config, flavor=flavor, probe=probe, logger=logger)
    raise BootstrapFatalError(
        stage="config",
        detail=f"Unsupported search-path strategy `{config.strategy}`.",
        hint="Use `simple` or `legacy`.",
    )


class SearchPathCalculator:
    """Locate the executable and compute the bootstrap context once."""

    def __init__(
        self,
        config: LoaderConfig,
        environment: LaunchEnvironment,
        *,
        program: str | None = None,
        locator: ExecutableLocator | None = None,
        strategy: SearchPathStrategy | None = None,
        logger: BootLogger | None = None,
    ) -> None:
        """Initialize the calculator for one process start."""

        flavor = config.flavor()
        self._environment = environment
        self._program = program if program is not None else environment.argv0
        self._locator = locator or ExecutableLocator(
            flavor,
            getcwd=environment.getcwd,
            hop_limit=config.symlink_hop_limit,
        )
        self._strategy = strategy or create_strategy(config, flavor=flavor, logger=logger)
        self._logger = logger
        self._context: BootstrapContext | None = None

    @property
    def computed(self) -> bool:
        """Return whether the context has already been computed."""

        return self._context is not None

    def context(self) -> BootstrapContext:
        """Return the bootstrap context, computing it on first use."""

        if self._context is None:
            self._context = self._compute()
        return self._context

    def search_path(self) -> str:
        """Return the final delimited search path."""

        return self.context().search_path.text

    def _compute(self) -> BootstrapContext:
        """Run executable location and the configured strategy."""

        if self._logger is not None:
            self._logger.log_stage_start("locate")
        executable = self._locator.locate(self._program, self._environment.environ.get("PATH"))
        if self._logger is not None:
            self._logger.log_stage_complete(
                "locate", executable=executable.path, directory=executable.directory
            )
            self._logger.log_stage_start("search_path")
        context = self._strategy.compute(executable, self._environment)
        if self._logger is not None:
            self._logger.log_stage_complete(
                "search_path",
                strategy=context.strategy,
                entries=len(context.search_path.entries),
                static_fallback=context.used_static_fallback,
            )
        return context
