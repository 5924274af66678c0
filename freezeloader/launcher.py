"""Frozen-bundle launch sequence.

Responsibilities:
- Drive the hosted runtime in its required order: flags, program name,
  initialize, argv, search path.
- Compute the search path once, hand off to the archive entry module, and
  map fatal bootstrap errors to exit status 1.

Key public functions:
- `launch`: run one launch for an explicit argv/environment.
- `main`: console-script entry point; passes `sys.argv` through unmodified.
"""

from __future__ import annotations

import os
import sys
from typing import Mapping, Sequence

from .cli_rendering import report_fatal
from .config import ConfigLoader, LoaderConfig
from .errors import BootstrapFatalError, ConfigError
from .models.datatypes import BootstrapContext, LaunchEnvironment
from .paths.locator import SelfPathProvider, default_self_path_provider, resolve_program_name
from .paths.strategy import SearchPathCalculator
from .runtime.archive import ArchiveBootstrap
from .runtime.hosted import HostedRuntime, InProcessRuntime, RuntimeFlags
from .telemetry.logger import BootLogger


class Launcher:
    """One bootstrap of a frozen bundle."""

    def __init__(
        self,
        config: LoaderConfig,
        environment: LaunchEnvironment,
        *,
        runtime: HostedRuntime | None = None,
        self_path: SelfPathProvider | None = None,
        logger: BootLogger | None = None,
        flags: RuntimeFlags | None = None,
    ) -> None:
        """Initialize the launcher with its collaborators."""

        self._config = config
        self._environment = environment
        self._runtime = runtime or InProcessRuntime(delimiter=config.flavor().delim)
        self._self_path = self_path or default_self_path_provider()
        self._owns_logger = logger is None
        self._logger = logger or BootLogger()
        self._flags = flags or RuntimeFlags()
        self._calculator: SearchPathCalculator | None = None

    @property
    def context(self) -> BootstrapContext | None:
        """Return the bootstrap context once it has been computed."""

        if self._calculator is None or not self._calculator.computed:
            return None
        return self._calculator.context()

    def calculator(self, program: str) -> SearchPathCalculator:
        """Return the search-path calculator, creating it on first use."""

        if self._calculator is None:
            self._calculator = SearchPathCalculator(
                self._config,
                self._environment,
                program=program,
                logger=self._logger,
            )
        return self._calculator

    def run(self) -> int:
        """Run the launch sequence and return the process exit status."""

        try:
            return self._run()
        except BootstrapFatalError as exc:
            self._logger.log_stage_failure(exc.stage, type(exc).__name__)
            message = exc.detail if not exc.hint else f"{exc.detail}\n{exc.hint}"
            report_fatal(message, gui=self._config.gui)
            return 1
        finally:
            if self._owns_logger:
                self._logger.close()

    def _run(self) -> int:
        try:
            self._config.validate()
        except ConfigError as exc:
            raise BootstrapFatalError(
                stage="config",
                detail=f"invalid launcher configuration: {exc}",
            ) from exc
        runtime = self._runtime
        runtime.apply_flags(self._flags)
        program = resolve_program_name(self._environment.argv0, self._self_path)
        runtime.set_program_name(program)
        runtime.initialize()
        try:
            runtime.set_argv(self._environment.argv)
            context = self.calculator(program).context()
            runtime.set_path(context.search_path.text)
            return ArchiveBootstrap(runtime, self._logger).run(
                context.archive_path, self._config.entry_module
            )
        finally:
            runtime.finalize()


def launch(
    argv: Sequence[str],
    *,
    config: LoaderConfig | None = None,
    environ: Mapping[str, str] | None = None,
    runtime: HostedRuntime | None = None,
    self_path: SelfPathProvider | None = None,
    logger: BootLogger | None = None,
) -> int:
    """Bootstrap a frozen bundle for `argv` and return its exit status."""

    environment = LaunchEnvironment(
        argv=tuple(argv),
        environ=dict(os.environ if environ is None else environ),
    )
    launcher = Launcher(
        config or LoaderConfig(),
        environment,
        runtime=runtime,
        self_path=self_path,
        logger=logger,
    )
    return launcher.run()


def _line_buffer_standard_streams() -> None:
    """Make standard output and error flush on every write."""

    for stream in (sys.stdout, sys.stderr):
        reconfigure = getattr(stream, "reconfigure", None)
        if reconfigure is not None:
            reconfigure(line_buffering=True, write_through=True)


def main() -> None:
    """Console-script entry point for frozen bundles."""

    _line_buffer_standard_streams()
    try:
        config = ConfigLoader.load()
    except (ConfigError, OSError) as exc:
        report_fatal(f"invalid launcher configuration: {exc}")
        sys.exit(1)
    sys.exit(launch(sys.argv, config=config))


if __name__ == "__main__":
    main()
