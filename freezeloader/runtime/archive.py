"""Archive handoff once the hosted runtime holds the assembled search path.

The bootstrap keeps only the first two search-path entries, marks the
process frozen, then loads and executes the archive's entry module. Failures
are printed by the runtime and turned into exit status 1.
"""

from __future__ import annotations

from .hosted import HostedRuntime
from ..telemetry.logger import BootLogger

KEPT_PATH_ENTRIES = 2


class ArchiveBootstrap:
    """Run a bundled archive's entry module inside the hosted runtime."""

    def __init__(self, runtime: HostedRuntime, logger: BootLogger | None = None) -> None:
        self._runtime = runtime
        self._logger = logger

    def run(self, archive_path: str, entry_module: str = "__main__") -> int:
        """Execute `entry_module` from `archive_path` and return the exit status."""

        runtime = self._runtime
        if self._logger is not None:
            self._logger.log_stage_start("handoff")
        try:
            runtime.truncate_path(KEPT_PATH_ENTRIES)
            runtime.mark_frozen()
            code = runtime.load_entry_code(archive_path, entry_module)
            runtime.execute(code, archive_path)
        except SystemExit as exc:
            return self._exit_status(exc)
        except (Exception, KeyboardInterrupt) as exc:
            if self._logger is not None:
                self._logger.log_stage_failure("handoff", type(exc).__name__)
            runtime.print_error(exc)
            return 1

        if self._logger is not None:
            self._logger.log_stage_complete("handoff")
        return 0

    def _exit_status(self, exc: SystemExit) -> int:
        """Map a `SystemExit` raised by the entry module to a process status."""

        code = exc.code
        if code is None:
            return 0
        if isinstance(code, int):
            return code
        self._runtime.write_error(str(code))
        return 1
