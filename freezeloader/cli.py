"""Command-line interface for freezeloader.

Responsibilities:
- Expose developer-facing commands to inspect executable location and the
  computed search path, and to run a bundled archive in-process.
- Convert CLI options into `LoaderConfig` overrides.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from dataclasses import replace
import os
from pathlib import Path
import sys
from typing import Annotated

import typer

from .cli_rendering import echo_bootstrap_context, echo_executable, exit_with_command_error
from .config import ConfigLoader, LoaderConfig
from .errors import BootstrapFatalError, ConfigError
from .models.datatypes import LaunchEnvironment
from .parsing import normalize_override
from .paths.locator import ExecutableLocator, default_self_path_provider, resolve_program_name
from .paths.strategy import SearchPathCalculator
from .runtime.archive import ArchiveBootstrap
from .runtime.hosted import InProcessRuntime, RuntimeFlags
from .telemetry.logger import BootLogger

app = typer.Typer(
    name="freezeloader",
    no_args_is_help=True,
    help="freezeloader CLI.",
)


def _load_config(config_file: Path | None, strategy: str | None = None) -> LoaderConfig:
    """Load config from file and environment, then apply CLI overrides."""

    try:
        config = ConfigLoader.load(config_file)
        normalized_strategy = normalize_override(strategy)
        if normalized_strategy is not None:
            config = replace(config, strategy=normalized_strategy)
            config.validate()
        return config
    except FileNotFoundError as exc:
        raise BootstrapFatalError(
            stage="config",
            detail=f"Config file not found: `{config_file}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ConfigError as exc:
        raise BootstrapFatalError(
            stage="config",
            detail=f"Invalid loader configuration: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


def _resolve_program(program: str | None) -> str:
    """Return the explicit program path, or the running executable's own path."""

    explicit = normalize_override(program)
    if explicit is not None:
        return explicit
    return resolve_program_name(sys.argv[0], default_self_path_provider())


@app.command("locate")
def locate_command(
    program: Annotated[
        str | None,
        typer.Option("--program", help="Program name or path to locate (default: this process)."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Optional YAML loader config."),
    ] = None,
) -> None:
    """Resolve a program to its canonical executable path and directory."""

    try:
        config = _load_config(config_file)
        locator = ExecutableLocator(config.flavor(), hop_limit=config.symlink_hop_limit)
        executable = locator.locate(_resolve_program(program), os.environ.get("PATH"))
    except Exception as exc:
        exit_with_command_error("locate", exc)

    echo_executable(executable)


@app.command("paths")
def paths_command(
    program: Annotated[
        str | None,
        typer.Option(
            "--program",
            help="Program name or path to resolve from (default: this process).",
        ),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Optional YAML loader config."),
    ] = None,
    strategy: Annotated[
        str | None,
        typer.Option("--strategy", help="Search-path strategy: `simple` or `legacy`."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Emit bootstrap phase logs on standard error."),
    ] = False,
) -> None:
    """Print discovery results and the search path a launch would use."""

    logger = BootLogger(level="DEBUG" if verbose else "WARNING")
    try:
        config = _load_config(config_file, strategy)
        program_name = _resolve_program(program)
        environment = LaunchEnvironment(argv=(program_name,), environ=dict(os.environ))
        calculator = SearchPathCalculator(
            config, environment, program=program_name, logger=logger
        )
        context = calculator.context()
    except Exception as exc:
        exit_with_command_error("paths", exc)
    finally:
        logger.close()

    echo_bootstrap_context(context)


@app.command(
    "run",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def run_command(
    ctx: typer.Context,
    archive: Annotated[Path, typer.Argument(help="Path to the bundled zip archive.")],
    entry_module: Annotated[
        str,
        typer.Option("--entry-module", help="Archive entry module to execute."),
    ] = "__main__",
) -> None:
    """Run an archive's entry module in-process, passing extra arguments through."""

    logger = BootLogger()
    runtime = InProcessRuntime()
    runtime.apply_flags(RuntimeFlags())
    runtime.set_program_name(str(archive))
    runtime.initialize()
    try:
        runtime.set_argv([str(archive), *ctx.args])
        runtime.set_path(os.pathsep.join([str(archive), str(archive.parent)]))
        status = ArchiveBootstrap(runtime, logger).run(str(archive), entry_module)
    finally:
        runtime.finalize()
        logger.close()

    raise typer.Exit(code=status)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
