"""Hosted-runtime collaborator.

Responsibilities:
- Describe the initialization interface the launcher drives, in the order
  flags, program name, initialize, argv, search path.
- Implement it for the running CPython interpreter, restoring interpreter
  state on `finalize()`.
"""

from __future__ import annotations

import builtins
from dataclasses import dataclass
import os
import site
import sys
import traceback
from types import CodeType, ModuleType
from typing import Protocol, Sequence, TextIO
import zipimport


@dataclass(frozen=True, slots=True)
class RuntimeFlags:
    """Interpreter flags set unconditionally before a frozen start."""

    no_site: bool = True
    frozen: bool = True
    ignore_environment: bool = True
    dont_write_bytecode: bool = True
    no_user_site: bool = True


class HostedRuntime(Protocol):
    """Interpreter lifecycle and state operations used during bootstrap."""

    def apply_flags(self, flags: RuntimeFlags) -> None:
        """Set interpreter flags before initialization."""

    def set_program_name(self, name: str) -> None:
        """Record the program name the interpreter reports."""

    def initialize(self) -> None:
        """Bring the interpreter up."""

    def set_argv(self, argv: Sequence[str]) -> None:
        """Install the argument vector, unmodified."""

    def set_path(self, search_path: str) -> None:
        """Install the delimited module search path."""

    def truncate_path(self, keep: int) -> None:
        """Drop every search-path entry after the first `keep`."""

    def mark_frozen(self) -> None:
        """Mark the process as running from a frozen bundle."""

    def load_entry_code(self, archive_path: str, entry_module: str) -> CodeType:
        """Return the compiled code of `entry_module` inside `archive_path`."""

    def execute(self, code: CodeType, archive_path: str) -> None:
        """Execute entry-module code as the program's main module."""

    def print_error(self, exc: BaseException) -> None:
        """Print an exception with the interpreter's traceback printer."""

    def write_error(self, message: str) -> None:
        """Write one diagnostic line to the interpreter's standard error."""

    def finalize(self) -> None:
        """Shut the interpreter state down cleanly."""


_MISSING = object()


@dataclass(slots=True)
class _InterpreterSnapshot:
    """Interpreter state captured before the bootstrap touches it."""

    path: list[str]
    argv: list[str]
    dont_write_bytecode: bool
    enable_user_site: bool | None
    frozen: object
    main_module: ModuleType | None


class InProcessRuntime:
    """Hosted runtime backed by the running interpreter.

    Flags that only a fresh interpreter can honor (no-site, ignore-environment)
    are recorded in `flags`; the others are applied immediately.
    """

    def __init__(self, delimiter: str = os.pathsep, stderr: TextIO | None = None) -> None:
        """Snapshot interpreter state so `finalize()` can restore it."""

        self._delimiter = delimiter
        self._stderr = stderr
        self._snapshot = _InterpreterSnapshot(
            path=list(sys.path),
            argv=list(sys.argv),
            dont_write_bytecode=sys.dont_write_bytecode,
            enable_user_site=site.ENABLE_USER_SITE,
            frozen=getattr(sys, "frozen", _MISSING),
            main_module=sys.modules.get("__main__"),
        )
        self.flags: RuntimeFlags | None = None
        self.program_name: str | None = None
        self.initialized = False

    @property
    def stderr(self) -> TextIO:
        return self._stderr if self._stderr is not None else sys.stderr

    def apply_flags(self, flags: RuntimeFlags) -> None:
        self.flags = flags
        sys.dont_write_bytecode = flags.dont_write_bytecode
        if flags.no_user_site:
            site.ENABLE_USER_SITE = False

    def set_program_name(self, name: str) -> None:
        self.program_name = name

    def initialize(self) -> None:
        self.initialized = True

    def set_argv(self, argv: Sequence[str]) -> None:
        sys.argv = list(argv)

    def set_path(self, search_path: str) -> None:
        sys.path[:] = search_path.split(self._delimiter)

    def truncate_path(self, keep: int) -> None:
        del sys.path[keep:]

    def mark_frozen(self) -> None:
        sys.frozen = True

    def load_entry_code(self, archive_path: str, entry_module: str) -> CodeType:
        importer = zipimport.zipimporter(archive_path)
        code = importer.get_code(entry_module)
        if code is None:
            raise zipimport.ZipImportError(
                f"can't find module {entry_module!r} in {archive_path!r}"
            )
        return code

    def execute(self, code: CodeType, archive_path: str) -> None:
        module = ModuleType("__main__")
        module.__dict__["__builtins__"] = builtins
        module.__file__ = code.co_filename
        module.__loader__ = zipimport.zipimporter(archive_path)
        sys.modules["__main__"] = module
        exec(code, module.__dict__)

    def print_error(self, exc: BaseException) -> None:
        traceback.print_exception(type(exc), exc, exc.__traceback__, file=self.stderr)

    def write_error(self, message: str) -> None:
        print(message, file=self.stderr)

    def finalize(self) -> None:
        """Restore the interpreter state captured at construction."""

        snapshot = self._snapshot
        sys.path[:] = snapshot.path
        sys.argv = snapshot.argv
        sys.dont_write_bytecode = snapshot.dont_write_bytecode
        site.ENABLE_USER_SITE = snapshot.enable_user_site
        if snapshot.frozen is _MISSING:
            if hasattr(sys, "frozen"):
                del sys.frozen
        else:
            sys.frozen = snapshot.frozen
        if snapshot.main_module is not None:
            sys.modules["__main__"] = snapshot.main_module
        self.initialized = False
