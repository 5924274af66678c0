"""Domain exceptions for launcher bootstrap diagnostics."""

from __future__ import annotations


class BootstrapFatalError(RuntimeError):
    """Raised when bootstrap cannot continue and the process must exit."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped fatal bootstrap error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class PathContractError(BootstrapFatalError):
    """Raised when a path operation is called outside its preconditions."""

    def __init__(self, *, operation: str, path: str, detail: str) -> None:
        """Initialize a path-contract violation for one path operation."""

        super().__init__(stage="path", detail=f"{operation}({path!r}): {detail}")
        self.operation = operation
        self.path = path


class SymlinkLoopError(BootstrapFatalError):
    """Raised when executable symlink resolution does not terminate."""

    def __init__(self, *, path: str, hop_limit: int) -> None:
        """Initialize a symlink-loop error for the last visited path."""

        super().__init__(
            stage="locate",
            detail=f"Too many levels of symbolic links resolving `{path}` (limit {hop_limit}).",
            hint="Check the launcher symlink chain for a cycle.",
        )
        self.path = path
        self.hop_limit = hop_limit


class SearchPathAssemblyError(RuntimeError):
    """Raised when the dynamic search path cannot be assembled."""


class ConfigError(ValueError):
    """Raised when loader configuration values are invalid."""
