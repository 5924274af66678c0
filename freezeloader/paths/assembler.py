"""Search-path assembly.

Responsibilities:
- Derive the bundled archive path, either beside the executable or below the
  resolved prefix with the runtime version patched into its name.
- Merge the runtime override, archive path, default template entries and the
  extension-module directory into one delimited search path.

Key types:
- `SearchPathAssembler`: builds an `AssembledSearchPath` or raises
  `SearchPathAssemblyError` instead of truncating.
"""

from __future__ import annotations

from ..errors import SearchPathAssemblyError
from ..models.datatypes import (
    AssembledSearchPath,
    DiscoveryOutcome,
    PrefixResolution,
    SearchPathEntry,
)
from .buffer import POSIX, PathFlavor, join_path, strip_segments


def patch_archive_version(archive_name: str, version: str) -> str:
    """Overwrite the two version characters of a name like `lib/python00.zip`.

    Characters -6 and -5 receive `version[0]` and `version[2]`, so `"2.1"`
    turns `lib/python00.zip` into `lib/python21.zip`.
    """

    if len(archive_name) < 6:
        raise SearchPathAssemblyError(f"Archive name `{archive_name}` is too short to patch.")
    if len(version) < 3:
        raise SearchPathAssemblyError(f"Version `{version}` has no minor digit to patch.")
    characters = list(archive_name)
    characters[-6] = version[0]
    characters[-5] = version[2]
    return "".join(characters)


def archive_beside_executable(
    executable_dir: str,
    archive_name: str,
    flavor: PathFlavor = POSIX,
) -> str:
    """Return the archive path next to the executable."""

    return join_path(executable_dir, archive_name, flavor)


def archive_under_prefix(
    resolution: PrefixResolution,
    *,
    default_prefix: str,
    archive_name: str,
    version: str,
    library_depth: int,
    flavor: PathFlavor = POSIX,
) -> str:
    """Return the version-patched archive path below the resolved prefix.

    Only an installed prefix is trusted; build-tree and missing prefixes use
    the compiled-in default.
    """

    if resolution.prefix_outcome is DiscoveryOutcome.FOUND_INSTALLED:
        base = strip_segments(resolution.library_dir, library_depth, flavor)
    else:
        base = default_prefix
    return join_path(base, patch_archive_version(archive_name, version), flavor)


def parse_template(template: str, flavor: PathFlavor = POSIX) -> list[SearchPathEntry]:
    """Split a default-path template into absolute and prefix-relative entries."""

    return [
        SearchPathEntry(text=entry, absolute=flavor.is_absolute(entry))
        for entry in template.split(flavor.delim)
    ]


class SearchPathAssembler:
    """Merge search-path segments in their fixed order."""

    def __init__(self, flavor: PathFlavor = POSIX) -> None:
        """Initialize the assembler for one path flavor."""

        self._flavor = flavor

    def qualify(self, entry: SearchPathEntry, prefix: str) -> str:
        """Return a template entry, prefixed with `prefix` when it is relative."""

        if entry.absolute:
            return entry.text
        return f"{prefix}{self._flavor.sep}{entry.text}"

    def assemble(
        self,
        *,
        override: str | None,
        archive_path: str,
        template: list[SearchPathEntry],
        prefix: str,
        exec_dir: str,
    ) -> AssembledSearchPath:
        """Assemble override, archive, template entries and exec dir in that order.

        Raises:
            SearchPathAssemblyError: If a segment cannot be represented in a
                delimited path list or the result does not match its exact size.
        """

        delimiter = self._flavor.delim
        entries: list[str] = []
        if override is not None:
            self._check_segment(override, "runtime path override", allow_delimiter=True)
            entries.extend(override.split(delimiter))

        self._check_segment(archive_path, "archive path")
        entries.append(archive_path)

        for entry in template:
            qualified = self.qualify(entry, prefix)
            self._check_segment(qualified, "default path entry")
            entries.append(qualified)

        self._check_segment(exec_dir, "exec-prefix directory")
        entries.append(exec_dir)

        expected_length = sum(len(entry) for entry in entries) + len(entries) - 1
        assembled = AssembledSearchPath(entries=tuple(entries), delimiter=delimiter)
        if len(assembled.text) != expected_length:
            raise SearchPathAssemblyError(
                f"Assembled search path has {len(assembled.text)} characters, "
                f"expected {expected_length}."
            )
        return assembled

    def _check_segment(self, segment: str, label: str, allow_delimiter: bool = False) -> None:
        """Reject segments that would corrupt the delimited path list."""

        if "\0" in segment:
            raise SearchPathAssemblyError(f"The {label} contains a NUL character.")
        if not allow_delimiter and self._flavor.delim in segment:
            raise SearchPathAssemblyError(
                f"The {label} `{segment}` contains the path-list delimiter "
                f"`{self._flavor.delim}`."
            )
