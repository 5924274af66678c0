"""Configuration model and loaders for freezeloader.

Responsibilities:
- Define the launcher's build constants as a typed, frozen dataclass.
- Provide loader entry points for YAML files and `FREEZELOADER_*` environment overrides.
- Resolve the runtime-home and runtime-path override values a launch should honor.

Key types:
- `LoaderConfig`: normalized build constants for one launcher.
- `ConfigLoader`: static construction helpers for `LoaderConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigError
from .parsing import normalize_override, parse_flag
from .paths.buffer import DEFAULT_MAX_PATH_LENGTH, PathFlavor
from .paths.locator import DEFAULT_SYMLINK_HOP_LIMIT

SUPPORTED_STRATEGIES = frozenset({"simple", "legacy"})
SUPPORTED_ARCHIVE_ANCHORS = frozenset({"prefix", "executable"})

_DEFAULT_VERSION = "2.1"
_DEFAULT_PREFIX = "/usr/local"


@dataclass(frozen=True, slots=True)
class LoaderConfig:
    """Build constants of one launcher.

    Attributes:
        version: Runtime version; two of its characters are patched into the prefix archive name.
        prefix: Compiled-in platform-independent root.
        exec_prefix: Compiled-in platform-dependent root (defaults to `prefix`).
        library_dir: Library directory below a prefix (defaults to `lib/python<version>`).
        landmark: File proving a library directory is a real runtime root.
        vpath: Offset from the executable directory to the source tree in a build tree.
        build_marker: Build-system marker file relative to the executable directory.
        build_library_dir: Library directory name inside a build tree.
        dynload_dir: Extension-module directory below the library directory.
        default_path: Default search-path template (derived from the prefixes when unset).
        archive_name: Archive file name beside the executable.
        prefix_archive_name: Archive name below the prefix; characters -6 and -5 carry the version.
        archive_anchor: `prefix` or `executable`; where the legacy strategy looks for the archive.
        strategy: `simple` (archive beside the executable) or `legacy` (prefix walk).
        entry_module: Archive entry whose code object is executed.
        home_env_var: Runtime-home override variable.
        path_env_var: Runtime search-path override variable.
        ignore_environment: Skip both override variables.
        optimize: Look for `o` instead of `c` compiled landmark variants.
        quiet_discovery: Suppress degraded-discovery warnings.
        gui: Show fatal errors in a dialog instead of on standard error.
        max_path_length: Longest path any path operation may produce.
        symlink_hop_limit: Maximum symlinks followed while locating the executable.
    """

    version: str = _DEFAULT_VERSION
    prefix: str = _DEFAULT_PREFIX
    exec_prefix: str | None = None
    library_dir: str | None = None
    landmark: str = "os.py"
    vpath: str = "."
    build_marker: str = "Modules/Setup"
    build_library_dir: str = "Lib"
    dynload_dir: str = "lib-dynload"
    default_path: str | None = None
    archive_name: str = "library.zip"
    prefix_archive_name: str = "lib/python00.zip"
    archive_anchor: str = "prefix"
    strategy: str = "simple"
    entry_module: str = "__main__"
    home_env_var: str = "PYTHONHOME"
    path_env_var: str = "PYTHONPATH"
    ignore_environment: bool = False
    optimize: bool = False
    quiet_discovery: bool = False
    gui: bool = False
    max_path_length: int = DEFAULT_MAX_PATH_LENGTH
    symlink_hop_limit: int = DEFAULT_SYMLINK_HOP_LIMIT

    @property
    def effective_exec_prefix(self) -> str:
        """Return the compiled-in exec-prefix, falling back to the prefix."""

        return self.exec_prefix if self.exec_prefix is not None else self.prefix

    @property
    def effective_library_dir(self) -> str:
        """Return the library directory below a prefix."""

        if self.library_dir is not None:
            return self.library_dir
        return f"lib/python{self.version}"

    def effective_default_path(self, flavor: PathFlavor | None = None) -> str:
        """Return the default search-path template."""

        if self.default_path is not None:
            return self.default_path
        resolved_flavor = flavor or self.flavor()
        library_dir = self.effective_library_dir
        sep = resolved_flavor.sep
        return (
            f"{self.prefix}{sep}{library_dir}"
            f"{resolved_flavor.delim}"
            f"{self.effective_exec_prefix}{sep}{library_dir}{sep}{self.dynload_dir}"
        )

    def flavor(self) -> PathFlavor:
        """Return the native path flavor bounded by `max_path_length`."""

        return PathFlavor.native(max_length=self.max_path_length)

    def runtime_home(self, environ: Mapping[str, str]) -> str | None:
        """Return the runtime-home override, or `None` when absent or ignored."""

        if self.ignore_environment:
            return None
        return normalize_override(environ.get(self.home_env_var))

    def runtime_path(self, environ: Mapping[str, str]) -> str | None:
        """Return the runtime search-path override, or `None` when absent or ignored."""

        if self.ignore_environment:
            return None
        return normalize_override(environ.get(self.path_env_var))

    def validate(self) -> None:
        """Validate build constants before any path discovery runs."""

        if self.strategy not in SUPPORTED_STRATEGIES:
            raise ConfigError(
                f"`strategy` must be one of {sorted(SUPPORTED_STRATEGIES)}, got `{self.strategy}`."
            )
        if self.archive_anchor not in SUPPORTED_ARCHIVE_ANCHORS:
            raise ConfigError(
                "`archive_anchor` must be one of "
                f"{sorted(SUPPORTED_ARCHIVE_ANCHORS)}, got `{self.archive_anchor}`."
            )
        for field_name in (
            "prefix",
            "landmark",
            "build_marker",
            "build_library_dir",
            "dynload_dir",
            "archive_name",
            "entry_module",
            "home_env_var",
            "path_env_var",
        ):
            self._require_non_empty(getattr(self, field_name), field_name)
        self._require_non_empty(self.effective_library_dir, "library_dir")
        if len(self.version) < 3:
            raise ConfigError("`version` must look like `<major>.<minor>`.")
        if len(self.prefix_archive_name) < 6:
            raise ConfigError("`prefix_archive_name` must be at least 6 characters long.")
        if self.max_path_length <= 0:
            raise ConfigError("`max_path_length` must be a positive integer.")
        if self.symlink_hop_limit <= 0:
            raise ConfigError("`symlink_hop_limit` must be a positive integer.")

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        """Ensure a required string field is not blank."""

        if normalize_override(value) is None:
            raise ConfigError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `LoaderConfig` from external sources."""

    CONFIG_PATH_ENV_KEY = "FREEZELOADER_CONFIG"
    _BOOLEAN_KEYS = frozenset({"ignore_environment", "optimize", "quiet_discovery", "gui"})
    _INTEGER_KEYS = frozenset({"max_path_length", "symlink_hop_limit"})
    _ENV_KEYS = {
        "FREEZELOADER_STRATEGY": "strategy",
        "FREEZELOADER_PREFIX": "prefix",
        "FREEZELOADER_EXEC_PREFIX": "exec_prefix",
        "FREEZELOADER_VERSION": "version",
        "FREEZELOADER_ARCHIVE_ANCHOR": "archive_anchor",
        "FREEZELOADER_ENTRY_MODULE": "entry_module",
        "FREEZELOADER_IGNORE_ENVIRONMENT": "ignore_environment",
        "FREEZELOADER_OPTIMIZE": "optimize",
        "FREEZELOADER_QUIET_DISCOVERY": "quiet_discovery",
        "FREEZELOADER_GUI": "gui",
    }

    @staticmethod
    def from_yaml(path: Path, base: LoaderConfig | None = None) -> LoaderConfig:
        """Create a validated config from a YAML file."""

        raw_text = path.read_text(encoding="utf-8")
        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML config `{path}` is not valid YAML: {exc}") from exc
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ConfigError(f"YAML config `{path}` must contain a mapping/object.")
        return ConfigLoader.from_mapping(payload, source_label=f"YAML `{path}`", base=base)

    @staticmethod
    def from_env(
        env: Mapping[str, str] | None = None,
        base: LoaderConfig | None = None,
    ) -> LoaderConfig:
        """Apply `FREEZELOADER_*` environment overrides onto `base`."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload: dict[str, Any] = {}
        for env_key, field_name in ConfigLoader._ENV_KEYS.items():
            value = normalize_override(env_map.get(env_key))
            if value is not None:
                payload[field_name] = value
        return ConfigLoader.from_mapping(payload, source_label="environment", base=base)

    @staticmethod
    def load(
        config_path: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> LoaderConfig:
        """Resolve config from an optional YAML file, then environment overrides."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        resolved_path = config_path
        if resolved_path is None:
            env_path = normalize_override(env_map.get(ConfigLoader.CONFIG_PATH_ENV_KEY))
            if env_path is not None:
                resolved_path = Path(env_path)

        base = ConfigLoader.from_yaml(resolved_path) if resolved_path is not None else None
        return ConfigLoader.from_env(env_map, base=base)

    @staticmethod
    def from_mapping(
        payload: Mapping[str, Any],
        source_label: str,
        base: LoaderConfig | None = None,
    ) -> LoaderConfig:
        """Build a validated config by applying `payload` onto `base`."""

        known_keys = {config_field.name for config_field in fields(LoaderConfig)}
        unknown = sorted(str(key) for key in payload if key not in known_keys)
        if unknown:
            raise ConfigError(f"{source_label} contains unsupported keys: {', '.join(unknown)}.")

        overrides: dict[str, Any] = {}
        for key, raw_value in payload.items():
            if key in ConfigLoader._BOOLEAN_KEYS:
                overrides[key] = ConfigLoader._boolean_value(raw_value, key, source_label)
            elif key in ConfigLoader._INTEGER_KEYS:
                overrides[key] = ConfigLoader._positive_int_value(raw_value, key, source_label)
            else:
                overrides[key] = ConfigLoader._string_value(raw_value, key, source_label)

        config = replace(base if base is not None else LoaderConfig(), **overrides)
        config.validate()
        return config

    @staticmethod
    def _string_value(raw_value: object, key: str, source_label: str) -> str | None:
        """Read a string field; `null` is allowed only for derived fields."""

        if raw_value is None:
            if key in {"exec_prefix", "library_dir", "default_path"}:
                return None
            raise ConfigError(f"{source_label} field `{key}` must be a string.")
        if isinstance(raw_value, bool) or not isinstance(raw_value, (str, int, float)):
            raise ConfigError(f"{source_label} field `{key}` must be a string.")
        return str(raw_value)

    @staticmethod
    def _boolean_value(raw_value: object, key: str, source_label: str) -> bool:
        """Read and validate a boolean field."""

        parsed = parse_flag(raw_value)
        if parsed is None:
            raise ConfigError(
                f"{source_label} field `{key}` must be a boolean value "
                "(`true`/`false`, `1`/`0`, `yes`/`no`)."
            )
        return parsed

    @staticmethod
    def _positive_int_value(raw_value: object, key: str, source_label: str) -> int:
        """Read and validate a positive integer field."""

        if isinstance(raw_value, bool):
            raise ConfigError(f"{source_label} field `{key}` must be a positive integer.")
        try:
            parsed = int(str(raw_value).strip())
        except ValueError as exc:
            raise ConfigError(
                f"{source_label} field `{key}` must be a positive integer."
            ) from exc
        if parsed <= 0:
            raise ConfigError(f"{source_label} field `{key}` must be a positive integer.")
        return parsed
