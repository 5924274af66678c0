"""Data models for bootstrap records."""

from .datatypes import (
    AssembledSearchPath,
    BootstrapContext,
    Discovery,
    DiscoveryOutcome,
    LaunchEnvironment,
    PrefixResolution,
    ResolvedExecutable,
    SearchPathEntry,
)

__all__ = [
    "AssembledSearchPath",
    "BootstrapContext",
    "Discovery",
    "DiscoveryOutcome",
    "LaunchEnvironment",
    "PrefixResolution",
    "ResolvedExecutable",
    "SearchPathEntry",
]
