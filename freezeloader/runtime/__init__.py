"""Hosted-runtime collaborator and archive handoff."""

from .archive import ArchiveBootstrap
from .hosted import HostedRuntime, InProcessRuntime, RuntimeFlags

__all__ = ["ArchiveBootstrap", "HostedRuntime", "InProcessRuntime", "RuntimeFlags"]
