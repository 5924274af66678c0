"""Bootstrap logging and diagnostics."""

from .logger import BootLogger

__all__ = ["BootLogger"]
