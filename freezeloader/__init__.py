"""Top-level package for freezeloader.

This package resolves the module search path of a frozen application bundle
from its own executable location and hands off to the bundle's archive entry
point. The main entry points are `launch` and `SearchPathCalculator`.
"""

from .launcher import launch
from .paths.strategy import SearchPathCalculator

__all__ = ["SearchPathCalculator", "__version__", "launch"]

__version__ = "0.1.0"
