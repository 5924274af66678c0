"""Module entrypoint for running freezeloader as ``python -m freezeloader``."""

from __future__ import annotations

from freezeloader.cli import main


if __name__ == "__main__":
    main()
