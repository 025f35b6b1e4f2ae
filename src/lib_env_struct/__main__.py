"""Support ``python -m lib_env_struct`` by handing argv to :func:`lib_env_struct.cli.main`."""

from __future__ import annotations

import sys

from .cli import main

if __name__ == "__main__":  # pragma: no cover - exercised via python -m
    sys.exit(main(sys.argv[1:]))
