#!/usr/bin/env python3
"""solve_arenas.py: run the coverbots solver against a contest directory.

Usage:
    python scripts/solve_arenas.py run --id 21
    python scripts/solve_arenas.py run-all --workers 8

Same subcommands as the ``coverbots`` console script.
"""

from __future__ import annotations

import sys

from coverbots.cli import main

if __name__ == "__main__":
    sys.exit(main())
