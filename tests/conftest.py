"""Shared fixtures for coverbots tests.

Arena texts are small enough to trace by hand; tests that assert exact
action logs depend on them staying unchanged.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from coverbots.runner import Library
from coverbots.solver.grid import Grid
from coverbots.solver.arena import parse_arena

# 4x4 room, start in the corner
SQUARE = "(0,0),(4,0),(4,4),(0,4)#(0,0)##"

# 8x3 room with a 2-cell nook on the right
NOOK = "(0,0),(6,0),(6,1),(8,1),(8,2),(6,2),(6,3),(0,3)#(0,0)##"

# 10x10 room with a 2x5 pillar
PILLAR = "(0,0),(10,0),(10,10),(0,10)#(0,0)#(4,2),(6,2),(6,7),(4,7)#"

# 5x1 corridor
CORRIDOR = "(0,0),(5,0),(5,1),(0,1)#(0,0)##"

# 5x1 corridor cut in two by a wall at x=2
SPLIT_CORRIDOR = "(0,0),(5,0),(5,1),(0,1)#(0,0)#(2,0),(3,0),(3,1),(2,1)#"

# 10x1 corridor with a cloner next to the start and a cloning spot on it
CLONE_CORRIDOR = "(0,0),(10,0),(10,1),(0,1)#(0,0)##C(1,0);X(0,0)"

# 12x1 corridor with a speed boost two steps away
SPEED_CORRIDOR = "(0,0),(12,0),(12,1),(0,1)#(0,0)##F(2,0)"

# 6x3 room with a manipulator extension next to the start
EXTENSION_ROOM = "(0,0),(6,0),(6,3),(0,3)#(0,0)##B(1,0)"

# 10x3 room with a 1x2 wall at x=5 that only row 2 gets past
WALLED_ROOM = "(0,0),(10,0),(10,3),(0,3)#(0,0)#(5,0),(6,0),(6,2),(5,2)#X(6,0)"


def make_grid(text: str, arena_id: int = 0) -> Grid:
    return Grid.from_arena(parse_arena(text, arena_id))


@pytest.fixture
def square_grid() -> Grid:
    return make_grid(SQUARE)


@pytest.fixture
def nook_grid() -> Grid:
    return make_grid(NOOK)


@pytest.fixture
def pillar_grid() -> Grid:
    return make_grid(PILLAR)


@pytest.fixture
def library(tmp_path: Path) -> Library:
    """Empty contest directory with a single corridor arena as problem 1."""
    problem = tmp_path / "problem"
    problem.mkdir()
    (problem / "prob-001.desc").write_text(CORRIDOR + "\n")
    return Library(tmp_path)
