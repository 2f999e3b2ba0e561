"""Coverage solver: arena rasterizer, bot state machine and turn-synchronous engine."""

from coverbots.solver.arena import Ability, ArenaDescription, parse_arena, read_arena_file
from coverbots.solver.config import SolverConfig, parse_config_uri
from coverbots.solver.grid import Grid
from coverbots.solver.policy import CoverageSolver, solve_arena
from coverbots.solver.puzzle import Puzzle
from coverbots.solver.types import Solution

__all__ = [
    "Ability",
    "ArenaDescription",
    "CoverageSolver",
    "Grid",
    "Puzzle",
    "Solution",
    "SolverConfig",
    "parse_arena",
    "parse_config_uri",
    "read_arena_file",
    "solve_arena",
]
