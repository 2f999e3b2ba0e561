"""
Manipulator geometry.

A manipulator is an arm at a fixed body-local offset. It can paint its tip
cell only when every cell on the digital line from the body to the tip is
clear of walls.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from coverbots.common.geometry import Pose

if TYPE_CHECKING:
    from .grid import Grid

DEFAULT_OFFSETS: tuple[tuple[int, int], ...] = ((0, 0), (1, 0), (1, 1), (1, -1))


@functools.cache
def plot(offset: tuple[int, int]) -> tuple[tuple[int, int], ...]:
    """Cells on the line from (0, 0) to ``offset``, both ends included.

    Steps along the major axis and bumps the minor axis when the error term
    crosses zero. A strictly positive error also emits the axis-only corner
    cell, so the path has no diagonal gaps except on exact diagonals.

    >>> plot((2, -1))
    ((0, 0), (1, 0), (1, -1), (2, -1))
    """
    ox, oy = offset
    abs_x, abs_y = abs(ox), abs(oy)
    major, minor = (abs_y, abs_x) if abs_x < abs_y else (abs_x, abs_y)

    points: list[tuple[int, int]] = []
    d = minor - major
    y = 0
    for x in range(major + 1):
        points.append((x, y))
        if d >= 0:
            y += 1
            if d > 0:
                points.append((x, y))
            d -= 2 * major
        d += 2 * minor

    sx = -1 if ox < 0 else 1
    sy = -1 if oy < 0 else 1
    if abs_x < abs_y:
        return tuple((b * sx, a * sy) for a, b in points)
    return tuple((a * sx, b * sy) for a, b in points)


@dataclass(frozen=True)
class Manipulator:
    """Arm at a body-local offset plus its cached line of sight."""

    offset: tuple[int, int]
    reach: tuple[tuple[int, int], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "reach", plot(self.offset))

    def tip(self, pose: Pose) -> tuple[int, int]:
        return pose.at(self.offset)

    def can_mark(self, pose: Pose, grid: Grid) -> bool:
        """Tip cell is open and the line of sight to it is wall-free."""
        if not grid.is_open(pose.at(self.offset)):
            return False
        return not any(grid.is_wall(pose.at(cell)) for cell in self.reach)


def default_manipulators() -> list[Manipulator]:
    return [Manipulator(offset) for offset in DEFAULT_OFFSETS]
