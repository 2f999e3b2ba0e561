from __future__ import annotations

from enum import Enum
from typing import NamedTuple

# Arena coordinates: x grows to the right, y grows upwards.
MOVE_DELTAS: dict[str, tuple[int, int]] = {
    "up": (0, 1),
    "down": (0, -1),
    "left": (-1, 0),
    "right": (1, 0),
}

# Flood-fill and adjacency order.
NEIGHBOR_DELTAS: tuple[tuple[int, int], ...] = ((1, 0), (0, 1), (-1, 0), (0, -1))


class Orientation(Enum):
    """Body orientation, in clockwise degrees."""

    A0 = 0
    A90 = 90
    A180 = 180
    A270 = 270

    def turned_cw(self) -> Orientation:
        return Orientation((self.value + 90) % 360)

    def turned_ccw(self) -> Orientation:
        return Orientation((self.value + 270) % 360)


def rotate(offset: tuple[int, int], orientation: Orientation) -> tuple[int, int]:
    """Rotate a body-local offset into the world frame."""
    dx, dy = offset
    if orientation is Orientation.A0:
        return (dx, dy)
    if orientation is Orientation.A90:
        return (dy, -dx)
    if orientation is Orientation.A180:
        return (-dx, -dy)
    return (-dy, dx)


def translate(pos: tuple[int, int], offset: tuple[int, int]) -> tuple[int, int]:
    return (pos[0] + offset[0], pos[1] + offset[1])


class Pose(NamedTuple):
    """Position plus orientation; hashable so it can key search visited sets."""

    pos: tuple[int, int]
    orientation: Orientation = Orientation.A0

    def at(self, offset: tuple[int, int]) -> tuple[int, int]:
        """World cell of a body-local offset."""
        return translate(self.pos, rotate(offset, self.orientation))

    def moved(self, delta: tuple[int, int]) -> Pose:
        return Pose(translate(self.pos, delta), self.orientation)

    def turned_cw(self) -> Pose:
        return Pose(self.pos, self.orientation.turned_cw())

    def turned_ccw(self) -> Pose:
        return Pose(self.pos, self.orientation.turned_ccw())


def manhattan(a: tuple[int, int], b: tuple[int, int]) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])
