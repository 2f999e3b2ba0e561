"""
Arena rasterizer and cell grid.

Polygons are filled with a multi-source BFS seeded from the cells just inside
each edge; the matching cells just outside are pre-visited so the fill never
leaks past the boundary. The boundary fill becomes OPEN, obstacle fills are
then carved back to WALL.
"""

from __future__ import annotations

from collections import deque
from typing import Iterable, Optional

import numpy as np

from coverbots.common.geometry import NEIGHBOR_DELTAS
from coverbots.errors import ArenaParseError, InvariantViolation

from .arena import Ability, ArenaDescription
from .types import Cell


def edge_cells(start: tuple[int, int], end: tuple[int, int]) -> list[tuple[tuple[int, int], tuple[int, int]]]:
    """(interior, wall) cell pairs straddling one axis-aligned polygon edge.

    Walking the polygon counter-clockwise keeps the interior on the left.
    """
    (x0, y0), (x1, y1) = start, end
    if x0 == x1 and y0 != y1:
        x = x0
        if y0 < y1:
            return [((x - 1, y), (x, y)) for y in range(y0, y1)]
        return [((x, y), (x - 1, y)) for y in range(y1, y0)]
    if y0 == y1 and x0 != x1:
        y = y0
        if x0 < x1:
            return [((x, y), (x, y - 1)) for x in range(x0, x1)]
        return [((x, y - 1), (x, y)) for x in range(x1, x0)]
    raise ArenaParseError(f"edge {start}->{end} is not axis-aligned")


def fill_polygon(polygon: list[tuple[int, int]]) -> set[tuple[int, int]]:
    """All cells inside a closed axis-aligned polygon."""
    if not polygon:
        raise ArenaParseError("cannot fill an empty polygon")

    visited: set[tuple[int, int]] = set()
    filled: set[tuple[int, int]] = set()
    queue: deque[tuple[int, int]] = deque()

    for i, start in enumerate(polygon):
        end = polygon[(i + 1) % len(polygon)]
        for interior, wall in edge_cells(start, end):
            visited.add(wall)
            visited.add(interior)
            filled.add(interior)
            queue.append(interior)

    # Interior cells of a counter-clockwise polygon stay inside its bounding box
    min_x = min(x for x, _ in polygon)
    max_x = max(x for x, _ in polygon)
    min_y = min(y for _, y in polygon)
    max_y = max(y for _, y in polygon)

    while queue:
        x, y = queue.popleft()
        if not (min_x <= x < max_x and min_y <= y < max_y):
            raise ArenaParseError(f"polygon fill leaked to {(x, y)}; is the polygon closed and counter-clockwise?")
        for dx, dy in NEIGHBOR_DELTAS:
            nxt = (x + dx, y + dy)
            if nxt in visited:
                continue
            visited.add(nxt)
            filled.add(nxt)
            queue.append(nxt)
    return filled


class Grid:
    """Rasterized arena: an int8 ``Cell`` array indexed ``[x, y]``.

    ``open_cell_count`` is maintained incrementally and only ever decreases.
    """

    def __init__(
        self,
        cells: np.ndarray,
        start: tuple[int, int] = (0, 0),
        abilities: Optional[list[Ability]] = None,
        arena_id: int = 0,
    ) -> None:
        self.cells = cells
        self.max_x, self.max_y = cells.shape
        self.start = start
        self.abilities = list(abilities or [])
        self.arena_id = arena_id
        self.open_cell_count = int(np.count_nonzero(cells == Cell.OPEN))

    @classmethod
    def from_arena(cls, arena: ArenaDescription) -> Grid:
        cells = np.full((arena.max_x, arena.max_y), Cell.WALL, dtype=np.int8)
        cls._paint(cells, fill_polygon(arena.boundary), Cell.OPEN, arena.id)
        for obstacle in arena.obstacles:
            cls._paint(cells, fill_polygon(obstacle), Cell.WALL, arena.id)
        grid = cls(cells, start=arena.start, abilities=arena.abilities, arena_id=arena.id)
        if not grid.is_free(arena.start):
            raise ArenaParseError(f"arena {arena.id}: start {arena.start} is not inside the arena")
        for ability in arena.abilities:
            if not grid.in_range(ability.pos):
                raise ArenaParseError(f"arena {arena.id}: {ability.kind.value}{ability.pos} outside the grid")
        return grid

    @staticmethod
    def _paint(cells: np.ndarray, region: Iterable[tuple[int, int]], value: Cell, arena_id: int) -> None:
        max_x, max_y = cells.shape
        for x, y in region:
            if not (0 <= x < max_x and 0 <= y < max_y):
                raise ArenaParseError(f"arena {arena_id}: filled cell {(x, y)} outside {max_x}x{max_y} grid")
            cells[x, y] = value

    # === Cell queries (out-of-range cells are neither open, free nor wall) ===

    def in_range(self, pos: tuple[int, int]) -> bool:
        return 0 <= pos[0] < self.max_x and 0 <= pos[1] < self.max_y

    def is_open(self, pos: tuple[int, int]) -> bool:
        return self.in_range(pos) and self.cells[pos[0], pos[1]] == Cell.OPEN

    def is_free(self, pos: tuple[int, int]) -> bool:
        return self.in_range(pos) and self.cells[pos[0], pos[1]] != Cell.WALL

    def is_wall(self, pos: tuple[int, int]) -> bool:
        return self.in_range(pos) and self.cells[pos[0], pos[1]] == Cell.WALL

    # === Mutation ===

    def drill(self, pos: tuple[int, int]) -> None:
        """Turn a wall into a passable cell. Drilled cells never count as open."""
        if not self.is_wall(pos):
            raise InvariantViolation(f"drill at {pos}: not a wall inside the arena")
        self.cells[pos[0], pos[1]] = Cell.MARKED

    def mark(self, pos: tuple[int, int]) -> bool:
        """Paint an open cell. Returns True if the open count dropped."""
        if not self.is_open(pos):
            return False
        self.cells[pos[0], pos[1]] = Cell.MARKED
        self.open_cell_count -= 1
        return True

    def count_cells(self, cell: Cell) -> int:
        return int(np.count_nonzero(self.cells == cell))

    def render(self) -> str:
        """ASCII dump, highest row first: ``#`` wall, ``.`` open, ``-`` marked."""
        glyphs = {Cell.WALL: "#", Cell.OPEN: ".", Cell.MARKED: "-"}
        columns = [[glyphs[Cell(v)] for v in column] for column in self.cells.tolist()]
        columns[self.start[0]][self.start[1]] = "O"
        for ability in self.abilities:
            columns[ability.pos[0]][ability.pos[1]] = ability.kind.value
        return "\n".join(
            "".join(columns[x][y] for x in range(self.max_x)) for y in reversed(range(self.max_y))
        )
