"""
Navigator service for the coverage solver.

Breadth-first searches over bot poses: shortest path to a goal cell and the
greedy coverage search that picks the nearest pose where the arms paint
something. Search nodes live in one flat list and point at their
predecessor by index.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from coverbots.common.geometry import NEIGHBOR_DELTAS, Orientation, Pose, manhattan
from coverbots.solver.state import next_pose
from coverbots.solver.types import (
    MOVE_ACTIONS,
    MOVE_DOWN,
    MOVE_LEFT,
    MOVE_RIGHT,
    MOVE_UP,
    TURN_CCW,
    TURN_CW,
    Action,
)

if TYPE_CHECKING:
    from coverbots.solver.grid import Grid
    from coverbots.solver.manipulator import Manipulator
    from coverbots.solver.state import BotState

# Coverage search tries moving straight ahead (in the body frame) first
COVERAGE_ACTION_ORDER: dict[Orientation, tuple[Action, ...]] = {
    Orientation.A0: (MOVE_UP, MOVE_DOWN, MOVE_RIGHT, MOVE_LEFT, TURN_CW, TURN_CCW),
    Orientation.A90: (MOVE_RIGHT, MOVE_LEFT, MOVE_DOWN, MOVE_UP, TURN_CW, TURN_CCW),
    Orientation.A180: (MOVE_DOWN, MOVE_UP, MOVE_LEFT, MOVE_RIGHT, TURN_CW, TURN_CCW),
    Orientation.A270: (MOVE_LEFT, MOVE_RIGHT, MOVE_UP, MOVE_DOWN, TURN_CW, TURN_CCW),
}


@dataclass
class SearchNode:
    """One generated pose; ``prev`` is the predecessor index (-1 at the root)."""

    pose: Pose
    depth: int
    prev: int = -1
    action: Optional[Action] = None
    mark_count: int = 0
    adjacent_open: int = 0


@dataclass
class SearchResult:
    """A goal node plus the node arena needed to walk back to the root."""

    nodes: list[SearchNode]
    index: int

    @property
    def node(self) -> SearchNode:
        return self.nodes[self.index]

    @property
    def pose(self) -> Pose:
        return self.node.pose

    @property
    def depth(self) -> int:
        return self.node.depth

    def first_action(self) -> Action:
        node = self.node
        while node.depth > 1:
            node = self.nodes[node.prev]
        if node.action is None:
            raise ValueError("search result has no actions")
        return node.action

    def actions(self) -> list[Action]:
        actions: list[Action] = []
        node = self.node
        while node.prev >= 0 and node.action is not None:
            actions.append(node.action)
            node = self.nodes[node.prev]
        actions.reverse()
        return actions


def mark_count(pose: Pose, manipulators: list[Manipulator], grid: Grid) -> int:
    """Number of arms that would paint an open cell at ``pose``."""
    return sum(1 for m in manipulators if m.can_mark(pose, grid))


def adjacent_open_count(pose: Pose, manipulators: list[Manipulator], grid: Grid) -> int:
    """Open cells next to the arm tips at ``pose``, not counting the tips."""
    tips = {m.tip(pose) for m in manipulators}
    adjacent: set[tuple[int, int]] = set()
    for x, y in tips:
        for dx, dy in NEIGHBOR_DELTAS:
            cell = (x + dx, y + dy)
            if grid.is_open(cell):
                adjacent.add(cell)
    return len(adjacent - tips)


def plain_distance(a: tuple[int, int], b: tuple[int, int]) -> int:
    """4-neighbour step count ignoring walls (a BFS on an empty plane is Manhattan)."""
    return manhattan(a, b)


class Navigator:
    """Pose searches against the shared grid."""

    def __init__(self, grid: Grid):
        self._grid = grid

    def step(self, bot: BotState, pose: Pose, action: Action, depth: int) -> Optional[Pose]:
        """Pose reached by ``action`` from a node at ``depth``, or None if blocked.

        Abilities count as usable while their remaining ticks exceed the depth.
        A speed-boosted move slides one extra cell when that cell is passable.
        """
        if not action.is_move:
            return next_pose(pose, action)

        grid = self._grid
        can_drill = bot.drill_ticks > depth
        nxt = pose.moved(action.delta)
        if not grid.in_range(nxt.pos):
            return None
        if not can_drill and not grid.is_free(nxt.pos):
            return None
        if bot.speed_ticks > depth:
            further = nxt.moved(action.delta)
            if grid.in_range(further.pos) and (can_drill or grid.is_free(further.pos)):
                return further
        return nxt

    def find_path(self, bot: BotState, goal: Callable[[tuple[int, int]], bool]) -> Optional[SearchResult]:
        """Shortest move sequence to a cell satisfying ``goal``.

        Only moves are expanded (no turns). The goal is tested on each
        generated pose before the visited check; the start is never tested.
        """
        nodes = [SearchNode(pose=bot.pose, depth=0)]
        visited = {bot.pose}
        queue: deque[int] = deque([0])

        while queue:
            index = queue.popleft()
            current = nodes[index]
            for action in MOVE_ACTIONS:
                pose = self.step(bot, current.pose, action, current.depth)
                if pose is None:
                    continue
                nodes.append(SearchNode(pose=pose, depth=current.depth + 1, prev=index, action=action))
                if goal(pose.pos):
                    return SearchResult(nodes, len(nodes) - 1)
                if pose not in visited:
                    visited.add(pose)
                    queue.append(len(nodes) - 1)
        return None

    def find_coverage_move(self, bot: BotState) -> Optional[SearchResult]:
        """Nearest pose where at least one arm paints, preferring more paint then more open neighbours.

        Once a candidate exists no new nodes are queued, but the rest of the
        candidate's depth is still scored so ties at that depth can win.
        """
        grid = self._grid
        nodes = [SearchNode(pose=bot.pose, depth=0)]
        visited = {bot.pose}
        queue: deque[int] = deque([0])
        best: Optional[int] = None

        while queue:
            index = queue.popleft()
            current = nodes[index]
            if best is not None and current.depth >= nodes[best].depth:
                # Children would be deeper than the candidate and can never replace it
                break
            for action in COVERAGE_ACTION_ORDER[current.pose.orientation]:
                pose = self.step(bot, current.pose, action, current.depth)
                if pose is None:
                    continue
                marks = mark_count(pose, bot.manipulators, grid)
                node = SearchNode(
                    pose=pose,
                    depth=current.depth + 1,
                    prev=index,
                    action=action,
                    mark_count=marks,
                    # Only candidates are ranked by adjacency
                    adjacent_open=adjacent_open_count(pose, bot.manipulators, grid) if marks else 0,
                )
                nodes.append(node)
                if node.mark_count > 0:
                    if best is None:
                        best = len(nodes) - 1
                    elif self._beats(node, nodes[best]):
                        best = len(nodes) - 1
                if best is None and pose not in visited:
                    visited.add(pose)
                    queue.append(len(nodes) - 1)

        return None if best is None else SearchResult(nodes, best)

    @staticmethod
    def _beats(node: SearchNode, best: SearchNode) -> bool:
        if node.depth != best.depth:
            return False
        if node.mark_count != best.mark_count:
            return node.mark_count > best.mark_count
        return node.adjacent_open > best.adjacent_open
