"""
Types and constants for the coverage solver.

Cell states, ability kinds, actions, orders and the solution record.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

from coverbots.common.geometry import MOVE_DELTAS

# Debug flag for ad-hoc prints (structured tracing lives in DebugLogger)
DEBUG = False

SPEED_BOOST_TICKS = 50
DRILL_TICKS = 30
NEAR_ABILITY_HORIZON = 5  # Max path length for opportunistic pickups


class Cell(IntEnum):
    """Grid cell states (stored as int8 in the grid array)."""

    WALL = 0
    OPEN = 1  # Traversable, not yet painted
    MARKED = 2  # Painted, or drilled through


class AbilityKind(Enum):
    """Pickup kinds, keyed by their letter in arena descriptions."""

    MANIPULATOR_EXTENSION = "B"
    SPEED_BOOST = "F"
    DRILL = "L"
    MYSTERY = "X"  # Cloning spot, never consumed
    TELEPORT = "R"  # Parsed but never used by the engine
    CLONING = "C"


class ActionKind(Enum):
    """Bot actions, valued by their log letter."""

    MOVE_UP = "W"
    MOVE_DOWN = "S"
    MOVE_LEFT = "A"
    MOVE_RIGHT = "D"
    DO_NOTHING = "Z"
    TURN_CW = "E"
    TURN_CCW = "Q"
    EXTEND_MANIPULATOR = "B"
    ATTACH_SPEED_BOOST = "F"
    ATTACH_DRILL = "L"
    CLONE = "C"


ACTION_DELTAS: dict[ActionKind, tuple[int, int]] = {
    ActionKind.MOVE_UP: MOVE_DELTAS["up"],
    ActionKind.MOVE_DOWN: MOVE_DELTAS["down"],
    ActionKind.MOVE_LEFT: MOVE_DELTAS["left"],
    ActionKind.MOVE_RIGHT: MOVE_DELTAS["right"],
}


@dataclass(frozen=True)
class Action:
    """One bot action. Only EXTEND_MANIPULATOR carries an offset (body-local)."""

    kind: ActionKind
    offset: Optional[tuple[int, int]] = None

    @property
    def is_move(self) -> bool:
        return self.kind in ACTION_DELTAS

    @property
    def delta(self) -> tuple[int, int]:
        return ACTION_DELTAS[self.kind]

    def __str__(self) -> str:
        if self.kind is ActionKind.EXTEND_MANIPULATOR:
            dx, dy = self.offset or (0, 0)
            return f"B({dx},{dy})"
        return self.kind.value


MOVE_UP = Action(ActionKind.MOVE_UP)
MOVE_DOWN = Action(ActionKind.MOVE_DOWN)
MOVE_LEFT = Action(ActionKind.MOVE_LEFT)
MOVE_RIGHT = Action(ActionKind.MOVE_RIGHT)
DO_NOTHING = Action(ActionKind.DO_NOTHING)
TURN_CW = Action(ActionKind.TURN_CW)
TURN_CCW = Action(ActionKind.TURN_CCW)
ATTACH_SPEED_BOOST = Action(ActionKind.ATTACH_SPEED_BOOST)
ATTACH_DRILL = Action(ActionKind.ATTACH_DRILL)
CLONE = Action(ActionKind.CLONE)

MOVE_ACTIONS: tuple[Action, ...] = (MOVE_UP, MOVE_DOWN, MOVE_LEFT, MOVE_RIGHT)


def extend_manipulator(offset: tuple[int, int]) -> Action:
    return Action(ActionKind.EXTEND_MANIPULATOR, offset)


class OrderKind(Enum):
    """Deferred multi-step tasks a bot commits to."""

    MOVE_TO_MANIPULATOR_PICKUP = "move_to_manipulator_pickup"
    PERFORM_MANIPULATOR_EXTENSION = "perform_manipulator_extension"
    MOVE_TO_CLONE_PICKUP = "move_to_clone_pickup"
    AWAIT_MYSTERY_TARGET = "await_mystery_target"
    MOVE_TO_MYSTERY_TARGET = "move_to_mystery_target"
    PERFORM_CLONE = "perform_clone"
    MOVE_TO_SPEED_PICKUP = "move_to_speed_pickup"
    PERFORM_SPEED_BOOST = "perform_speed_boost"
    MOVE_TO_DRILL_PICKUP = "move_to_drill_pickup"
    PERFORM_DRILL = "perform_drill"


# Move order -> state entered on arrival at its target
ARRIVAL_TRANSITIONS: dict[OrderKind, OrderKind] = {
    OrderKind.MOVE_TO_MANIPULATOR_PICKUP: OrderKind.PERFORM_MANIPULATOR_EXTENSION,
    OrderKind.MOVE_TO_CLONE_PICKUP: OrderKind.AWAIT_MYSTERY_TARGET,
    OrderKind.MOVE_TO_MYSTERY_TARGET: OrderKind.PERFORM_CLONE,
    OrderKind.MOVE_TO_SPEED_PICKUP: OrderKind.PERFORM_SPEED_BOOST,
    OrderKind.MOVE_TO_DRILL_PICKUP: OrderKind.PERFORM_DRILL,
}

PERFORM_ORDERS: frozenset[OrderKind] = frozenset(
    {
        OrderKind.PERFORM_MANIPULATOR_EXTENSION,
        OrderKind.PERFORM_CLONE,
        OrderKind.PERFORM_SPEED_BOOST,
        OrderKind.PERFORM_DRILL,
    }
)

# Orders that may be handed to a closer idle bot
TRANSFERABLE_ORDERS: frozenset[OrderKind] = frozenset(
    {OrderKind.MOVE_TO_MYSTERY_TARGET, OrderKind.MOVE_TO_CLONE_PICKUP}
)

# Claimed pickup kind -> order the claiming bot commits to
ABILITY_ORDERS: dict[AbilityKind, OrderKind] = {
    AbilityKind.MANIPULATOR_EXTENSION: OrderKind.MOVE_TO_MANIPULATOR_PICKUP,
    AbilityKind.CLONING: OrderKind.MOVE_TO_CLONE_PICKUP,
    AbilityKind.SPEED_BOOST: OrderKind.MOVE_TO_SPEED_PICKUP,
    AbilityKind.DRILL: OrderKind.MOVE_TO_DRILL_PICKUP,
}


@dataclass(frozen=True)
class Order:
    """A bot's pending task; ``target`` is set for the move states only."""

    kind: OrderKind
    target: Optional[tuple[int, int]] = None

    @property
    def is_move(self) -> bool:
        return self.kind in ARRIVAL_TRANSITIONS

    @property
    def is_perform(self) -> bool:
        return self.kind in PERFORM_ORDERS

    def advanced(self, pos: tuple[int, int]) -> Optional[Order]:
        """Order state after an action left the bot at ``pos`` (None = idle)."""
        if self.is_move:
            if pos == self.target:
                return Order(ARRIVAL_TRANSITIONS[self.kind])
            return self
        if self.is_perform:
            return None
        # AWAIT_MYSTERY_TARGET only changes when the engine picks a target
        return self


@dataclass(frozen=True)
class Solution:
    """Final score and serialized action logs of one solve."""

    id: int
    score: int
    solution: str
    filename: str

    @classmethod
    def from_logs(cls, arena_id: int, logs: list[list[Action]], tag: str = "ai-drill") -> Solution:
        """Score is the longest log in actions, not characters."""
        score = max((len(log) for log in logs), default=0)
        return cls(
            id=arena_id,
            score=score,
            solution="#".join("".join(str(action) for action in log) for log in logs),
            filename=f"prob-{arena_id:03d}-score-{score:08d}-{tag}.sol",
        )
