"""
Bot state for the coverage solver.

BotState holds pose, manipulators, ability timers, the pending order and the
action log, and applies one action at a time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from coverbots.common.geometry import Pose, rotate
from coverbots.errors import InvariantViolation

from .manipulator import Manipulator, default_manipulators
from .types import DEBUG, DRILL_TICKS, SPEED_BOOST_TICKS, Action, ActionKind, Order, extend_manipulator

if TYPE_CHECKING:
    from .grid import Grid


def next_pose(pose: Pose, action: Action) -> Pose:
    """Pose after a move or turn, ignoring walls."""
    if action.is_move:
        return pose.moved(action.delta)
    if action.kind is ActionKind.TURN_CW:
        return pose.turned_cw()
    if action.kind is ActionKind.TURN_CCW:
        return pose.turned_ccw()
    raise ValueError(f"{action} does not change the pose")


@dataclass
class BotState:
    """Complete state for one bot."""

    bot_id: int
    pose: Pose

    # Arms, body-local; the first one is the body itself
    manipulators: list[Manipulator] = field(default_factory=default_manipulators)

    # Remaining ability ticks
    speed_ticks: int = 0
    drill_ticks: int = 0

    # Pending multi-step task (None = idle)
    order: Optional[Order] = None

    # Executed actions, one per turn
    log: list[Action] = field(default_factory=list)

    @classmethod
    def spawn(cls, bot_id: int, pos: tuple[int, int]) -> BotState:
        return cls(bot_id=bot_id, pose=Pose(pos))

    # === Computed properties ===

    @property
    def pos(self) -> tuple[int, int]:
        return self.pose.pos

    @property
    def is_idle(self) -> bool:
        return self.order is None

    def log_string(self) -> str:
        return "".join(str(action) for action in self.log)

    def next_extension_offset(self) -> tuple[int, int]:
        """Body-local spot for the next arm: alternate above and below the front column."""
        n = len(self.manipulators)
        if n % 2 == 0:
            return (1, n // 2)
        return (1, -(n // 2))

    # === Marking ===

    def mark_grid(self, grid: Grid) -> int:
        """Paint every cell the arms can reach from the current pose."""
        targets = [m.tip(self.pose) for m in self.manipulators if m.can_mark(self.pose, grid)]
        return sum(1 for target in targets if grid.mark(target))

    # === Actions ===

    def apply_action(
        self,
        action: Action,
        grid: Grid,
        second_half: bool = False,
        speed_boost_ticks: int = SPEED_BOOST_TICKS,
        drill_ticks: int = DRILL_TICKS,
    ) -> None:
        """Apply one action, advance the order and log it.

        ``second_half`` is the extra step of a speed-boosted move: it never
        fails, it just stays put when blocked, and it is not logged.
        """
        kind = action.kind
        if action.is_move:
            self.pose = self._move(action, grid, second_half)
        elif kind in (ActionKind.TURN_CW, ActionKind.TURN_CCW):
            self.pose = next_pose(self.pose, action)
        elif kind is ActionKind.EXTEND_MANIPULATOR:
            if action.offset is None:
                raise InvariantViolation("extend manipulator without an offset")
            self.manipulators.append(Manipulator(action.offset))
            if DEBUG:
                print(f"[B{self.bot_id}] extend manipulator {action.offset}, arms={len(self.manipulators)}")
        elif kind is ActionKind.ATTACH_SPEED_BOOST:
            self.speed_ticks += speed_boost_ticks
        elif kind is ActionKind.ATTACH_DRILL:
            self.drill_ticks += drill_ticks
        # DO_NOTHING and CLONE have no effect on this bot

        if self.order is not None:
            self.order = self.order.advanced(self.pos)

        if not second_half:
            if kind is ActionKind.EXTEND_MANIPULATOR and action.offset is not None:
                # Logged in the world frame the bot is facing now
                self.log.append(extend_manipulator(rotate(action.offset, self.pose.orientation)))
            else:
                self.log.append(action)

    def _move(self, action: Action, grid: Grid, second_half: bool) -> Pose:
        target = self.pose.moved(action.delta)
        drilling = self.drill_ticks > 0
        if second_half:
            if drilling:
                if not grid.in_range(target.pos):
                    return self.pose
                if grid.is_wall(target.pos):
                    grid.drill(target.pos)
                return target
            return target if grid.is_free(target.pos) else self.pose

        if drilling and grid.is_wall(target.pos):
            grid.drill(target.pos)
        if not grid.is_free(target.pos):
            raise InvariantViolation(f"bot {self.bot_id} cannot move {action} from {self.pos} into {target.pos}")
        return target

    def tick_timers(self, had_speed: bool, had_drill: bool) -> None:
        """Consume one tick of each ability that was active before the turn."""
        if had_speed and self.speed_ticks > 0:
            self.speed_ticks -= 1
        if had_drill and self.drill_ticks > 0:
            self.drill_ticks -= 1
