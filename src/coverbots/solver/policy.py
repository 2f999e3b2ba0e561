"""
Coverage solver -- turn-synchronous multi-bot arena painter.

Every bot starts at the arena's start cell and paints with its manipulator
arms as it moves. Each tick, every bot picks one action by walking these
tiers in order:

  1. Pending order   -- keep walking to a claimed pickup, or perform it
  2. Near pickup     -- a speed boost within a few steps
  3. Far pickup      -- manipulator extensions and cloners anywhere on the map
  4. Coverage        -- greedy BFS for the nearest pose that paints something

Clone actions add a new bot that starts acting on the next tick. The solve
ends as soon as no open cell is left.

Usage:
    solver = CoverageSolver.from_file("contest/problem/prob-001.desc", arena_id=1)
    solution = solver.solve()
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Optional, Union

from coverbots.errors import StuckError

from .arena import ArenaDescription, parse_arena, read_arena_file
from .config import SolverConfig
from .debug_logger import DebugLogger
from .grid import Grid
from .services import AbilityCoordinator, Navigator, SearchResult
from .state import BotState
from .types import (
    ABILITY_ORDERS,
    ATTACH_DRILL,
    ATTACH_SPEED_BOOST,
    CLONE,
    DEBUG,
    DO_NOTHING,
    Action,
    AbilityKind,
    ActionKind,
    Order,
    OrderKind,
    Solution,
    extend_manipulator,
)

# Perform orders with a fixed action (the extension offset depends on the bot)
PERFORM_ACTIONS: dict[OrderKind, Action] = {
    OrderKind.PERFORM_CLONE: CLONE,
    OrderKind.PERFORM_SPEED_BOOST: ATTACH_SPEED_BOOST,
    OrderKind.PERFORM_DRILL: ATTACH_DRILL,
}


class CoverageSolver:
    """Owns the grid, the bots and the pickup pool for one arena."""

    def __init__(self, grid: Grid, config: Optional[SolverConfig] = None, debug_output: Any = None) -> None:
        self.config = config or SolverConfig()
        self.grid = grid
        self.navigator = Navigator(grid)
        self.coordinator = AbilityCoordinator.from_abilities(grid.abilities)
        self.bots: list[BotState] = [BotState.spawn(0, grid.start)]
        self.tick = 0

        self._debug: Optional[DebugLogger] = None
        if self.config.debug > 0:
            self._debug = DebugLogger(level=self.config.debug, output=debug_output)

    @classmethod
    def from_arena(cls, arena: ArenaDescription, config: Optional[SolverConfig] = None, **kwargs: Any) -> CoverageSolver:
        return cls(Grid.from_arena(arena), config, **kwargs)

    @classmethod
    def from_text(
        cls, text: str, arena_id: int = 0, config: Optional[SolverConfig] = None, **kwargs: Any
    ) -> CoverageSolver:
        return cls.from_arena(parse_arena(text, arena_id), config, **kwargs)

    @classmethod
    def from_file(
        cls, path: Union[str, Path], arena_id: int = 0, config: Optional[SolverConfig] = None, **kwargs: Any
    ) -> CoverageSolver:
        return cls.from_arena(read_arena_file(path, arena_id), config, **kwargs)

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def solve(self) -> Solution:
        """Run ticks until every open cell is painted."""
        grid = self.grid
        self.bots[0].mark_grid(grid)

        while grid.open_cell_count > 0:
            self.coordinator.rebalance_orders(self.bots)

            # Bots cloned during this tick act from the next one
            for index in range(len(self.bots)):
                if grid.open_cell_count == 0:
                    break
                self._take_turn(self.bots[index])

            self.tick += 1
            if self._debug:
                self._debug.record_coverage(self.tick, grid.open_cell_count, len(self.bots))
                self._debug.flush_tick()

        solution = self.solution()
        if self._debug:
            self._debug.emit_solve_summary(solution.id, solution.score)
        return solution

    def _take_turn(self, bot: BotState) -> None:
        grid = self.grid
        cfg = self.config
        action = self._decide(bot)

        # Abilities active before the action are the ones that tick down
        had_speed = bot.speed_ticks > 0
        had_drill = bot.drill_ticks > 0

        bot.apply_action(action, grid, speed_boost_ticks=cfg.speed_boost_ticks, drill_ticks=cfg.drill_ticks)
        bot.mark_grid(grid)
        if had_speed and action.is_move:
            bot.apply_action(
                action,
                grid,
                second_half=True,
                speed_boost_ticks=cfg.speed_boost_ticks,
                drill_ticks=cfg.drill_ticks,
            )
            bot.mark_grid(grid)
        bot.tick_timers(had_speed, had_drill)

        if action.kind is ActionKind.CLONE:
            clone = BotState.spawn(len(self.bots), bot.pos)
            self.bots.append(clone)
            if DEBUG:
                print(f"[B{bot.bot_id}] cloned B{clone.bot_id} at {clone.pos}")
            if self._debug:
                self._debug.record_event(self.tick + 1, "spawn", clone.bot_id, f"at={clone.pos} by=B{bot.bot_id}")

        if self._debug:
            self._debug.record_bot_tick(
                bot_id=bot.bot_id,
                position=bot.pos,
                orientation=bot.pose.orientation.value,
                action=str(action),
                order=bot.order.kind.value if bot.order else "",
                target=bot.order.target if bot.order else None,
                speed_ticks=bot.speed_ticks,
                drill_ticks=bot.drill_ticks,
                tick=self.tick + 1,
            )

    # ------------------------------------------------------------------
    # Decision tiers
    # ------------------------------------------------------------------

    def _decide(self, bot: BotState) -> Action:
        if bot.order is not None:
            return self._follow_order(bot, bot.order)

        cfg = self.config
        action = self._claim_pickup(bot, cfg.near_ability_kinds, cfg.near_horizon)
        if action is not None:
            return action
        action = self._claim_pickup(bot, cfg.far_ability_kinds)
        if action is not None:
            return action

        result = self.navigator.find_coverage_move(bot)
        if result is not None:
            return result.first_action()
        if bot.speed_ticks > 0:
            # Boosted moves can overshoot every painting pose; wait for the boost to run out
            return DO_NOTHING
        raise StuckError("no reachable open cell", bot.bot_id)

    def _follow_order(self, bot: BotState, order: Order) -> Action:
        if order.is_move:
            assert order.target is not None
            return self._step_towards(bot, order.target)

        if order.kind is OrderKind.AWAIT_MYSTERY_TARGET:
            result = self.navigator.find_path(bot, self.coordinator.is_mystery)
            if result is None:
                raise StuckError("no reachable cloning spot", bot.bot_id)
            bot.order = Order(OrderKind.MOVE_TO_MYSTERY_TARGET, result.pose.pos)
            return result.first_action()

        if order.kind is OrderKind.PERFORM_MANIPULATOR_EXTENSION:
            return extend_manipulator(bot.next_extension_offset())
        return PERFORM_ACTIONS[order.kind]

    def _step_towards(self, bot: BotState, target: tuple[int, int]) -> Action:
        result = self.navigator.find_path(bot, lambda pos: pos == target)
        if result is None:
            raise StuckError(f"no path from {bot.pos} to {target}", bot.bot_id)
        return result.first_action()

    def _claim_pickup(
        self, bot: BotState, kinds: Iterable[AbilityKind], horizon: Optional[int] = None
    ) -> Optional[Action]:
        """Claim the nearest pickup of ``kinds`` and return the first step towards it.

        Returns None when no such pickup is left, none is reachable, the
        nearest one is beyond ``horizon`` steps, or the claim lost a race.
        """
        result = self._find_pickup(bot, tuple(kinds), horizon)
        if result is None:
            return None
        target = result.pose.pos
        kind = self.coordinator.claim(target)
        if kind is None:
            return None
        bot.order = Order(ABILITY_ORDERS[kind], target)
        if DEBUG:
            print(f"[B{bot.bot_id}] claimed {kind.value} at {target} ({result.depth} steps)")
        if self._debug:
            self._debug.record_event(self.tick + 1, "claim", bot.bot_id, f"{kind.value}@{target}")
        return result.first_action()

    def _find_pickup(
        self, bot: BotState, kinds: tuple[AbilityKind, ...], horizon: Optional[int]
    ) -> Optional[SearchResult]:
        if not kinds or not self.coordinator.has_any(kinds):
            return None
        result = self.navigator.find_path(bot, lambda pos: self.coordinator.offers(pos, kinds))
        if result is None:
            return None
        if horizon is not None and result.depth > horizon:
            return None
        return result

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def solution(self) -> Solution:
        return Solution.from_logs(self.grid.arena_id, [bot.log for bot in self.bots])

    def dump_log(self) -> str:
        """Per-bot action strings joined with ``#``."""
        return "#".join(bot.log_string() for bot in self.bots)


def solve_arena(arena_id: int, text: str, config: Optional[SolverConfig] = None) -> Solution:
    """Parse, rasterize and solve one arena."""
    return CoverageSolver.from_text(text, arena_id, config).solve()
