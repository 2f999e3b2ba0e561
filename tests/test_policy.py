"""
Tests for the coverage solver turn loop.

Expected action logs were traced by hand on the small arenas from conftest.
"""

from __future__ import annotations

import io
import json

import pytest
from conftest import (
    CLONE_CORRIDOR,
    CORRIDOR,
    EXTENSION_ROOM,
    NOOK,
    PILLAR,
    SPEED_CORRIDOR,
    SPLIT_CORRIDOR,
    SQUARE,
    WALLED_ROOM,
)

from coverbots.errors import StuckError
from coverbots.solver.config import SolverConfig
from coverbots.solver.manipulator import DEFAULT_OFFSETS
from coverbots.solver.policy import CoverageSolver, solve_arena
from coverbots.solver.state import BotState
from coverbots.solver.types import AbilityKind, Cell, Order, OrderKind


class TestCoverage:
    def test_corridor(self):
        solution = CoverageSolver.from_text(CORRIDOR, arena_id=3).solve()
        assert solution.solution == "DDD"
        assert solution.score == 3
        assert solution.filename == "prob-003-score-00000003-ai-drill.sol"

    @pytest.mark.parametrize("text", [SQUARE, NOOK, PILLAR], ids=["square", "nook", "pillar"])
    def test_paints_everything(self, text):
        solver = CoverageSolver.from_text(text)
        solution = solver.solve()
        assert solver.grid.open_cell_count == 0
        assert solver.grid.count_cells(Cell.OPEN) == 0
        assert solution.score == len(solver.bots[0].log)
        assert solution.solution == solver.dump_log()

    @pytest.mark.parametrize("text", [PILLAR, CLONE_CORRIDOR], ids=["pillar", "clone-corridor"])
    def test_open_counter_tracks_grid_every_turn(self, text):
        """Drive the tick loop by hand and recount open cells after each bot acts."""
        solver = CoverageSolver.from_text(text)
        grid = solver.grid
        solver.bots[0].mark_grid(grid)
        counts = [grid.open_cell_count]
        while grid.open_cell_count:
            solver.coordinator.rebalance_orders(solver.bots)
            for index in range(len(solver.bots)):
                if grid.open_cell_count == 0:
                    break
                solver._take_turn(solver.bots[index])
                assert grid.count_cells(Cell.OPEN) == grid.open_cell_count
                counts.append(grid.open_cell_count)
        assert counts == sorted(counts, reverse=True)
        if text == CLONE_CORRIDOR:
            assert len(solver.bots) == 2

    def test_unreachable_cells_get_stuck(self):
        with pytest.raises(StuckError):
            CoverageSolver.from_text(SPLIT_CORRIDOR).solve()

    def test_unreachable_order_target_gets_stuck(self):
        solver = CoverageSolver.from_text(SPLIT_CORRIDOR)
        solver.bots[0].order = Order(OrderKind.MOVE_TO_SPEED_PICKUP, (4, 0))
        with pytest.raises(StuckError, match="bot 0"):
            solver.solve()

    def test_solve_arena(self):
        assert solve_arena(9, CORRIDOR).id == 9


class TestPickups:
    def test_speed_boost(self):
        solver = CoverageSolver.from_text(SPEED_CORRIDOR)
        solution = solver.solve()
        # Walk two steps, attach, then every move covers two cells
        assert solution.solution == "DDFDDDD"
        assert solver.bots[0].speed_ticks == 46

    def test_near_pickup_respects_horizon(self):
        solver = CoverageSolver.from_text("(0,0),(8,0),(8,1),(0,1)#(0,0)##F(7,0)")
        bot = solver.bots[0]
        assert solver._find_pickup(bot, (AbilityKind.SPEED_BOOST,), 5) is None
        result = solver._find_pickup(bot, (AbilityKind.SPEED_BOOST,), 7)
        assert result is not None and result.depth == 7

    def test_manipulator_extension(self):
        solver = CoverageSolver.from_text(EXTENSION_ROOM)
        solution = solver.solve()
        assert solution.solution.startswith("DB(1,2)")
        assert len(solver.bots[0].manipulators) == 5
        assert solver.grid.open_cell_count == 0

    def test_drill_when_configured(self):
        config = SolverConfig(near_ability_kinds=(AbilityKind.DRILL,))
        solver = CoverageSolver.from_text("(0,0),(6,0),(6,1),(0,1)#(0,0)##L(2,0)", config=config)
        assert solver.solve().solution == "DDLDD"
        assert solver.bots[0].drill_ticks == 28

    def test_drill_ignored_by_default(self):
        solver = CoverageSolver.from_text("(0,0),(6,0),(6,1),(0,1)#(0,0)##L(2,0)")
        assert "L" not in solver.solve().solution
        assert solver.coordinator.has_any((AbilityKind.DRILL,))

    def test_teleport_is_ignored(self):
        plain = CoverageSolver.from_text(CORRIDOR).solve()
        with_teleport = CoverageSolver.from_text(CORRIDOR + "R(3,0)").solve()
        assert with_teleport.solution == plain.solution


class TestCloning:
    def test_clone_corridor(self):
        solver = CoverageSolver.from_text(CLONE_CORRIDOR)
        solution = solver.solve()
        # Fetch the cloner, step back onto the spot, clone; the clone trails one step behind
        assert solution.solution == "DACDDDDDDDD#DDDDDDD"
        assert solution.score == 11
        assert len(solver.bots) == 2

    def test_clone_starts_fresh(self):
        solver = CoverageSolver.from_text(CLONE_CORRIDOR)
        solver.solve()
        clone = solver.bots[1]
        assert clone.bot_id == 1
        assert [m.offset for m in clone.manipulators] == list(DEFAULT_OFFSETS)
        assert (clone.speed_ticks, clone.drill_ticks) == (0, 0)

    def test_mystery_spot_is_not_consumed(self):
        solver = CoverageSolver.from_text(CLONE_CORRIDOR)
        solver.solve()
        assert solver.coordinator.is_mystery((0, 0))

    def test_handoff_ignores_walls(self):
        """An idle bot that is close in plain steps takes a trip even when its real path is longer."""
        solver = CoverageSolver.from_text(WALLED_ROOM)
        busy = BotState.spawn(0, (9, 2))
        busy.order = Order(OrderKind.MOVE_TO_MYSTERY_TARGET, (6, 0))
        idle = BotState.spawn(1, (4, 0))
        solver.bots = [busy, idle]

        def on_target(pos):
            return pos == (6, 0)

        assert solver.navigator.find_path(busy, on_target).depth == 5
        assert solver.navigator.find_path(idle, on_target).depth == 6

        assert solver.coordinator.rebalance_orders(solver.bots) == 1
        assert busy.is_idle
        assert idle.order == Order(OrderKind.MOVE_TO_MYSTERY_TARGET, (6, 0))


class TestDebugTrace:
    def test_trace_lines(self):
        out = io.StringIO()
        solver = CoverageSolver.from_text(CORRIDOR, config=SolverConfig(debug=2), debug_output=out)
        solver.solve()
        lines = out.getvalue().splitlines()
        assert "[coverbots:debug] t=1 open=2 bots=1 orders=0" in lines
        assert "[coverbots:debug]   b=0 (1,0)@0 spd=0 drl=0 ord=- act=D" in lines
        assert "[coverbots:debug] t=2 open=1 rate=1.0/t bots=1 orders=0" in lines

    def test_summary_line(self):
        out = io.StringIO()
        CoverageSolver.from_text(CORRIDOR, arena_id=4, config=SolverConfig(debug=1), debug_output=out).solve()
        last = out.getvalue().splitlines()[-1]
        prefix, payload = last.split(" ", 1)
        assert prefix == "[coverbots:debug:summary]"
        summary = json.loads(payload)
        assert summary["arena"] == 4
        assert summary["score"] == 3
        assert [entry["open"] for entry in summary["coverage_timeline"]] == [2, 1, 0]

    def test_level_one_skips_bot_detail(self):
        out = io.StringIO()
        CoverageSolver.from_text(CORRIDOR, config=SolverConfig(debug=1), debug_output=out).solve()
        assert "b=0" not in out.getvalue()

    def test_disabled_by_default(self, capsys):
        CoverageSolver.from_text(CORRIDOR).solve()
        assert capsys.readouterr().err == ""
