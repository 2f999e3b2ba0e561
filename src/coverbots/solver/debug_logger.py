"""
Debug tracing for the coverage solver.

Structured, per-tick debug output for diagnosing solves. Verbosity levels
(``SolverConfig.debug`` or ``-v`` on the command line):
    0: disabled (default)
    1: per-tick summary: open cells left, bot count, orders in flight
    2: full detail: per-bot pose/order/action plus spawn and claim events

All output lines are prefixed with ``[coverbots:debug]`` so they can be
grepped out of mixed output.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from typing import Any, Optional

# ---------------------------------------------------------------------------
# Per-bot tick record
# ---------------------------------------------------------------------------


@dataclass
class BotTickRecord:
    """Snapshot of one bot's turn."""

    bot_id: int
    position: tuple[int, int]
    orientation: int
    action: str
    order: str = ""
    target: Optional[tuple[int, int]] = None
    speed_ticks: int = 0
    drill_ticks: int = 0


# ---------------------------------------------------------------------------
# Coverage progress
# ---------------------------------------------------------------------------


@dataclass
class CoverageHistory:
    """Open-cell count after each tick."""

    history: list[tuple[int, int]] = field(default_factory=list)

    def record(self, tick: int, open_cells: int) -> None:
        self.history.append((tick, open_cells))

    def latest(self) -> Optional[int]:
        return self.history[-1][1] if self.history else None

    def rate(self, window: int = 10) -> Optional[float]:
        """Average cells painted per tick over the last *window* entries."""
        recent = self.history[-window:]
        if len(recent) < 2:
            return None
        painted = recent[0][1] - recent[-1][1]
        ticks = recent[-1][0] - recent[0][0]
        return painted / ticks if ticks else None


@dataclass
class BotEvent:
    """A spawn or a pickup claim."""

    tick: int
    kind: str
    bot_id: int
    detail: str = ""


# ---------------------------------------------------------------------------
# DebugLogger
# ---------------------------------------------------------------------------


class DebugLogger:
    """Collects and emits structured debug output each tick.

    The engine calls :meth:`record_bot_tick` after every bot turn and
    :meth:`flush_tick` once all bots have acted.

    Parameters
    ----------
    level : int
        Verbosity level (1 or 2).
    output : file-like, optional
        Where to write output. Defaults to ``sys.stderr`` so it stays out of
        the solver's stdout report.
    """

    PREFIX = "[coverbots:debug]"

    def __init__(self, level: int = 1, output: Any = None) -> None:
        self.level = level
        self._out = output if output is not None else sys.stderr

        # Per-tick accumulator, cleared on flush
        self._tick_records: list[BotTickRecord] = []
        self._current_tick: int = 0

        # Persistent trackers
        self._coverage = CoverageHistory()
        self._events: list[BotEvent] = []
        self._bot_count: int = 0

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_bot_tick(
        self,
        bot_id: int,
        position: tuple[int, int],
        orientation: int,
        action: str,
        order: str = "",
        target: Optional[tuple[int, int]] = None,
        speed_ticks: int = 0,
        drill_ticks: int = 0,
        tick: int = 0,
    ) -> None:
        """Record a single bot's turn."""
        self._current_tick = max(self._current_tick, tick)
        self._tick_records.append(
            BotTickRecord(
                bot_id=bot_id,
                position=position,
                orientation=orientation,
                action=action,
                order=order,
                target=target,
                speed_ticks=speed_ticks,
                drill_ticks=drill_ticks,
            )
        )

    def record_event(self, tick: int, kind: str, bot_id: int, detail: str = "") -> None:
        """Record a spawn or a pickup claim."""
        self._events.append(BotEvent(tick=tick, kind=kind, bot_id=bot_id, detail=detail))

    def record_coverage(self, tick: int, open_cells: int, bot_count: int) -> None:
        self._current_tick = max(self._current_tick, tick)
        self._coverage.record(tick, open_cells)
        self._bot_count = bot_count

    # ------------------------------------------------------------------
    # Flush (called once per tick after all bots acted)
    # ------------------------------------------------------------------

    def flush_tick(self) -> None:
        """Emit debug output for the current tick and reset accumulators."""
        tick = self._current_tick
        if not self._tick_records and not self._coverage.history:
            return

        # --- Level 1: coverage summary ---
        parts: list[str] = [f"t={tick}"]
        open_cells = self._coverage.latest()
        if open_cells is not None:
            parts.append(f"open={open_cells}")
            rate = self._coverage.rate()
            if rate is not None:
                parts.append(f"rate={rate:.1f}/t")
        parts.append(f"bots={self._bot_count}")
        busy = sum(1 for rec in self._tick_records if rec.order)
        parts.append(f"orders={busy}")
        self._emit(" ".join(parts))

        # --- Level 2: per-bot detail + events ---
        if self.level >= 2:
            for rec in sorted(self._tick_records, key=lambda r: r.bot_id):
                tgt = f" tgt={rec.target}" if rec.target else ""
                self._emit(
                    f"  b={rec.bot_id} "
                    f"({rec.position[0]},{rec.position[1]})@{rec.orientation} "
                    f"spd={rec.speed_ticks} drl={rec.drill_ticks} "
                    f"ord={rec.order or '-'} "
                    f"act={rec.action}{tgt}"
                )
            for ev in (e for e in self._events if e.tick == tick):
                self._emit(f"  {ev.kind} b={ev.bot_id} {ev.detail}".rstrip())

        self._tick_records.clear()

    # ------------------------------------------------------------------
    # End-of-solve summary
    # ------------------------------------------------------------------

    def summary(self) -> dict[str, Any]:
        return {
            "total_ticks": self._current_tick,
            "bots": self._bot_count,
            "coverage_timeline": [{"tick": t, "open": n} for t, n in self._coverage.history],
            "events": [
                {"tick": ev.tick, "kind": ev.kind, "bot_id": ev.bot_id, "detail": ev.detail} for ev in self._events
            ],
        }

    def emit_solve_summary(self, arena_id: int, score: int) -> None:
        """One JSON line prefixed with ``[coverbots:debug:summary]``."""
        summary = {"arena": arena_id, "score": score, **self.summary()}
        line = json.dumps(summary, separators=(",", ":"))
        print(f"[coverbots:debug:summary] {line}", file=self._out, flush=True)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _emit(self, msg: str) -> None:
        print(f"{self.PREFIX} {msg}", file=self._out, flush=True)
