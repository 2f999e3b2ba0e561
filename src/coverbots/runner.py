"""
Arena library runner.

Reads arenas from a contest directory, solves them, writes solution files and
compares scores against the best known ones. Directory layout under the
library root::

    problem/prob-001.desc    arena descriptions
    solution/                every solve, named by Solution.filename
    lastrun/prob-001.sol     latest solve per arena
    submit/prob-001.sol      candidate submission
    best/prob-001.sol        best known solution
    testrun/                 scratch solves (test-run)

The root defaults to ``./contest`` and can be moved with the
``COVERBOTS_CONTEST_DIR`` environment variable or ``--contest-dir``.
"""

from __future__ import annotations

import concurrent.futures
import os
import re
import shutil
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from coverbots.errors import CoverbotsError
from coverbots.solver.arena import ArenaDescription, read_arena_file
from coverbots.solver.config import SolverConfig
from coverbots.solver.policy import CoverageSolver
from coverbots.solver.types import Solution

CONTEST_DIR_ENV = "COVERBOTS_CONTEST_DIR"
DEFAULT_CONTEST_DIR = "contest"
LAST_ARENA_ID = 300

# Manipulator offsets don't count towards a solution's length
POSITION_RE = re.compile(r"\(-?\d+,-?\d+\)")


@dataclass(frozen=True)
class Library:
    """Contest directory with problems, solutions and best scores."""

    root: Path

    @classmethod
    def from_env(cls, root: Optional[str | Path] = None) -> Library:
        if root is None:
            root = os.environ.get(CONTEST_DIR_ENV, DEFAULT_CONTEST_DIR)
        return cls(Path(root))

    def problem(self, arena_id: int) -> Path:
        return self.root / "problem" / f"prob-{arena_id:03d}.desc"

    def solution(self, filename: str) -> Path:
        return self.root / "solution" / filename

    def lastrun(self, arena_id: int) -> Path:
        return self.root / "lastrun" / f"prob-{arena_id:03d}.sol"

    def submit(self, arena_id: int) -> Path:
        return self.root / "submit" / f"prob-{arena_id:03d}.sol"

    def best(self, arena_id: int) -> Path:
        return self.root / "best" / f"prob-{arena_id:03d}.sol"

    def testrun(self, filename: str) -> Path:
        return self.root / "testrun" / filename


@dataclass
class BatchResult:
    """Outcome of run_all: solutions and per-arena failure messages."""

    solutions: dict[int, Solution] = field(default_factory=dict)
    failures: dict[int, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def read_arena(arena_id: int, library: Library) -> ArenaDescription:
    return read_arena_file(library.problem(arena_id), arena_id)


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def write_solution(solution: Solution, library: Library) -> list[Path]:
    """Write to ``solution/<filename>`` and ``lastrun/prob-NNN.sol``."""
    paths = [library.solution(solution.filename), library.lastrun(solution.id)]
    for path in paths:
        _write(path, solution.solution)
    return paths


def solution_score(text: str) -> int:
    """Longest per-bot action count, with ``(dx,dy)`` groups removed."""
    return max(len(part) for part in POSITION_RE.sub("", text.strip()).split("#"))


def read_solution(arena_id: int, path: str | Path) -> Solution:
    path = Path(path)
    text = path.read_text(encoding="utf-8").strip()
    return Solution(id=arena_id, score=solution_score(text), solution=text, filename=str(path))


def best_score_for(arena_id: int, library: Library) -> Optional[int]:
    """Score of the best known solution, or None when there is none yet."""
    path = library.best(arena_id)
    if not path.exists():
        return None
    return read_solution(arena_id, path).score


def update_best(library: Library, ids: Iterable[int]) -> list[int]:
    """Promote submissions that beat (or have no) best solution. Returns the promoted ids."""
    updated: list[int] = []
    for arena_id in ids:
        submit_path = library.submit(arena_id)
        if not submit_path.exists():
            continue
        submitted = read_solution(arena_id, submit_path)
        best = best_score_for(arena_id, library)
        if best is not None and submitted.score >= best:
            continue
        if best is not None:
            print(f"Updating... id: {arena_id}, submit score: {submitted.score} < best score: {best}")
        best_path = library.best(arena_id)
        best_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(submit_path, best_path)
        updated.append(arena_id)
    return updated


def report(library: Library, ids: Iterable[int]) -> list[str]:
    """Score lines for ``lastrun`` and ``submit`` against the best known scores."""
    ids = list(ids)
    lines: list[str] = []
    for folder, path_for in (("lastrun", library.lastrun), ("submit", library.submit)):
        lines.append(f"{folder}:")
        for arena_id in ids:
            path = path_for(arena_id)
            if not path.exists():
                continue
            score = read_solution(arena_id, path).score
            best = best_score_for(arena_id, library)
            if best is None:
                mark = ""
            elif score < best:
                mark = "(New!)"
            elif score == best:
                mark = "(*)"
            else:
                mark = ""
            lines.append(f"id: {arena_id:03d}, score: {score} (best: {best or 0}) {mark}".rstrip())
    for line in lines:
        print(line)
    return lines


# ---------------------------------------------------------------------------
# Solving
# ---------------------------------------------------------------------------


def solve(arena_id: int, library: Library, config: Optional[SolverConfig] = None) -> Solution:
    return CoverageSolver.from_arena(read_arena(arena_id, library), config).solve()


def done_line(solution: Solution, best: Optional[int]) -> str:
    if best is None:
        return f"> Done: id: {solution.id:03d}, score: {solution.score}"
    if solution.score == best:
        return f"> Done: id: {solution.id:03d}, score: {solution.score}, best_score: {best} (=)"
    if solution.score < best:
        return f"> Done: id: {solution.id:03d}, score: {solution.score}, best_score: {best} (New!)"
    return f"> Done: id: {solution.id:03d}, score: {solution.score}, best_score: {best}"


def run(arena_id: int, library: Library, config: Optional[SolverConfig] = None) -> Solution:
    """Solve one arena, write its solution files and compare with the best score."""
    print(f"> Solving: {arena_id}", flush=True)
    solution = solve(arena_id, library, config)
    write_solution(solution, library)
    print(done_line(solution, best_score_for(arena_id, library)), flush=True)
    return solution


def test_run(arena_id: int, library: Library, config: Optional[SolverConfig] = None) -> Solution:
    """Solve one arena and write the result to ``testrun/`` only."""
    print(f"> Solving: {arena_id}", flush=True)
    solution = solve(arena_id, library, config)
    print(done_line(solution, None), flush=True)
    path = library.testrun(solution.filename)
    _write(path, solution.solution)
    print(f"write solution: {path}")
    return solution


# Not collected as a test despite the name
test_run.__test__ = False  # type: ignore[attr-defined]


def run_all(
    ids: Iterable[int],
    library: Library,
    workers: Optional[int] = None,
    config: Optional[SolverConfig] = None,
) -> BatchResult:
    """Solve many arenas in a process pool. One arena failing never stops the others."""
    ids = list(ids)
    result = BatchResult()
    start = time.time()

    if workers == 1:
        for arena_id in ids:
            try:
                result.solutions[arena_id] = run(arena_id, library, config)
            except (CoverbotsError, OSError) as exc:
                result.failures[arena_id] = f"{type(exc).__name__}: {exc}"
                print(f"> Failed: id: {arena_id:03d}, {result.failures[arena_id]}", file=sys.stderr)
    else:
        with concurrent.futures.ProcessPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(run, arena_id, library, config): arena_id for arena_id in ids}
            for future in concurrent.futures.as_completed(futures):
                arena_id = futures[future]
                try:
                    result.solutions[arena_id] = future.result()
                except Exception as exc:
                    result.failures[arena_id] = f"{type(exc).__name__}: {exc}"
                    print(f"> Failed: id: {arena_id:03d}, {result.failures[arena_id]}", file=sys.stderr)

    total = sum(s.score for s in result.solutions.values())
    print(
        f"> Batch: {len(result.solutions)} solved, {len(result.failures)} failed, "
        f"total score {total} in {time.time() - start:.1f}s"
    )
    return result
