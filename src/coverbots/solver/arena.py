"""
Arena description parsing.

An arena is four ``#``-separated fields::

    boundary # start # obstacles # abilities

e.g. ``(0,0),(6,0),(6,1),(8,1),(8,2),(6,2),(6,3),(0,3)#(0,0)##B(3,1);F(5,2)``.
Polygons are ``(x,y),(x,y),...``, obstacles and abilities are ``;``-separated,
and an ability is a kind letter followed by a position.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from coverbots.errors import ArenaParseError

from .types import AbilityKind


@dataclass(frozen=True)
class Ability:
    pos: tuple[int, int]
    kind: AbilityKind


@dataclass
class ArenaDescription:
    """Parsed arena, before rasterization."""

    id: int
    boundary: list[tuple[int, int]]
    start: tuple[int, int]
    obstacles: list[list[tuple[int, int]]] = field(default_factory=list)
    abilities: list[Ability] = field(default_factory=list)

    @property
    def max_x(self) -> int:
        if not self.boundary:
            raise ArenaParseError(f"arena {self.id}: empty boundary")
        return max(x for x, _ in self.boundary)

    @property
    def max_y(self) -> int:
        if not self.boundary:
            raise ArenaParseError(f"arena {self.id}: empty boundary")
        return max(y for _, y in self.boundary)


def _parse_int(text: str, context: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise ArenaParseError(f"bad integer {text!r} in {context!r}") from None


def parse_position(s: str) -> tuple[int, int]:
    """``(3,4)`` -> ``(3, 4)``."""
    s = s.strip()
    if len(s) < 5 or s[0] != "(" or s[-1] != ")":
        raise ArenaParseError(f"bad position {s!r}")
    parts = s[1:-1].split(",")
    if len(parts) != 2:
        raise ArenaParseError(f"bad position {s!r}")
    return (_parse_int(parts[0], s), _parse_int(parts[1], s))


def parse_polygon(s: str) -> list[tuple[int, int]]:
    """``(0,0),(10,0),(10,10)`` -> vertex list; empty string -> ``[]``."""
    s = s.strip()
    if not s:
        return []
    if s[0] != "(" or s[-1] != ")":
        raise ArenaParseError(f"bad polygon {s!r}")
    return [parse_position(f"({point})") for point in s[1:-1].split("),(")]


def parse_obstacles(s: str) -> list[list[tuple[int, int]]]:
    if not s.strip():
        return []
    return [parse_polygon(part) for part in s.split(";")]


def parse_ability(s: str) -> Ability:
    """``F(4,2)`` -> speed boost at (4, 2)."""
    s = s.strip()
    if not s:
        raise ArenaParseError("empty ability token")
    try:
        kind = AbilityKind(s[0])
    except ValueError:
        raise ArenaParseError(f"unknown ability kind {s[0]!r} in {s!r}") from None
    return Ability(pos=parse_position(s[1:]), kind=kind)


def parse_abilities(s: str) -> list[Ability]:
    if not s.strip():
        return []
    return [parse_ability(part) for part in s.split(";")]


def parse_arena(text: str, arena_id: int = 0) -> ArenaDescription:
    fields_ = text.strip().split("#")
    if len(fields_) != 4:
        raise ArenaParseError(f"arena {arena_id}: expected 4 '#'-separated fields, got {len(fields_)}")
    boundary = parse_polygon(fields_[0])
    if not boundary:
        raise ArenaParseError(f"arena {arena_id}: empty boundary")
    return ArenaDescription(
        id=arena_id,
        boundary=boundary,
        start=parse_position(fields_[1]),
        obstacles=parse_obstacles(fields_[2]),
        abilities=parse_abilities(fields_[3]),
    )


def read_arena_file(path: Path | str, arena_id: int = 0) -> ArenaDescription:
    """Read and parse an arena file. I/O errors propagate as ``OSError``."""
    return parse_arena(Path(path).read_text(encoding="utf-8"), arena_id)
