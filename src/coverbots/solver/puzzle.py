"""
Contest puzzle descriptions.

A puzzle asks for an arena that contains every included square and none of
the excluded ones::

    bNum,eNum,tSize,vMin,vMax,mNum,fNum,dNum,rNum,cNum,xNum # iSqs # oSqs
"""

from __future__ import annotations

from dataclasses import dataclass, field

from coverbots.errors import ArenaParseError

from .arena import parse_polygon

HEADER_FIELDS = ("b_num", "e_num", "t_size", "v_min", "v_max", "m_num", "f_num", "d_num", "r_num", "c_num", "x_num")


@dataclass
class Puzzle:
    """Parsed puzzle. ``max_x``/``max_y`` bound every listed square."""

    b_num: int = 0
    e_num: int = 0
    t_size: int = 0
    v_min: int = 0
    v_max: int = 0
    m_num: int = 0
    f_num: int = 0
    d_num: int = 0
    r_num: int = 0
    c_num: int = 0
    x_num: int = 0
    included: list[tuple[int, int]] = field(default_factory=list)
    excluded: list[tuple[int, int]] = field(default_factory=list)
    max_x: int = 0
    max_y: int = 0

    @classmethod
    def parse(cls, text: str) -> Puzzle:
        parts = text.strip().split("#")
        if len(parts) != 3:
            raise ArenaParseError(f"puzzle: expected 3 '#'-separated fields, got {len(parts)}")

        header = parts[0].split(",")
        if len(header) != len(HEADER_FIELDS):
            raise ArenaParseError(f"puzzle: expected {len(HEADER_FIELDS)} header values, got {len(header)}")
        try:
            values = {name: int(value) for name, value in zip(HEADER_FIELDS, header)}
        except ValueError:
            raise ArenaParseError(f"puzzle: bad header {parts[0]!r}") from None

        included = parse_polygon(parts[1])
        excluded = parse_polygon(parts[2])
        squares = included + excluded
        if not squares:
            raise ArenaParseError("puzzle: no squares listed")

        return cls(
            **values,
            included=included,
            excluded=excluded,
            max_x=max(x for x, _ in squares) + 1,
            max_y=max(y for _, y in squares) + 1,
        )

    def render(self) -> str:
        """``o`` for included squares, ``x`` for excluded, highest row first."""
        columns = [[" "] * self.max_y for _ in range(self.max_x)]
        for x, y in self.included:
            columns[x][y] = "o"
        for x, y in self.excluded:
            columns[x][y] = "x"
        return "\n".join(
            "".join(columns[x][y] for x in range(self.max_x)) for y in reversed(range(self.max_y))
        )
