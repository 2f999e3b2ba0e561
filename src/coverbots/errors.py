"""Exceptions raised by the coverbots solver and runner."""

from __future__ import annotations


class CoverbotsError(Exception):
    """Base class for every solver failure."""


class ArenaParseError(CoverbotsError, ValueError):
    """An arena or puzzle description is malformed."""


class StuckError(CoverbotsError):
    """The engine cannot find a next action for a bot."""

    def __init__(self, message: str, bot_id: int | None = None) -> None:
        super().__init__(message if bot_id is None else f"bot {bot_id}: {message}")
        self.bot_id = bot_id


class InvariantViolation(CoverbotsError):
    """Internal state would be corrupted, e.g. a bot walking into a wall without a drill."""
