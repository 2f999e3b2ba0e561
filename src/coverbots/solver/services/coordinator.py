"""
Ability coordinator for the coverage solver.

Owns the shared pickup pool and hands tasks between bots:
1. Pickup claims - a pickup leaves the pool exactly once, when a bot commits to it
2. Mystery spots - cloning targets that are never consumed
3. Order rebalancing - idle bots take over clone trips they are closer to

Usage:
    coordinator = AbilityCoordinator.from_abilities(grid.abilities)

    if coordinator.has_any(kinds):
        kind = coordinator.claim(pos)
    coordinator.rebalance_orders(bots)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional

from coverbots.solver.types import DEBUG, TRANSFERABLE_ORDERS, AbilityKind

from .navigator import plain_distance

if TYPE_CHECKING:
    from coverbots.solver.arena import Ability
    from coverbots.solver.state import BotState


class AbilityCoordinator:
    """Shared pickup pool for all bots of one solve."""

    def __init__(
        self,
        pool: Optional[dict[tuple[int, int], AbilityKind]] = None,
        mystery_positions: Optional[set[tuple[int, int]]] = None,
    ) -> None:
        self.pool: dict[tuple[int, int], AbilityKind] = dict(pool or {})
        self.mystery_positions: set[tuple[int, int]] = set(mystery_positions or ())

    @classmethod
    def from_abilities(cls, abilities: Iterable[Ability]) -> AbilityCoordinator:
        pool: dict[tuple[int, int], AbilityKind] = {}
        mystery: set[tuple[int, int]] = set()
        for ability in abilities:
            if ability.kind is AbilityKind.MYSTERY:
                mystery.add(ability.pos)
            else:
                pool[ability.pos] = ability.kind
        return cls(pool, mystery)

    # === Pickup pool ===

    def has_any(self, kinds: Iterable[AbilityKind]) -> bool:
        wanted = set(kinds)
        return any(kind in wanted for kind in self.pool.values())

    def offers(self, pos: tuple[int, int], kinds: Iterable[AbilityKind]) -> bool:
        """Is there an unclaimed pickup of one of ``kinds`` at ``pos``?"""
        kind = self.pool.get(pos)
        return kind is not None and kind in kinds

    def claim(self, pos: tuple[int, int]) -> Optional[AbilityKind]:
        """Remove and return the pickup at ``pos``; None if it is already gone."""
        return self.pool.pop(pos, None)

    def is_mystery(self, pos: tuple[int, int]) -> bool:
        return pos in self.mystery_positions

    # === Order handoff ===

    def rebalance_orders(self, bots: list[BotState]) -> int:
        """Hand clone trips from busy bots to strictly closer idle bots.

        Distances ignore walls, unlike every other search.
        Returns the number of transfers.
        """
        transfers = 0
        for a in bots:
            for b in bots:
                if self._maybe_transfer(a, b):
                    transfers += 1
        return transfers

    @staticmethod
    def _maybe_transfer(a: BotState, b: BotState) -> bool:
        order = a.order
        if order is None or b.order is not None or order.kind not in TRANSFERABLE_ORDERS:
            return False
        if order.target is None:
            return False
        if plain_distance(a.pos, order.target) <= plain_distance(b.pos, order.target):
            return False
        a.order = None
        b.order = order
        if DEBUG:
            print(f"[B{a.bot_id}] hands {order.kind.value} {order.target} to B{b.bot_id}")
        return True
