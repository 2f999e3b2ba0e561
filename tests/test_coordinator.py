"""Tests for the shared pickup pool and order handoff."""

from __future__ import annotations

from coverbots.solver.arena import Ability
from coverbots.solver.services.coordinator import AbilityCoordinator
from coverbots.solver.state import BotState
from coverbots.solver.types import AbilityKind, Order, OrderKind

SPEED = AbilityKind.SPEED_BOOST
CLONER = AbilityKind.CLONING


def make_coordinator() -> AbilityCoordinator:
    return AbilityCoordinator.from_abilities(
        [
            Ability((1, 1), SPEED),
            Ability((2, 2), CLONER),
            Ability((3, 3), AbilityKind.MYSTERY),
            Ability((4, 4), AbilityKind.TELEPORT),
        ]
    )


class TestPickupPool:
    def test_mystery_spots_are_not_pickups(self):
        coord = make_coordinator()
        assert coord.is_mystery((3, 3))
        assert (3, 3) not in coord.pool

    def test_offers_filters_by_kind(self):
        coord = make_coordinator()
        assert coord.offers((1, 1), (SPEED,))
        assert not coord.offers((1, 1), (CLONER,))
        assert not coord.offers((0, 0), (SPEED, CLONER))

    def test_claim_happens_once(self):
        coord = make_coordinator()
        assert coord.claim((1, 1)) is SPEED
        assert coord.claim((1, 1)) is None
        assert not coord.has_any((SPEED,))

    def test_has_any(self):
        coord = make_coordinator()
        assert coord.has_any((AbilityKind.MANIPULATOR_EXTENSION, CLONER))
        assert not coord.has_any((AbilityKind.DRILL,))


class TestRebalance:
    def _bots(self, busy_pos, idle_pos, kind=OrderKind.MOVE_TO_CLONE_PICKUP, target=(10, 0)):
        busy = BotState.spawn(0, busy_pos)
        busy.order = Order(kind, target)
        idle = BotState.spawn(1, idle_pos)
        return busy, idle

    def test_closer_idle_bot_takes_over(self):
        busy, idle = self._bots((0, 0), (8, 0))
        assert AbilityCoordinator().rebalance_orders([busy, idle]) == 1
        assert busy.is_idle
        assert idle.order == Order(OrderKind.MOVE_TO_CLONE_PICKUP, (10, 0))

    def test_equal_distance_keeps_order(self):
        busy, idle = self._bots((0, 0), (20, 0))
        assert AbilityCoordinator().rebalance_orders([busy, idle]) == 0
        assert not busy.is_idle

    def test_only_clone_trips_move(self):
        busy, idle = self._bots((0, 0), (9, 0), kind=OrderKind.MOVE_TO_SPEED_PICKUP)
        assert AbilityCoordinator().rebalance_orders([busy, idle]) == 0

    def test_mystery_trip_moves(self):
        busy, idle = self._bots((0, 0), (9, 0), kind=OrderKind.MOVE_TO_MYSTERY_TARGET)
        assert AbilityCoordinator().rebalance_orders([busy, idle]) == 1

    def test_busy_bots_never_receive(self):
        busy, other = self._bots((0, 0), (9, 0))
        other.order = Order(OrderKind.PERFORM_SPEED_BOOST)
        assert AbilityCoordinator().rebalance_orders([busy, other]) == 0

    def test_distance_is_plain_step_count(self):
        """Handoff compares |dx| + |dy| to the target; the coordinator never sees the grid."""
        busy, idle = self._bots((0, 0), (10, 1))
        assert AbilityCoordinator().rebalance_orders([busy, idle]) == 1
