"""
Solver configuration.

``SolverConfig`` can be built directly, from keyword params, or from a
``coverbots://solver?key=value`` URI like the ones the batch runner accepts.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any
from urllib.parse import parse_qsl, urlparse

from .types import ABILITY_ORDERS, DRILL_TICKS, NEAR_ABILITY_HORIZON, SPEED_BOOST_TICKS, AbilityKind

URI_SCHEME = "coverbots"


def _parse_kinds(value: Any) -> tuple[AbilityKind, ...]:
    if isinstance(value, str):
        return tuple(AbilityKind(letter) for letter in value.replace(",", "") if letter.strip())
    return tuple(AbilityKind(v) if not isinstance(v, AbilityKind) else v for v in value)


@dataclass
class SolverConfig:
    """Tunables for the coverage engine.

    Attributes:
        near_ability_kinds: Pickups grabbed opportunistically when close (default: speed boost)
        near_horizon: Max path length for the near pickup search (default: 5)
        far_ability_kinds: Pickups fetched from anywhere on the map (default: manipulator, cloning)
        speed_boost_ticks: Turns granted by a speed boost (default: 50)
        drill_ticks: Turns granted by a drill (default: 30)
        debug: DebugLogger verbosity, 0 disables tracing (default: 0)
    """

    near_ability_kinds: tuple[AbilityKind, ...] = (AbilityKind.SPEED_BOOST,)
    near_horizon: int = NEAR_ABILITY_HORIZON
    far_ability_kinds: tuple[AbilityKind, ...] = field(
        default_factory=lambda: (AbilityKind.MANIPULATOR_EXTENSION, AbilityKind.CLONING)
    )
    speed_boost_ticks: int = SPEED_BOOST_TICKS
    drill_ticks: int = DRILL_TICKS
    debug: int = 0

    def __post_init__(self) -> None:
        for kind in (*self.near_ability_kinds, *self.far_ability_kinds):
            if kind not in ABILITY_ORDERS:
                claimable = "".join(k.value for k in ABILITY_ORDERS)
                raise ValueError(f"{kind.name} pickups cannot be claimed; choose from {claimable!r}")
        if self.near_horizon < 0:
            raise ValueError(f"near_horizon must be >= 0, got {self.near_horizon}")

    @classmethod
    def from_params(cls, **params: Any) -> SolverConfig:
        """Build from loosely typed params (strings from a URI or the CLI).

        Ability kinds are given as letters, e.g. ``near_ability_kinds="FL"``.
        Unknown keys raise ``ValueError``.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(params) - known)
        if unknown:
            raise ValueError(f"Unknown solver params: {', '.join(unknown)}. Available: {', '.join(sorted(known))}")
        kwargs: dict[str, Any] = {}
        for key, value in params.items():
            if key.endswith("_kinds"):
                kwargs[key] = _parse_kinds(value)
            else:
                kwargs[key] = int(value)
        return cls(**kwargs)


def parse_config_uri(uri: str) -> SolverConfig:
    """Parse ``coverbots://solver?near_horizon=3&debug=1``."""
    parsed = urlparse(uri)
    if parsed.scheme != URI_SCHEME:
        raise ValueError(f"Unsupported config URI scheme '{parsed.scheme}', expected '{URI_SCHEME}'")
    return SolverConfig.from_params(**dict(parse_qsl(parsed.query)))
