"""Services for the coverage solver."""

from .coordinator import AbilityCoordinator
from .navigator import Navigator, SearchNode, SearchResult

__all__ = ["AbilityCoordinator", "Navigator", "SearchNode", "SearchResult"]
