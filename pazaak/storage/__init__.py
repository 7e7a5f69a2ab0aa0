"""
Persisted collaborators of a Pazaak match: the side deck and the player's record.
"""

from pazaak.storage.side_deck_store import SideDeckStore
from pazaak.storage.stats import StatsTracker

__all__ = ["SideDeckStore", "StatsTracker"]
