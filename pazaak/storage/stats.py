"""
This module contains the StatsTracker class which keeps the player's
round and match record across matches.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

import aiofiles

from pazaak.game.constants import ROUNDS_TO_WIN
from pazaak.game.state import RoundResult

logger = logging.getLogger("pazaak.storage")


def _percent(part: int, total: int) -> int:
    """Whole percentage, rounding halves up."""
    if total == 0:
        return 0
    return (part * 200 + total) // (total * 2)


class StatsTracker:
    """
    Tracks the player's results.

    Counters are kept from the human player's point of view. When a path is
    given, the counters can be loaded from and saved to a JSON file.
    """

    FIELDS = (
        "matches_won",
        "matches_lost",
        "total_matches",
        "rounds_won",
        "rounds_lost",
        "rounds_tied",
        "win_streak",
        "best_win_streak",
        "perfect_matches",
    )

    def __init__(self, path: Optional[str] = None):
        """
        Initializes the tracker with all counters at zero.
        """
        self.path = path
        self.reset()

    def reset(self) -> None:
        """Set every counter back to zero."""
        for name in self.FIELDS:
            setattr(self, name, 0)

    def record_round(self, result: RoundResult) -> None:
        """Count a finished round."""
        if result is RoundResult.PLAYER_WIN:
            self.rounds_won += 1
        elif result is RoundResult.OPPONENT_WIN:
            self.rounds_lost += 1
        else:
            self.rounds_tied += 1

    def record_match(self, won: bool, opponent_rounds_won: int = 0) -> None:
        """
        Count a finished match.

        A won match where the opponent took no round is a perfect match.
        """
        self.total_matches += 1
        if won:
            self.matches_won += 1
            self.win_streak += 1
            self.best_win_streak = max(self.best_win_streak, self.win_streak)
            if opponent_rounds_won == 0:
                self.perfect_matches += 1
        else:
            self.matches_lost += 1
            self.win_streak = 0

    @property
    def win_rate(self) -> int:
        """Matches won, as a whole percentage of matches played."""
        return _percent(self.matches_won, self.total_matches)

    @property
    def round_win_rate(self) -> int:
        """Rounds won, as a whole percentage of decided rounds."""
        return _percent(self.rounds_won, self.rounds_won + self.rounds_lost)

    def report(self) -> Dict[str, Any]:
        """
        Returns a dictionary containing the current statistics.
        """
        data = {name: getattr(self, name) for name in self.FIELDS}
        data["win_rate"] = self.win_rate
        data["round_win_rate"] = self.round_win_rate
        return data

    async def load(self) -> None:
        """
        Load counters from the stats file.

        Missing keys keep their defaults, so files written before a counter
        existed still load. Without a readable file the counters are left as
        they are.
        """
        if self.path is None or not os.path.exists(self.path):
            return

        try:
            async with aiofiles.open(self.path, mode="r", encoding="utf-8") as f:
                stored = json.loads(await f.read())
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Failed to load stats from %s: %s", self.path, e)
            return

        if not isinstance(stored, dict):
            logger.warning("Ignoring malformed stats file %s", self.path)
            return

        self.reset()
        for name in self.FIELDS:
            value = stored.get(name)
            if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
                setattr(self, name, value)

    async def save(self) -> None:
        """Write the counters to the stats file, if the tracker has one."""
        if self.path is None:
            return
        data = {name: getattr(self, name) for name in self.FIELDS}
        async with aiofiles.open(self.path, mode="w", encoding="utf-8") as f:
            await f.write(json.dumps(data, indent=2))
        logger.debug("Saved stats to %s", self.path)

    def __str__(self) -> str:
        return (
            f"Matches {self.matches_won}-{self.matches_lost} ({self.win_rate}%), "
            f"rounds {self.rounds_won}-{self.rounds_lost}-{self.rounds_tied}, "
            f"best streak {self.best_win_streak}, "
            f"{self.perfect_matches} perfect {ROUNDS_TO_WIN}-0"
        )
