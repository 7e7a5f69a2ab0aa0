"""
Persistence of the player's chosen side deck.

The deck is stored as a JSON list of exactly four ``{"kind", "value"}``
records. Anything that cannot be read back as a valid deck is replaced by the
default deck.
"""

import json
import logging
import os

import aiofiles

from pazaak.common.side_deck import InvalidSideDeckError, SideDeck, default_side_deck

logger = logging.getLogger("pazaak.storage")

DEFAULT_SIDE_DECK_PATH = "pazaak-sidedeck.json"


class SideDeckStore:
    """
    Loads and saves the player's side deck from a JSON file.
    """

    def __init__(self, path: str = DEFAULT_SIDE_DECK_PATH):
        self.path = path

    async def load(self) -> SideDeck:
        """
        Load the saved side deck.

        Returns:
            The saved deck, or the default deck if the file is missing,
            unreadable, not JSON or not a valid side deck
        """
        if not os.path.exists(self.path):
            logger.debug("No saved side deck at %s, using the default deck", self.path)
            return default_side_deck()

        try:
            async with aiofiles.open(self.path, mode="r", encoding="utf-8") as f:
                content = await f.read()
            deck = SideDeck.from_records(json.loads(content))
        except (
            OSError,
            UnicodeDecodeError,
            json.JSONDecodeError,
            InvalidSideDeckError,
        ) as e:
            logger.warning(
                "Failed to load side deck from %s (%s), using the default deck",
                self.path,
                e,
            )
            return default_side_deck()

        logger.debug("Loaded side deck %s from %s", deck, self.path)
        return deck

    async def save(self, deck: SideDeck) -> None:
        """
        Save a side deck. Used flags are not persisted.
        """
        async with aiofiles.open(self.path, mode="w", encoding="utf-8") as f:
            await f.write(json.dumps(deck.to_records()))
        logger.info("Saved side deck %s to %s", deck, self.path)
