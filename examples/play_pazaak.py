#!/usr/bin/env python3
"""
Play a match of Pazaak against the computer in the terminal.

The side deck is loaded from (and can be saved to) a JSON file, and the
player's record is kept in a stats file between runs.
"""

import argparse
import asyncio
import logging

from pazaak.adapters import CLIAdapter, DummyAdapter
from pazaak.api import PazaakMatch
from pazaak.common.side_deck import SideDeck, available_side_cards
from pazaak.events import EventBus, EngineEventType
from pazaak.storage import SideDeckStore, StatsTracker


def parse_deck(text: str) -> SideDeck:
    """Build a side deck from labels such as ``+3,-2,±4,+1`` (``*`` works for ``±``)."""
    by_label = {card.label: card for card in available_side_cards()}
    labels = [label.strip().replace("*", "±") for label in text.split(",")]
    return SideDeck.from_cards([by_label[label] for label in labels])


async def main():
    parser = argparse.ArgumentParser(description="Play Pazaak against the computer.")
    parser.add_argument(
        "--deck-file",
        default="pazaak-sidedeck.json",
        help="side deck file (default: pazaak-sidedeck.json)",
    )
    parser.add_argument(
        "--stats-file",
        default="pazaak-stats.json",
        help="statistics file (default: pazaak-stats.json)",
    )
    parser.add_argument(
        "--deck",
        help="save a new side deck before playing, e.g. +3,+4,-2,*3",
    )
    parser.add_argument("-n", "--name", default="Player", help="your name")
    parser.add_argument(
        "-s", "--silent", action="store_true", help="let a scripted player stand every turn"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="show debug logs")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    store = SideDeckStore(args.deck_file)
    if args.deck:
        await store.save(parse_deck(args.deck))

    stats = StatsTracker(args.stats_file)
    adapter = DummyAdapter() if args.silent else CLIAdapter()
    config = {"player_name": args.name}
    if args.silent:
        config.update(think_delay=0, action_delay=0, turn_delay=0)

    match = PazaakMatch(
        adapter=adapter, config=config, side_deck_store=store, stats=stats
    )

    event_bus = EventBus.get_instance()
    unsubscribe = event_bus.on(
        EngineEventType.GAME_ENDED,
        lambda data: print(f"\nMatch over after {data['rounds_played']} rounds."),
    )

    await match.initialize()
    try:
        final_state = await match.play_match()
    finally:
        await match.shutdown()
        unsubscribe()

    print(
        f"Final: {final_state['player']['rounds_won']} - "
        f"{final_state['opponent']['rounds_won']}"
    )
    print(stats)


if __name__ == "__main__":
    asyncio.run(main())
