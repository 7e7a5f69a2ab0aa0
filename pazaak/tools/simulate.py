#!/usr/bin/env python
"""
Pazaak Simulation Tool

Plays headless matches between a threshold strategy on the player's seat and
the computer opponent, then reports win rates, score distributions and bust
rates.

The threshold strategy:
- plays a side card that lands exactly on 20 when it has one;
- stands once its score reaches the threshold, otherwise ends the turn.

Examples:
    # 200 matches standing on 18
    python -m pazaak.tools.simulate --num_matches 200 --stand_at 18

    # Reproducible run with a chart of the score distribution
    python -m pazaak.tools.simulate --num_matches 500 --seed 7 --plot scores.png
"""

import argparse
import asyncio
import json
import logging
import random
import time
from typing import Any, Dict, List, Optional

from pazaak.adapters import DummyAdapter
from pazaak.api import PazaakMatch
from pazaak.common.card import CardKind, Sign
from pazaak.events import EventBus
from pazaak.game.action import ActionType, PlayerAction
from pazaak.game.constants import TARGET_SCORE
from pazaak.simulation.statistics import SimulationStatistics, summarize
from pazaak.storage import StatsTracker

ZERO_DELAYS = {"think_delay": 0, "action_delay": 0, "turn_delay": 0}


def threshold_strategy(stand_at: int):
    """
    Build a DummyAdapter strategy function that stands at ``stand_at``.
    """

    def strategy(
        state: Dict[str, Any], valid_actions: List[ActionType]
    ) -> Optional[PlayerAction]:
        player = state["player"]
        score = player["score"]
        side_cards = [card for card in player["side_cards"] if not card["used"]]

        if ActionType.PLAY_SIDE_CARD in valid_actions:
            for card in side_cards:
                if (
                    card["kind"] in (CardKind.PLUS.value, CardKind.PLUS_MINUS.value)
                    and score + card["value"] == TARGET_SCORE
                ):
                    return PlayerAction.play(card["id"], Sign.PLUS)

        if score >= stand_at and ActionType.STAND in valid_actions:
            return PlayerAction.stand()
        return PlayerAction.end_turn()

    return strategy


async def run_simulation(
    num_matches: int, stand_at: int, seed: Optional[int] = None
) -> SimulationStatistics:
    """
    Play ``num_matches`` headless matches and collect their results.
    """
    rng = random.Random(seed)
    statistics = SimulationStatistics()
    detach = statistics.attach(EventBus.get_instance())
    tracker = StatsTracker()

    try:
        for _ in range(num_matches):
            adapter = DummyAdapter(strategy_function=threshold_strategy(stand_at))
            match = PazaakMatch(adapter=adapter, config=ZERO_DELAYS, stats=tracker, rng=rng)
            await match.initialize()
            await match.play_match()
            await match.shutdown()
    finally:
        detach()

    return statistics


def main():
    parser = argparse.ArgumentParser(
        description="Simulate Pazaak matches against the computer opponent"
    )
    parser.add_argument(
        "--num_matches", type=int, default=100, help="Number of matches to play"
    )
    parser.add_argument("--seed", type=int, help="Random seed for reproducible results")
    parser.add_argument(
        "--stand_at",
        type=int,
        default=18,
        help="Score at which the player's strategy stands",
    )
    parser.add_argument(
        "--plot", type=str, help="Save a chart of the results to the specified file"
    )
    parser.add_argument(
        "--json", action="store_true", help="Print the summary as JSON"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Log engine and opponent activity"
    )

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    start_time = time.time()
    statistics = asyncio.run(run_simulation(args.num_matches, args.stand_at, args.seed))
    elapsed = time.time() - start_time

    summary = summarize(statistics, args.plot)

    if args.json:
        print(json.dumps(summary, indent=2))
        return

    match_rate = summary["match_win_rate"]
    ci = match_rate["confidence_interval"]
    rounds = summary["round_results"]
    print(
        f"Played {summary['matches']} matches ({summary['rounds']} rounds) "
        f"in {elapsed:.1f}s, standing at {args.stand_at}"
    )
    print("\nMatches:")
    print(
        f"  Player win rate: {match_rate['win_rate']*100:.1f}% "
        f"(95% CI {ci['lower']*100:.1f}% - {ci['upper']*100:.1f}%)"
    )
    print(f"  Average rounds per match: {summary['average_rounds_per_match']:.2f}")
    print("\nRounds:")
    print(f"  Player wins: {rounds['player_win_rate']*100:.1f}%")
    print(f"  Opponent wins: {rounds['opponent_win_rate']*100:.1f}%")
    print(f"  Ties: {rounds['tie_rate']*100:.1f}%")

    for seat in ("player", "opponent"):
        scores = summary[f"{seat}_scores"]
        print(f"\n{seat.capitalize()} final scores:")
        print(
            f"  Mean {scores['mean']:.1f} (sd {scores['std']:.1f}), "
            f"median {scores['median']:.0f}"
        )
        print(f"  Busts: {scores['bust_rate']*100:.1f}%")
        print(f"  Exactly 20: {scores['exact_20_rate']*100:.1f}%")

    if args.plot:
        print(f"\nChart saved to {args.plot}")


if __name__ == "__main__":
    main()
