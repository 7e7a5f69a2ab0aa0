"""
Statistics for headless Pazaak simulations.

This module collects round and match results from the event bus while
simulated matches run, and summarises them: win rates with confidence
intervals, final-score distributions and bust rates, and an optional chart.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import scipy.stats as stats

from pazaak.events import EngineEventType, EventEmitter
from pazaak.game.constants import TARGET_SCORE

ROUND_COLUMNS = [
    "match",
    "round_number",
    "result",
    "player_score",
    "player_busted",
    "opponent_score",
    "opponent_busted",
]

MATCH_COLUMNS = [
    "match",
    "winner",
    "rounds_played",
    "player_rounds_won",
    "opponent_rounds_won",
]


@dataclass
class ConfidenceInterval:
    """
    Represents a confidence interval with lower and upper bounds.

    Attributes:
        lower: The lower bound of the confidence interval
        upper: The upper bound of the confidence interval
        confidence: The confidence level (e.g., 0.95 for 95% confidence)
    """

    lower: float
    upper: float
    confidence: float

    def contains(self, value: float) -> bool:
        """Check if the interval contains a value."""
        return self.lower <= value <= self.upper

    def to_dict(self) -> Dict[str, float]:
        """Convert to a dictionary."""
        return {"lower": self.lower, "upper": self.upper, "confidence": self.confidence}


def calculate_confidence_interval(
    values: List[float], confidence: float = 0.95
) -> ConfidenceInterval:
    """
    Calculate a confidence interval for the mean of a set of values.

    Args:
        values: The values to calculate the confidence interval for
        confidence: The confidence level (e.g., 0.95 for 95% confidence)

    Returns:
        A ConfidenceInterval object. With fewer than two values, or no
        spread, the interval collapses onto the mean.
    """
    if not values:
        return ConfidenceInterval(0.0, 0.0, confidence)

    mean = float(np.mean(values))
    if len(values) < 2 or np.all(np.asarray(values) == values[0]):
        return ConfidenceInterval(mean, mean, confidence)

    std_err = stats.sem(values)
    margin = std_err * stats.t.ppf((1 + confidence) / 2, len(values) - 1)
    return ConfidenceInterval(float(mean - margin), float(mean + margin), confidence)


class SimulationStatistics:
    """
    Collects the outcome of every simulated round and match.

    Call `attach` before the matches run; the ROUND_ENDED and GAME_ENDED
    events are recorded until the returned function is called.
    """

    def __init__(self):
        self.rounds: List[Dict[str, Any]] = []
        self.matches: List[Dict[str, Any]] = []

    def attach(self, event_bus: EventEmitter) -> Callable[[], None]:
        """
        Start recording results from an event bus.

        Returns:
            Function that stops the recording
        """
        unsubscribers = [
            event_bus.on(EngineEventType.ROUND_ENDED, self.record_round),
            event_bus.on(EngineEventType.GAME_ENDED, self.record_match),
        ]

        def detach():
            for unsubscribe in unsubscribers:
                unsubscribe()

        return detach

    def record_round(self, data: Dict[str, Any]) -> None:
        row = {column: data.get(column) for column in ROUND_COLUMNS[1:]}
        row["match"] = len(self.matches) + 1
        self.rounds.append(row)

    def record_match(self, data: Dict[str, Any]) -> None:
        row = {column: data.get(column) for column in MATCH_COLUMNS[1:]}
        row["match"] = len(self.matches) + 1
        self.matches.append(row)

    def rounds_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.rounds, columns=ROUND_COLUMNS)

    def matches_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.matches, columns=MATCH_COLUMNS)

    def match_win_rate(self, confidence: float = 0.95) -> Dict[str, Any]:
        """
        Share of matches won by the player, with a confidence interval.
        """
        df = self.matches_frame()
        outcomes = (df["winner"] == "player").astype(int).tolist()
        return {
            "win_rate": float(np.mean(outcomes)) if outcomes else 0.0,
            "confidence_interval": calculate_confidence_interval(
                outcomes, confidence
            ).to_dict(),
            "sample_size": len(outcomes),
        }

    def round_results(self) -> Dict[str, Any]:
        """
        Share of rounds won, lost and tied by the player.

        The confidence interval is for the player's share of decided rounds.
        """
        df = self.rounds_frame()
        total = len(df)
        if total == 0:
            return {
                "player_win_rate": 0.0,
                "opponent_win_rate": 0.0,
                "tie_rate": 0.0,
                "confidence_interval": ConfidenceInterval(0.0, 0.0, 0.95).to_dict(),
                "sample_size": 0,
            }

        counts = df["result"].value_counts()
        decided = df[df["result"] != "TIE"]
        outcomes = (decided["result"] == "PLAYER_WIN").astype(int).tolist()
        return {
            "player_win_rate": float(counts.get("PLAYER_WIN", 0) / total),
            "opponent_win_rate": float(counts.get("OPPONENT_WIN", 0) / total),
            "tie_rate": float(counts.get("TIE", 0) / total),
            "confidence_interval": calculate_confidence_interval(outcomes).to_dict(),
            "sample_size": total,
        }

    def score_summary(self, seat: str) -> Dict[str, Any]:
        """
        Distribution of one seat's final round scores.

        Args:
            seat: "player" or "opponent"
        """
        df = self.rounds_frame()
        scores = df[f"{seat}_score"].to_numpy(dtype=float)
        busted = df[f"{seat}_busted"].to_numpy(dtype=bool)

        if scores.size == 0:
            return {
                "mean": 0.0,
                "std": 0.0,
                "median": 0.0,
                "bust_rate": 0.0,
                "exact_20_rate": 0.0,
            }

        return {
            "mean": float(np.mean(scores)),
            "std": float(np.std(scores)),
            "median": float(np.median(scores)),
            "bust_rate": float(np.mean(busted)),
            "exact_20_rate": float(np.mean(scores == TARGET_SCORE)),
        }

    def summary(self) -> Dict[str, Any]:
        """All analyses in one dictionary."""
        df = self.matches_frame()
        return {
            "matches": len(df),
            "rounds": len(self.rounds),
            "average_rounds_per_match": (
                float(df["rounds_played"].mean()) if len(df) else 0.0
            ),
            "match_win_rate": self.match_win_rate(),
            "round_results": self.round_results(),
            "player_scores": self.score_summary("player"),
            "opponent_scores": self.score_summary("opponent"),
        }

    def plot(self, figsize: Tuple[int, int] = (10, 8)) -> plt.Figure:
        """
        Plot the final-score distribution of both seats and the round results.

        Returns:
            The matplotlib figure
        """
        df = self.rounds_frame()
        if df.empty:
            fig, ax = plt.subplots(figsize=figsize)
            ax.set_title("No rounds recorded")
            return fig

        fig, (ax1, ax2) = plt.subplots(2, 1, figsize=figsize)

        scores = df[["player_score", "opponent_score"]]
        bins = np.arange(scores.min().min(), scores.max().max() + 2)
        ax1.hist(
            [df["player_score"], df["opponent_score"]],
            bins=bins,
            label=["Player", "Opponent"],
            align="left",
        )
        ax1.axvline(TARGET_SCORE, color="black", linestyle="--", linewidth=1)
        ax1.set_title("Final Round Scores")
        ax1.set_xlabel("Score")
        ax1.set_ylabel("Rounds")
        ax1.legend()

        result_counts = df["result"].value_counts()
        ax2.bar(result_counts.index, result_counts.values)
        ax2.set_title("Round Results")
        ax2.set_xlabel("Result")
        ax2.set_ylabel("Count")

        plt.tight_layout()
        return fig


def summarize(
    statistics: SimulationStatistics, output: Optional[str] = None
) -> Dict[str, Any]:
    """
    Summarise a simulation, optionally saving the chart to ``output``.
    """
    result = statistics.summary()
    if output:
        fig = statistics.plot()
        fig.savefig(output)
        plt.close(fig)
    return result
