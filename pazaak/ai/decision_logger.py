"""
Logging for the computer opponent's decisions.
Tracks every stage of a turn: draw, recovery, offense and the stand decision.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class DecisionContext:
    """Context for a single decision point."""

    timestamp: datetime
    round_number: int
    stage: str
    score: int
    opponent_score: int
    opponent_standing: bool
    available_cards: List[str]
    choice: Optional[str] = None
    reason: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "round": self.round_number,
            "stage": self.stage,
            "score": self.score,
            "opponent_score": self.opponent_score,
            "opponent_standing": self.opponent_standing,
            "available_cards": self.available_cards,
            "choice": self.choice,
            "reason": self.reason,
            "details": self.details,
        }


class DecisionLogger:
    """Logs the decision-making of the Pazaak opponent."""

    def __init__(self, log_level=logging.DEBUG):
        self.logger = logging.getLogger("pazaak.ai.decisions")
        if os.environ.get("PAZAAK_DISABLE_LOGGING", "").lower() in (
            "1",
            "true",
            "yes",
        ):
            self.logger.setLevel(logging.ERROR)
        else:
            self.logger.setLevel(log_level)

        self.decision_history: List[DecisionContext] = []
        self.current_round_decisions: List[DecisionContext] = []

    def set_level(self, level):
        """Set the logging level."""
        self.logger.setLevel(level)

    def log_decision_point(self, context: DecisionContext):
        """Log a decision point with full context."""
        self.current_round_decisions.append(context)
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                f"[round {context.round_number}] {context.stage}: score={context.score} "
                f"vs {context.opponent_score}"
                f"{' (standing)' if context.opponent_standing else ''}, "
                f"side cards {context.available_cards}"
            )
        if context.choice and self.logger.isEnabledFor(logging.INFO):
            self.logger.info(
                f"{context.stage}: {context.choice} "
                f"(reason: {context.reason or 'unknown'})"
            )

    def log_round_end(self, round_number: int, result: str):
        """Archive the decisions of a finished round."""
        if self.logger.isEnabledFor(logging.INFO):
            self.logger.info(f"=== Round {round_number} ended: {result} ===")
        self.decision_history.extend(self.current_round_decisions)
        self.current_round_decisions = []

    def get_decision_summary(self) -> Dict[str, Any]:
        """Get a summary of all decisions made."""
        decisions = self.decision_history + self.current_round_decisions
        summary: Dict[str, Any] = {
            "total_decisions": len(decisions),
            "by_stage": {},
            "by_choice": {},
            "recoveries": 0,
            "busts": 0,
        }

        for decision in decisions:
            summary["by_stage"][decision.stage] = (
                summary["by_stage"].get(decision.stage, 0) + 1
            )
            choice = decision.choice or "none"
            summary["by_choice"][choice] = summary["by_choice"].get(choice, 0) + 1

            if decision.stage == "recovery":
                if decision.choice == "bust":
                    summary["busts"] += 1
                elif decision.choice:
                    summary["recoveries"] += 1

        return summary

    def export_decisions(self, filepath: str):
        """Export decision history to a JSON file."""
        decisions = self.decision_history + self.current_round_decisions
        data = {
            "decisions": [d.to_dict() for d in decisions],
            "summary": self.get_decision_summary(),
        }

        with open(filepath, "w") as f:
            json.dump(data, f, indent=2)

        self.logger.info(f"Exported {len(decisions)} decisions to {filepath}")
