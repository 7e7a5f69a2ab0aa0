"""
Computer opponent for Pazaak and its decision logging.
"""

from pazaak.ai.decision_logger import DecisionContext, DecisionLogger
from pazaak.ai.opponent import (
    CardChoice,
    OpponentAI,
    choose_offense_card,
    find_exact_card,
    find_recovery_card,
    should_stand,
)

__all__ = [
    "CardChoice",
    "DecisionContext",
    "DecisionLogger",
    "OpponentAI",
    "choose_offense_card",
    "find_exact_card",
    "find_recovery_card",
    "should_stand",
]
