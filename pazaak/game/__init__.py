"""
Pazaak rules: immutable match state and the pure transitions between states.
"""

from pazaak.game.state import (
    GameState,
    PlayerState,
    GameStage,
    PendingSign,
    RoundResult,
    Seat,
    score_cards,
)
from pazaak.game.transitions import StateTransitionEngine

__all__ = [
    "GameState",
    "PlayerState",
    "GameStage",
    "PendingSign",
    "RoundResult",
    "Seat",
    "score_cards",
    "StateTransitionEngine",
]
