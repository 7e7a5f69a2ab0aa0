"""
Core engine for Pazaak.

This package provides the round/match state machine that powers the game,
implemented in a platform-agnostic way.
"""

from pazaak.engine.pazaak import PazaakEngine, legal_actions

__all__ = ["PazaakEngine", "legal_actions"]
