"""
Computer opponent for Pazaak.

The opponent plays one full turn per call to `OpponentAI.take_turn`:

1. draw a card;
2. recovery: if over 20, play a Minus card that brings the score back to 20
   or below, preferring an exact 20; otherwise the bust stands;
3. if sitting on exactly 20, hand the turn over;
4. offense: from 17-19 play an exact card to 20, or beat a standing human by
   one point with an exact card;
5. re-check bust and auto-stand;
6. decide whether to stand, deterministically at the extremes and by chance
   for scores 17-19;
7. stand, or end the turn.

The opponent only ever reads the engine's immutable state and calls its
public entry points. Pauses between stages are pacing only; with zero delays
the outcome of a turn is unchanged.
"""

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence, Tuple

from pazaak.ai.decision_logger import DecisionContext, DecisionLogger
from pazaak.common.card import Card, CardKind, Sign, SIDE_VALUES
from pazaak.engine.pazaak import PazaakEngine
from pazaak.events import EventBus, EngineEventType
from pazaak.game.constants import TARGET_SCORE
from pazaak.game.state import GameState, PlayerState, Seat

logger = logging.getLogger("pazaak.ai")

# Chance of standing by own score when the outcome is not forced.
STAND_PROBABILITIES = ((19, 0.85), (18, 0.70), (17, 0.50))

OFFENSE_RANGE = range(17, TARGET_SCORE)


@dataclass(frozen=True)
class CardChoice:
    """A side card together with the sign it should be played with."""

    card: Card
    sign: Optional[Sign] = None

    @property
    def delta(self) -> int:
        return self.card.effective_value(self.sign)

    @property
    def label(self) -> str:
        return self.card.played_with(self.sign).label


def _as_minus(card: Card) -> CardChoice:
    return CardChoice(card, Sign.MINUS if card.kind is CardKind.PLUS_MINUS else None)


def _as_plus(card: Card) -> CardChoice:
    return CardChoice(card, Sign.PLUS if card.kind is CardKind.PLUS_MINUS else None)


def find_recovery_card(score: int, cards: Sequence[Card]) -> Optional[CardChoice]:
    """
    Find a side card that brings a busted score back to 20 or below.

    A card landing on exactly 20 wins; otherwise the smallest reduction that
    still gets to 20 or below, so the least value is given away.

    Args:
        score: Current score, over 20
        cards: Unused side cards

    Returns:
        The card to play, or None if no card can save the round
    """
    excess = score - TARGET_SCORE
    if excess <= 0:
        return None

    reducers = [card for card in cards if card.kind.can_subtract and not card.used]
    for card in reducers:
        if card.value == excess:
            return _as_minus(card)

    sufficient = [card for card in reducers if card.value > excess]
    if not sufficient:
        return None
    return _as_minus(min(sufficient, key=lambda card: card.value))


def find_exact_card(needed: int, cards: Sequence[Card]) -> Optional[CardChoice]:
    """
    Find a Plus (or Plus/Minus played as plus) card worth exactly ``needed``.
    """
    if needed not in SIDE_VALUES:
        return None
    for card in cards:
        if card.kind.can_add and not card.used and card.value == needed:
            return _as_plus(card)
    return None


def choose_offense_card(
    me: PlayerState, human: PlayerState
) -> Tuple[Optional[CardChoice], Optional[str]]:
    """
    Pick at most one side card to improve a live score.

    Returns:
        Tuple of (choice, reason); both None when no card should be played
    """
    score = me.score
    if me.busted or me.standing or score >= TARGET_SCORE:
        return None, None

    cards = me.side_deck.available_cards()
    if not cards:
        return None, None

    if score in OFFENSE_RANGE:
        choice = find_exact_card(TARGET_SCORE - score, cards)
        if choice:
            return choice, "exact 20"

    if human.standing and not human.busted and score < human.score <= TARGET_SCORE:
        target = human.score + 1
        if target <= TARGET_SCORE:
            choice = find_exact_card(target - score, cards)
            if choice:
                return choice, f"beat standing {human.score}"

    return None, None


def should_stand(
    me: PlayerState, human: PlayerState, rng: random.Random
) -> Tuple[bool, str]:
    """
    Decide whether to stand on the current score.

    Returns:
        Tuple of (stand, reason)
    """
    score = me.score

    if score == TARGET_SCORE:
        return True, "at 20"
    if me.busted:
        return True, "busted"
    if human.busted:
        return True, "human busted"

    if human.standing:
        if score > human.score:
            return True, "ahead of standing human"
        if score >= human.score and score >= 18:
            return True, "level with standing human at 18+"
        if score == human.score and score >= 17:
            return True, "tied with standing human at 17+"

    for threshold, probability in STAND_PROBABILITIES:
        if score >= threshold:
            roll = rng.random()
            return roll < probability, f"roll {roll:.2f} vs {probability:.2f} at {score}"

    return False, "under 17"


class OpponentAI:
    """
    Heuristic computer player driving one seat of a PazaakEngine.
    """

    def __init__(
        self,
        engine: PazaakEngine,
        seat: Seat = Seat.OPPONENT,
        think_delay: float = 0.8,
        action_delay: float = 0.4,
        rng: Optional[random.Random] = None,
        decision_logger: Optional[DecisionLogger] = None,
    ):
        """
        Initialize the opponent.

        Args:
            engine: Engine to play through
            seat: Seat this opponent plays
            think_delay: Pause in seconds before drawing
            action_delay: Pause in seconds around side-card plays
            rng: Random number generator for the stand decision
            decision_logger: Where decisions are recorded
        """
        self.engine = engine
        self.seat = seat
        self.think_delay = think_delay
        self.action_delay = action_delay
        self.rng = rng or random.Random()
        self.decision_logger = decision_logger or DecisionLogger()
        self.event_bus = EventBus.get_instance()

    def _my_turn(self) -> bool:
        return self.engine.state.is_turn_of(self.seat)

    def _me(self) -> PlayerState:
        return self.engine.state.get_player(self.seat)

    async def _pause(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)

    async def take_turn(self) -> bool:
        """
        Play one full turn.

        Returns:
            False if it was not this seat's turn, True otherwise
        """
        if not self._my_turn():
            return False

        await self._pause(self.think_delay)

        # Stage 1: draw
        card = self.engine.draw(self.seat)
        if card is None:
            self._record("draw", None, "cannot draw")
            if self._my_turn():
                self.engine.end_turn(self.seat)
            return True
        self._record("draw", card.label, "turn card")

        # Stage 2: recovery
        if self._me().busted:
            await self._recover()
            if not self._my_turn():
                return True
            if self._me().busted:
                self.engine.end_turn(self.seat)
                return True

        # Stage 3: auto-stand
        if self._me().standing:
            self._record("auto_stand", "end_turn", "at 20")
            self.engine.end_turn(self.seat)
            return True

        # Stage 4: offense
        await self._pause(self.action_delay)
        choice, reason = choose_offense_card(
            self._me(), self.engine.state.get_player(self.seat.other)
        )
        if choice:
            self._record("offense", choice.label, reason)
            played = self.engine.play_side_card(self.seat, choice.card.id, choice.sign)
            if played:
                await self._pause(self.action_delay)

            # Stage 5: re-check
            if not self._my_turn():
                return True
            if self._me().busted or self._me().standing:
                self.engine.end_turn(self.seat)
                return True

        # Stage 6 and 7: stand or carry on
        me = self._me()
        human = self.engine.state.get_player(self.seat.other)
        stand, reason = should_stand(me, human, self.rng)
        self._record("stand_decision", "stand" if stand else "end_turn", reason)
        if stand:
            self.engine.stand(self.seat)
        else:
            self.engine.end_turn(self.seat)
        return True

    async def _recover(self) -> None:
        me = self._me()
        choice = None
        if me.can_recover:
            choice = find_recovery_card(me.score, me.side_deck.available_cards())

        if choice is None:
            logger.debug("%s cannot recover from %d", self.seat.value, me.score)
            self._record("recovery", "bust", "no card brings the score to 20 or below")
            return

        await self._pause(self.action_delay)
        self._record("recovery", choice.label, f"{me.score} -> {me.score + choice.delta}")
        self.engine.play_side_card(self.seat, choice.card.id, choice.sign)

    def _record(self, stage: str, choice: Optional[str], reason: Optional[str]) -> None:
        state: GameState = self.engine.state
        me = state.get_player(self.seat)
        human = state.get_player(self.seat.other)
        context = DecisionContext(
            timestamp=datetime.now(),
            round_number=state.round_number,
            stage=stage,
            score=me.score,
            opponent_score=human.score,
            opponent_standing=human.standing,
            available_cards=[c.label for c in me.side_deck.available_cards()],
            choice=choice,
            reason=reason,
        )
        self.decision_logger.log_decision_point(context)
        self.event_bus.emit(
            EngineEventType.STRATEGY_DECISION,
            {
                "game_id": state.id,
                "seat": self.seat.value,
                "stage": stage,
                "choice": choice,
                "reason": reason,
                "score": me.score,
                "timestamp": time.time(),
            },
        )
