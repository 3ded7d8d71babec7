"""
Computer opponents.

Three tiers share one contract, select_card(level, player, state) -> Card,
always taken from legal_plays():
- Easy: uniformly random legal card.
- Medium: lead with the strongest card (trump first); when following, stay
  low if the partner already holds the trick, else take it with the weakest
  winning card, else throw the weakest card.
- Hard: same as Medium for now.

AIPlayer adds the simulated thinking delay as an awaitable, so a caller can
cancel a pending decision.
"""
from __future__ import annotations

import asyncio
import logging
import random
from enum import Enum
from typing import Callable, Dict, Sequence

from .config import DEFAULT_THINKING_DELAYS
from .deck import Card
from .game import GameState
from .play import current_winning_player, is_legal_move, legal_plays, winning_plays
from .player import Player, Team
from .teams import can_announce, get_partner
from .trump import count_trump_cards, strength_key

log = logging.getLogger(__name__)

HIGH_VALUE = 10
ANNOUNCE_MIN_TRUMPS = 6
ANNOUNCE_MIN_HIGH_CARDS = 5


class AILevel(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


def strongest(cards: Sequence[Card]) -> Card:
    if not cards:
        raise ValueError("No cards to select from")
    return max(cards, key=strength_key)


def weakest(cards: Sequence[Card]) -> Card:
    if not cards:
        raise ValueError("No cards to select from")
    return min(cards, key=strength_key)


def evaluate_card_strength(card: Card) -> int:
    """Rough 0..100 strength: trumps by rank, plain cards by point value."""
    if card.is_trump:
        return 100 - card.trump_rank * 3
    return card.value * 5


def should_announce(player: Player) -> bool:
    """Strong hand: many trumps or many Aces and Tens."""
    high = sum(1 for c in player.hand if c.value >= HIGH_VALUE)
    return count_trump_cards(player.hand) >= ANNOUNCE_MIN_TRUMPS or high >= ANNOUNCE_MIN_HIGH_CARDS


def select_card_easy(player: Player, state: GameState, rng: random.Random) -> Card | None:
    legal = legal_plays(player.hand, state.current_trick)
    if not legal:
        return None
    return rng.choice(legal)


def select_card_medium(player: Player, state: GameState, rng: random.Random) -> Card | None:
    trick = state.current_trick
    legal = legal_plays(player.hand, trick)
    if not legal:
        return None

    if len(trick) == 0:
        trumps = [c for c in legal if c.is_trump]
        return strongest(trumps) if trumps else strongest(legal)

    partner = get_partner(player, state.players)
    if partner is not None and current_winning_player(trick) == partner.id:
        return weakest(legal)
    winners = winning_plays(player.hand, trick)
    if winners:
        return weakest(winners)
    return weakest(legal)


def select_card_hard(player: Player, state: GameState, rng: random.Random) -> Card | None:
    # TODO: card counting; until then Hard plays exactly like Medium.
    return select_card_medium(player, state, rng)


Strategy = Callable[[Player, GameState, random.Random], "Card | None"]

STRATEGIES: Dict[AILevel, Strategy] = {
    AILevel.EASY: select_card_easy,
    AILevel.MEDIUM: select_card_medium,
    AILevel.HARD: select_card_hard,
}


def select_card(
    level: AILevel,
    player: Player,
    state: GameState,
    rng: random.Random | None = None,
) -> Card | None:
    """Pick a legal card for player; None only for an empty hand."""
    return STRATEGIES[AILevel(level)](player, state, rng if rng is not None else random.Random())


class AIPlayer:
    """A non-human seat with a tier and a thinking delay (seconds)."""

    def __init__(
        self,
        player: Player,
        level: AILevel = AILevel.MEDIUM,
        thinking_delay: float | None = None,
        rng: random.Random | None = None,
    ):
        if player.is_human:
            raise ValueError("Cannot create AIPlayer from human player")
        self.player = player
        self.rng = rng if rng is not None else random.Random()
        self._delay_override = thinking_delay
        self.set_level(level)

    def set_level(self, level: AILevel) -> None:
        self.level = AILevel(level)
        if self._delay_override is not None:
            self.thinking_delay = self._delay_override
        else:
            self.thinking_delay = DEFAULT_THINKING_DELAYS[self.level.value]

    def select(self, state: GameState) -> Card | None:
        """Immediate decision without delay. Failures are logged and give None."""
        player = state.get_player(self.player.id) or self.player
        try:
            card = select_card(self.level, player, state, self.rng)
        except Exception:
            log.exception("AI %s (%s) failed to select a card", player.id, self.level.value)
            return None
        if card is None:
            log.warning("AI %s found no legal card", player.id)
            return None
        if not is_legal_move(card, player.hand, state.current_trick):
            log.warning("AI %s selected illegal card %s, ignoring", player.id, card.id)
            return None
        return card

    async def make_move(self, state: GameState) -> Card | None:
        """Think, then pick a legal card. Cancelling the task drops the decision."""
        if self.thinking_delay > 0:
            await asyncio.sleep(self.thinking_delay)
        return self.select(state)

    async def decide_announcement(self, state: GameState) -> Team | None:
        if self.thinking_delay > 0:
            await asyncio.sleep(self.thinking_delay / 2)
        player = state.get_player(self.player.id) or self.player
        if not can_announce(player, state.rules.total_tricks):
            return None
        return player.team if should_announce(player) else None


__all__ = [
    "AILevel",
    "AIPlayer",
    "STRATEGIES",
    "evaluate_card_strength",
    "select_card",
    "select_card_easy",
    "select_card_hard",
    "select_card_medium",
    "should_announce",
    "strongest",
    "weakest",
]
