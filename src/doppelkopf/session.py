"""
One interactive game: a human seat, three AI seats, hints.

Only one seat acts at a time. AI decisions are awaited as tasks; while one is
pending the human's submissions are rejected. Every new game or reset bumps
the session epoch and cancels the pending decision, and a decision that still
comes back for an older epoch is dropped instead of being played.
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import NamedTuple

from .ai import AILevel, AIPlayer
from .config import SessionConfig
from .deck import Card
from .game import GameEngine, GameState, Phase, PlayResult
from .hints import FeedbackContext, Hint, HintContext, HintTracker, get_feedback_hint, get_hint
from .player import Player, Team
from .teams import public_team
from .trick import Trick

log = logging.getLogger(__name__)


class TurnOutcome(NamedTuple):
    player_id: str
    result: PlayResult
    hint: Hint | None = None
    feedback: Hint | None = None


class GameSession:
    def __init__(self, config: SessionConfig | None = None, rng: random.Random | None = None):
        self.config = config if config is not None else SessionConfig()
        self.rng = rng if rng is not None else random.Random()
        self.engine = GameEngine(self.config.rules, self.rng)
        self.tracker = HintTracker(self.config.hint_limits)
        self.ai_players: dict[str, AIPlayer] = {}
        self.epoch = 0
        self._pending: asyncio.Task | None = None
        self._human_hand_before: list[Card] = []

    @property
    def state(self) -> GameState:
        return self.engine.state

    @property
    def human(self) -> Player:
        return self.state.players[self.config.human_index]

    @property
    def ai_pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def new_game(self) -> GameState:
        """Abandon whatever runs and deal a fresh game."""
        self._abandon()
        state = self.engine.start_game(self.config.player_names, self.config.human_index)
        self.tracker.reset_for_new_game()
        self._human_hand_before = []
        self.ai_players = {}
        for i, player in enumerate(state.players):
            if player.is_human:
                continue
            level = AILevel(self.config.ai_levels[i])
            self.ai_players[player.id] = AIPlayer(
                player,
                level,
                thinking_delay=self.config.thinking_delays.get(level.value, 0.0),
                rng=random.Random(self.rng.random()),
            )
        log.info("Session epoch %d: new game %s", self.epoch, state.id)
        return state

    def reset(self) -> GameState:
        return self.new_game()

    def _abandon(self) -> None:
        self.epoch += 1
        if self.ai_pending:
            self._pending.cancel()
        self._pending = None

    def is_over(self) -> bool:
        return self.state.phase == Phase.FINISHED

    def public_teams(self) -> dict[str, Team]:
        """Teams as the human can know them."""
        tricks = list(self.state.completed_tricks) + [self.state.current_trick]
        return {p.id: public_team(p, tricks) for p in self.state.players if not p.is_human}

    def _hint_context(self, card: Card) -> HintContext:
        human = self.human
        return HintContext(
            card=card,
            hand=list(human.hand),
            trick=self.state.current_trick,
            trick_number=self.state.trick_number,
            player_id=human.id,
            player_team=human.team,
            public_teams=self.public_teams(),
            rules=self.state.rules,
        )

    def preview_hint(self, card_id: str) -> Hint | None:
        """Hint for the card the human is about to play, if any may be shown now."""
        if not self.config.hints_enabled or not self.engine.is_human_turn() or self.ai_pending:
            return None
        card = self.human.find_card(card_id)
        if card is None:
            return None
        return get_hint(self._hint_context(card), self.tracker)

    def mute_hints(self) -> None:
        self.tracker.mute()

    def announce(self, team: Team) -> PlayResult:
        if self.ai_pending:
            return PlayResult(False, "Bitte warten, die KI ist am Zug")
        return self.engine.announce_team(self.human.id, team)

    def submit_card(self, card_id: str) -> TurnOutcome:
        """Play a card for the human. Rejected while an AI decision is pending."""
        human = self.human
        if self.ai_pending:
            return TurnOutcome(human.id, PlayResult(False, "Bitte warten, die KI ist am Zug"))
        if not self.engine.is_human_turn():
            return TurnOutcome(human.id, PlayResult(False, "Du bist nicht am Zug"))

        card = human.find_card(card_id)
        hand_before = list(human.hand)
        result = self.engine.play_card(card_id, human.id)
        if not result.success:
            hint = None
            if card is not None and self.config.hints_enabled:
                hint = get_hint(self._hint_context(card), self.tracker)
            return TurnOutcome(human.id, result, hint=hint)

        self._human_hand_before = hand_before
        feedback = self._after_play(result)
        return TurnOutcome(human.id, result, feedback=feedback)

    def _after_play(self, result: PlayResult) -> Hint | None:
        """Feedback for a completed trick; advances the hint tracker exactly once per trick."""
        trick = result.completed_trick
        if trick is None:
            return None
        feedback = None
        if self.config.hints_enabled:
            feedback = get_feedback_hint(self._feedback_context(trick), self.tracker)
        self.tracker.on_trick_complete()
        self._human_hand_before = []
        return feedback

    def _feedback_context(self, trick: Trick) -> FeedbackContext:
        human = self.human
        return FeedbackContext(
            trick=trick,
            player_id=human.id,
            player_team=human.team,
            hand_before=list(self._human_hand_before),
            public_teams=self.public_teams(),
            foxes_caught=list(self.state.special.foxes_caught),
            rules=self.state.rules,
        )

    async def _await_decision(self, coro, epoch: int):
        task = asyncio.ensure_future(coro)
        self._pending = task
        try:
            return await task
        except asyncio.CancelledError:
            if self.epoch != epoch:
                log.info("AI decision cancelled by reset (epoch %d -> %d)", epoch, self.epoch)
                return None
            raise
        finally:
            if self._pending is task:
                self._pending = None

    async def run_ai_turns(self) -> list[TurnOutcome]:
        """Let the AI seats play until it is the human's turn or the game is over."""
        outcomes: list[TurnOutcome] = []
        epoch = self.epoch
        while self.state.phase in (Phase.ANNOUNCEMENTS, Phase.PLAYING) and not self.engine.is_human_turn():
            state = self.state
            player = state.current_player()
            ai = self.ai_players[player.id]

            if player.hand_size == state.rules.total_tricks:
                team = await self._await_decision(ai.decide_announcement(state), epoch)
                if self.epoch != epoch:
                    return outcomes
                if team is not None:
                    self.engine.announce_team(player.id, team)

            card = await self._await_decision(ai.make_move(state), epoch)
            if self.epoch != epoch:
                log.info("Dropping stale AI decision of %s for epoch %d", player.id, epoch)
                return outcomes
            if card is None:
                legal = self.engine.legal_moves()
                if not legal:
                    log.error("%s has no legal card, stopping AI turns", player.id)
                    return outcomes
                log.warning("%s produced no move, playing %s", player.id, legal[0].id)
                card = legal[0]

            result = self.engine.play_card(card.id, player.id)
            if not result.success:
                log.error("Engine rejected AI card %s of %s: %s", card.id, player.id, result.error)
                return outcomes
            outcomes.append(TurnOutcome(player.id, result, feedback=self._after_play(result)))

            if result.completed_trick is not None and self.config.trick_pause > 0:
                await asyncio.sleep(self.config.trick_pause)
                if self.epoch != epoch:
                    return outcomes
        return outcomes


__all__ = ["GameSession", "TurnOutcome"]
