"""
Game orchestration: deal → announcements → play → scoring.

GameState holds the four seats, the current and the completed tricks, the
running score and the achievements. GameEngine is the only thing that mutates
it; play_card is the single entry point during play and never raises for bad
input, it returns a PlayResult with a German reason instead.
"""
from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, NamedTuple, Sequence

from .config import Rules, rules_from_dict
from .deck import Card, Deal, deal_4p, validate_double_deck
from .errors import InvariantError
from .play import legal_plays, trick_winner, validate_move
from .player import Player, Team
from .scoring import (
    GameScore,
    SpecialPoints,
    TeamPoints,
    calculate_current_score,
    calculate_final_score,
    record_achievements,
)
from .teams import assign_teams, check_announcement, holds_both_markers
from .trick import Trick
from .trump import initialize_trump_cards

log = logging.getLogger(__name__)

DEFAULT_PLAYER_NAMES = ("Du", "KI 1", "KI 2", "KI 3")

# Deals with one player holding both Queens of Clubs are dealt again.
MAX_REDEALS = 100


class Phase(str, Enum):
    SETUP = "setup"
    DEALING = "dealing"
    ANNOUNCEMENTS = "announcements"
    PLAYING = "playing"
    SCORING = "scoring"
    FINISHED = "finished"


class PlayResult(NamedTuple):
    success: bool
    error: str | None = None
    explanation: str | None = None
    card: Card | None = None
    completed_trick: Trick | None = None


def player_id_for_seat(seat: int) -> str:
    return f"player_{seat}"


@dataclass
class GameState:
    """Mutable state of one game; seats are fixed and clockwise."""

    rules: Rules = field(default_factory=Rules)
    id: str = field(default_factory=lambda: f"game_{uuid.uuid4().hex[:12]}")
    phase: Phase = Phase.SETUP
    players: list[Player] = field(default_factory=list)
    current_trick: Trick = field(default_factory=lambda: Trick(player_id_for_seat(0), 1))
    completed_tricks: list[Trick] = field(default_factory=list)
    current_player_index: int = 0
    scores: TeamPoints = TeamPoints(0, 0)
    special: SpecialPoints = field(default_factory=SpecialPoints)
    final_score: GameScore | None = None

    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    def get_player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def player_index(self, player_id: str) -> int:
        for i, p in enumerate(self.players):
            if p.id == player_id:
                return i
        raise ValueError(f"Unknown player {player_id!r}")

    def players_on_team(self, team: Team) -> list[Player]:
        return [p for p in self.players if p.team == team]

    @property
    def human_player(self) -> Player | None:
        for p in self.players:
            if p.is_human:
                return p
        return None

    @property
    def trick_number(self) -> int:
        return len(self.completed_tricks) + 1

    @property
    def tricks_remaining(self) -> int:
        return self.rules.total_tricks - len(self.completed_tricks)

    def is_finished(self) -> bool:
        return len(self.completed_tricks) >= self.rules.total_tricks

    def all_cards(self) -> list[Card]:
        """Every card still in the game: hands, current trick, completed tricks."""
        cards = [c for p in self.players for c in p.hand]
        # After the last trick the current trick is also the last archived one.
        if not any(t is self.current_trick for t in self.completed_tricks):
            cards.extend(self.current_trick.cards)
        for trick in self.completed_tricks:
            cards.extend(trick.cards)
        return cards

    def to_data(self) -> Dict[str, Any]:
        """
        Plain snapshot. Cards are stored once in "cards"; hands and tricks
        reference them by id so a restored trick and hand share the same cards.
        """
        return {
            "id": self.id,
            "phase": self.phase.value,
            "rules": {
                "with_nines": self.rules.with_nines,
                "dulle": self.rules.dulle,
                "trump_suit": self.rules.trump_suit.key,
            },
            "cards": [c.to_data() for c in self.all_cards()],
            "players": [p.to_data() for p in self.players],
            "current_trick": self.current_trick.to_data(),
            "completed_tricks": [t.to_data() for t in self.completed_tricks],
            "current_player_index": self.current_player_index,
            "scores": {"re": self.scores.re, "kontra": self.scores.kontra},
            "special_points": self.special.to_data(),
        }

    @staticmethod
    def from_data(d: Dict[str, Any]) -> "GameState":
        rules = rules_from_dict(d.get("rules", {}))
        cards_by_id: Dict[str, Card] = {}
        for cd in d.get("cards", []):
            card = Card.from_data(cd)
            if card.id in cards_by_id:
                raise InvariantError(f"Card {card.id} appears twice in snapshot")
            cards_by_id[card.id] = card
        players = [Player.from_data(pd, cards_by_id) for pd in d.get("players", [])]
        completed = [Trick.from_data(td, cards_by_id) for td in d.get("completed_tricks", [])]
        current = Trick.from_data(d["current_trick"], cards_by_id)
        if completed and current.number == completed[-1].number:
            current = completed[-1]
        state = GameState(
            rules=rules,
            id=d.get("id") or f"game_{uuid.uuid4().hex[:12]}",
            phase=Phase(d.get("phase", Phase.SETUP.value)),
            players=players,
            current_trick=current,
            completed_tricks=completed,
            current_player_index=int(d.get("current_player_index", 0)),
            special=SpecialPoints.from_data(d.get("special_points", {})),
        )
        if state.players:
            state.scores = calculate_current_score(state.players, state.completed_tricks)
        if state.phase == Phase.FINISHED:
            state.final_score = calculate_final_score(
                state.players, state.completed_tricks, state.special, state.rules
            )
        return state


class GameEngine:
    """Owns one GameState and sequences its phases."""

    def __init__(self, rules: Rules | None = None, rng: random.Random | None = None):
        self.rules = rules if rules is not None else Rules()
        self.rng = rng if rng is not None else random.Random()
        self.state = GameState(rules=self.rules)
        self._player_names: Sequence[str] = DEFAULT_PLAYER_NAMES
        self._human_index = 0

    def start_game(
        self,
        player_names: Sequence[str] | None = None,
        human_index: int = 0,
        deal: Deal | None = None,
    ) -> GameState:
        """
        Deal a new game and stop in the announcements phase.
        A fixed deal can be passed in (tests, replays); it is validated like a random one.
        """
        names = tuple(player_names) if player_names is not None else DEFAULT_PLAYER_NAMES
        if len(names) != 4:
            raise ValueError(f"Doppelkopf needs exactly 4 players, got {len(names)}")
        if not 0 <= human_index < 4:
            raise ValueError(f"human_index out of range: {human_index}")
        self._player_names = names
        self._human_index = human_index

        state = GameState(rules=self.rules, phase=Phase.DEALING)
        state.players = [
            Player(player_id_for_seat(i), name, is_human=(i == human_index)) for i, name in enumerate(names)
        ]
        if deal is None:
            deal = self._deal_standard_contract()
        check = validate_double_deck(deal.hands, self.rules)
        if not check.ok:
            raise InvariantError("Invalid deal: " + "; ".join(check.errors))

        for player, hand in zip(state.players, deal.hands):
            player.receive_cards(initialize_trump_cards(hand, self.rules))
            player.sort_hand()
        assign_teams(state.players)

        state.current_trick = Trick(state.players[0].id, 1)
        state.current_player_index = 0
        state.phase = Phase.ANNOUNCEMENTS
        self.state = state
        log.debug("Game %s dealt, Re: %s", state.id, [p.id for p in state.players_on_team(Team.RE)])
        return state

    def _deal_standard_contract(self) -> Deal:
        # Hochzeit is not supported: deal again when one hand holds both markers.
        for _ in range(MAX_REDEALS):
            deal = deal_4p(rng=self.rng, rules=self.rules)
            if not any(holds_both_markers(h) for h in deal.hands):
                return deal
            log.debug("Both Queens of Clubs in one hand, dealing again")
        raise InvariantError(f"No standard deal after {MAX_REDEALS} attempts")

    def start_playing(self) -> None:
        if self.state.phase != Phase.ANNOUNCEMENTS:
            raise ValueError(f"Cannot start playing from phase {self.state.phase.value}")
        self.state.phase = Phase.PLAYING
        log.debug("Game %s: playing", self.state.id)

    def current_player(self) -> Player:
        return self.state.current_player()

    def is_human_turn(self) -> bool:
        if self.state.phase not in (Phase.ANNOUNCEMENTS, Phase.PLAYING):
            return False
        return self.state.current_player().is_human

    def legal_moves(self) -> list[Card]:
        """Legal cards for the seat to act; empty outside of play."""
        if self.state.phase not in (Phase.ANNOUNCEMENTS, Phase.PLAYING):
            return []
        player = self.state.current_player()
        return legal_plays(player.hand, self.state.current_trick)

    def play_card(self, card_id: str, player_id: str | None = None) -> PlayResult:
        """
        Play card_id for the seat to act. player_id, when given, must be that seat.
        Rejected plays leave the state untouched.
        """
        state = self.state
        if state.phase not in (Phase.ANNOUNCEMENTS, Phase.PLAYING):
            return PlayResult(False, "Das Spiel läuft nicht")

        player = state.current_player()
        if player_id is not None and player_id != player.id:
            return PlayResult(False, "Du bist nicht am Zug", f"{player.name} ist am Zug.")
        card = player.find_card(card_id)
        if card is None:
            return PlayResult(False, "Karte nicht auf der Hand")
        check = validate_move(card, player.hand, state.current_trick)
        if not check.valid:
            return PlayResult(False, check.reason, check.explanation)

        if state.phase == Phase.ANNOUNCEMENTS:
            self.start_playing()
        played = player.play_card(card_id)
        trick = state.current_trick
        trick.add_card(played, player.id)
        log.debug("%s plays %s in %s", player.id, played, trick.id)

        if trick.is_complete():
            self._complete_trick(trick)
            return PlayResult(True, card=played, completed_trick=trick)
        state.current_player_index = (state.current_player_index + 1) % 4
        return PlayResult(True, card=played)

    def _complete_trick(self, trick: Trick) -> None:
        state = self.state
        winner_id = trick_winner(trick)
        if winner_id is None:
            raise InvariantError(f"Complete {trick.id} has no winner")
        trick.set_winner(winner_id)
        winner = state.get_player(winner_id)
        if winner is None:
            raise InvariantError(f"{trick.id} won by unknown player {winner_id!r}")
        winner.tricks_taken += 1

        record_achievements(state.special, trick, state.players, state.rules)
        state.completed_tricks.append(trick)
        state.scores = calculate_current_score(state.players, state.completed_tricks)
        log.debug("%s won by %s (%d points), score %s", trick.id, winner_id, trick.points, state.scores)

        if state.is_finished():
            self._finish_game()
            return
        state.current_player_index = state.player_index(winner_id)
        state.current_trick = Trick(winner_id, trick.number + 1)

    def _finish_game(self) -> None:
        state = self.state
        state.phase = Phase.SCORING
        final = calculate_final_score(state.players, state.completed_tricks, state.special, state.rules)
        if (final.re_points, final.kontra_points) != tuple(state.scores):
            raise InvariantError(f"Final score {final.re_points}/{final.kontra_points} != running {state.scores}")
        state.final_score = final
        state.phase = Phase.FINISHED
        log.debug(
            "Game %s finished: %s wins %d:%d, value %d",
            state.id, final.winner.value, final.re_points, final.kontra_points, final.total_game_value,
        )

    def announce_team(self, player_id: str, team: Team) -> PlayResult:
        """Re / Kontra announcement; must match the player's real team."""
        state = self.state
        if state.phase not in (Phase.ANNOUNCEMENTS, Phase.PLAYING):
            return PlayResult(False, "Ansagen sind jetzt nicht möglich")
        player = state.get_player(player_id)
        if player is None:
            return PlayResult(False, "Spieler nicht gefunden")
        reason = check_announcement(player, team, state.rules.total_tricks)
        if reason is not None:
            return PlayResult(False, reason)
        player.has_announced = True
        log.debug("%s announces %s", player_id, team.value)
        return PlayResult(True)

    def score(self) -> TeamPoints:
        return self.state.scores

    def export_state(self) -> Dict[str, Any]:
        return self.state.to_data()

    def import_state(self, data: Dict[str, Any]) -> GameState:
        state = GameState.from_data(data)
        self.rules = state.rules
        self.state = state
        return state

    def clone(self) -> "GameEngine":
        """Independent engine on a deep copy of the state (snapshot round trip)."""
        other = GameEngine(self.rules, random.Random(self.rng.random()))
        other.import_state(self.export_state())
        other._player_names = self._player_names
        other._human_index = self._human_index
        return other

    def reset(self) -> GameState:
        """Abandon the current game and deal a new one with the same seats."""
        log.debug("Game %s reset", self.state.id)
        return self.start_game(self._player_names, self._human_index)


__all__ = [
    "DEFAULT_PLAYER_NAMES",
    "GameEngine",
    "GameState",
    "Phase",
    "PlayResult",
    "player_id_for_seat",
]
