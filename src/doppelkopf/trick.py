"""
Trick: up to four (player_id, card) plays in order, with a lead player and,
once complete, a winner. The first card fixes what the other seats must follow.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping

from .deck import Card, Suit
from .errors import InvariantError

TRICK_SIZE = 4

# Single trick worth this many points or more is a "Doppelkopf".
DOPPELKOPF_POINTS = 40


class Trick:
    """Append-only list of plays; frozen once four cards are in."""

    def __init__(self, lead_player_id: str, number: int = 1):
        self.number = number
        self.lead_player_id = lead_player_id
        self.winner_id: str | None = None
        self._plays: list[tuple[str, Card]] = []

    @property
    def id(self) -> str:
        return f"trick_{self.number}"

    def add_card(self, card: Card, player_id: str) -> None:
        if self.is_complete():
            raise ValueError(f"{self.id} already holds {TRICK_SIZE} cards")
        if any(p == player_id for p, _ in self._plays):
            raise ValueError(f"{player_id} already played in {self.id}")
        self._plays.append((player_id, card))

    def is_complete(self) -> bool:
        return len(self._plays) == TRICK_SIZE

    def __len__(self) -> int:
        return len(self._plays)

    @property
    def size(self) -> int:
        return len(self._plays)

    @property
    def plays(self) -> list[tuple[str, Card]]:
        return list(self._plays)

    @property
    def cards(self) -> list[Card]:
        return [c for _, c in self._plays]

    def play_order(self) -> list[str]:
        return [p for p, _ in self._plays]

    def lead_card(self) -> Card | None:
        return self._plays[0][1] if self._plays else None

    def lead_suit(self) -> Suit | None:
        """Suit led, or None when the trick is empty or was opened with trump."""
        lead = self.lead_card()
        if lead is None or lead.is_trump:
            return None
        return lead.suit

    def card_by_player(self, player_id: str) -> Card | None:
        for p, c in self._plays:
            if p == player_id:
                return c
        return None

    def player_of(self, card: Card) -> str | None:
        for p, c in self._plays:
            if c == card:
                return p
        return None

    @property
    def points(self) -> int:
        return sum(c.value for _, c in self._plays)

    @property
    def is_doppelkopf(self) -> bool:
        return self.points >= DOPPELKOPF_POINTS

    def set_winner(self, player_id: str) -> None:
        if not self.is_complete():
            raise ValueError(f"{self.id} is not complete")
        if self.winner_id is not None and self.winner_id != player_id:
            raise InvariantError(f"{self.id} already won by {self.winner_id}")
        self.winner_id = player_id

    def to_data(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "number": self.number,
            "cards": [{"card_id": c.id, "player_id": p} for p, c in self._plays],
            "lead_player_id": self.lead_player_id,
            "winner_id": self.winner_id,
        }

    @staticmethod
    def from_data(d: Dict[str, Any], cards_by_id: Mapping[str, Card]) -> "Trick":
        trick = Trick(d["lead_player_id"], int(d.get("number", 1)))
        for entry in d.get("cards", []):
            card = cards_by_id.get(entry["card_id"])
            if card is None:
                raise InvariantError(f"{trick.id} references unknown card {entry['card_id']}")
            trick.add_card(card, entry["player_id"])
        trick.winner_id = d.get("winner_id")
        return trick

    def __str__(self) -> str:
        plays = ", ".join(f"{p}: {c}" for p, c in self._plays)
        return f"{self.id} [{plays}] winner: {self.winner_id or '-'}"


def validate_trick(trick: Trick) -> bool:
    """A complete trick has four cards from four different players."""
    return trick.is_complete() and len(set(trick.play_order())) == TRICK_SIZE
