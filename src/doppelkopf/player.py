"""
Player: a seat with its hand, hidden team, trick count and announcement flag.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Mapping

from .deck import Card, Suit
from .errors import InvariantError
from .trump import hand_sort_key


class Team(str, Enum):
    RE = "re"
    KONTRA = "kontra"
    UNKNOWN = "unknown"

    @property
    def opponent(self) -> "Team":
        if self is Team.RE:
            return Team.KONTRA
        if self is Team.KONTRA:
            return Team.RE
        return Team.UNKNOWN


@dataclass
class Player:
    id: str
    name: str
    is_human: bool = False
    team: Team = Team.UNKNOWN
    hand: list[Card] = field(default_factory=list)
    tricks_taken: int = 0
    has_announced: bool = False

    def receive_cards(self, cards: Iterable[Card]) -> None:
        """Take the dealt hand. A hand never grows after the deal."""
        if self.hand:
            raise ValueError(f"{self.id} already holds a hand")
        self.hand = list(cards)

    def find_card(self, card_id: str) -> Card | None:
        for c in self.hand:
            if c.id == card_id:
                return c
        return None

    def has_card(self, card_id: str) -> bool:
        return self.find_card(card_id) is not None

    def play_card(self, card_id: str) -> Card:
        """Remove the card from the hand and hand it over to the caller."""
        card = self.find_card(card_id)
        if card is None:
            raise ValueError(f"Card {card_id} not in hand of {self.id}")
        self.hand.remove(card)
        return card

    def cards_of_suit(self, suit: Suit) -> list[Card]:
        """Plain cards of the suit; trumps of the same raw suit don't count."""
        return [c for c in self.hand if c.suit == suit and not c.is_trump]

    def trump_cards(self) -> list[Card]:
        return [c for c in self.hand if c.is_trump]

    @property
    def hand_size(self) -> int:
        return len(self.hand)

    def sort_hand(self) -> None:
        self.hand.sort(key=hand_sort_key)

    def to_data(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "is_human": self.is_human,
            "team": self.team.value,
            "hand": [c.id for c in self.hand],
            "tricks_taken": self.tricks_taken,
            "has_announced": self.has_announced,
        }

    @staticmethod
    def from_data(d: Dict[str, Any], cards_by_id: Mapping[str, Card]) -> "Player":
        hand: list[Card] = []
        for card_id in d.get("hand", []):
            card = cards_by_id.get(card_id)
            if card is None:
                raise InvariantError(f"{d['id']} holds unknown card {card_id}")
            hand.append(card)
        return Player(
            id=d["id"],
            name=d["name"],
            is_human=bool(d.get("is_human", False)),
            team=Team(d.get("team", Team.UNKNOWN.value)),
            hand=hand,
            tricks_taken=int(d.get("tricks_taken", 0)),
            has_announced=bool(d.get("has_announced", False)),
        )
