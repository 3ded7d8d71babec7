"""
Doppelkopf deck: two copies of every (suit, rank), with or without nines.
Card values for counting: Ace 11, Ten 10, King 4, Queen 3, Jack 2, Nine 0 (240 per game).

Cards are built in two phases. make_deck() yields plain cards; trump.classify()
returns new frozen cards with their trump rank attached. Only classified cards
take part in a game.
"""
from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any, Dict, Iterable, NamedTuple

if TYPE_CHECKING:  # pragma: no cover
    from .config import Rules


class Suit(IntEnum):
    """Kreuz, Pik, Herz, Karo. Order is the fixed suit priority among Queens and Jacks."""
    CLUBS = 0
    SPADES = 1
    HEARTS = 2
    DIAMONDS = 3

    @property
    def key(self) -> str:
        return self.name.lower()


class Rank(Enum):
    NINE = "9"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    TEN = "10"
    ACE = "A"


CARD_POINTS: Dict[Rank, int] = {
    Rank.ACE: 11,
    Rank.TEN: 10,
    Rank.KING: 4,
    Rank.QUEEN: 3,
    Rank.JACK: 2,
    Rank.NINE: 0,
}

# Plain-suit strength ladder. Not derived from CARD_POINTS.
PLAIN_LADDER: Dict[Rank, int] = {
    Rank.NINE: 0,
    Rank.JACK: 1,
    Rank.QUEEN: 2,
    Rank.KING: 3,
    Rank.TEN: 4,
    Rank.ACE: 5,
}

SUIT_SYMBOLS = {Suit.CLUBS: "♣", Suit.SPADES: "♠", Suit.HEARTS: "♥", Suit.DIAMONDS: "♦"}

SUIT_NAMES_DE = {Suit.CLUBS: "Kreuz", Suit.SPADES: "Pik", Suit.HEARTS: "Herz", Suit.DIAMONDS: "Karo"}

COPIES = 2


@dataclass(frozen=True)
class Card:
    """
    One physical card. Identity is (suit, rank, copy); the two copies of a
    double deck compare unequal. trump_rank is None for plain cards and for
    cards that have not been classified yet (see trump.classify).
    """

    suit: Suit
    rank: Rank
    copy: int
    trump_rank: int | None = field(default=None, compare=False)
    classified: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if self.copy not in (1, 2):
            raise ValueError(f"Card copy must be 1 or 2, got {self.copy}")

    @property
    def id(self) -> str:
        return f"{self.suit.key}_{self.rank.value}_{self.copy}"

    @property
    def key(self) -> str:
        """(suit, rank) key shared by both copies, e.g. ``hearts_A``."""
        return f"{self.suit.key}_{self.rank.value}"

    @property
    def value(self) -> int:
        return CARD_POINTS[self.rank]

    @property
    def is_trump(self) -> bool:
        if not self.classified:
            raise ValueError(f"Card {self.id} has not been classified for trump")
        return self.trump_rank is not None

    def is_card(self, suit: Suit, rank: Rank) -> bool:
        return self.suit == suit and self.rank == rank

    def with_trump_rank(self, trump_rank: int | None) -> "Card":
        return replace(self, trump_rank=trump_rank, classified=True)

    def to_data(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "suit": self.suit.key,
            "rank": self.rank.value,
            "copy": self.copy,
            "value": self.value,
            "is_trump": self.trump_rank is not None,
            "trump_rank": self.trump_rank,
        }

    @staticmethod
    def from_data(d: Dict[str, Any]) -> "Card":
        card = Card(suit=Suit[d["suit"].upper()], rank=Rank(d["rank"]), copy=int(d["copy"]))
        return card.with_trump_rank(d.get("trump_rank"))

    def __str__(self) -> str:
        marker = "*" if self.classified and self.trump_rank is not None else ""
        return f"{self.rank.value}{SUIT_SYMBOLS[self.suit]}{marker}"

    def __repr__(self) -> str:
        return self.id


def make_deck(rules: "Rules | None" = None) -> list[Card]:
    """Build the unshuffled double deck for the rule set (plain, unclassified cards)."""
    if rules is None:
        from .config import Rules

        rules = Rules()
    deck: list[Card] = []
    for suit in Suit:
        for rank in rules.ranks:
            for copy in range(1, COPIES + 1):
                deck.append(Card(suit=suit, rank=rank, copy=copy))
    return deck


def shuffle(cards: list[Card], rng: random.Random | None = None) -> list[Card]:
    """Return a shuffled copy (Fisher-Yates via random.shuffle)."""
    if rng is None:
        rng = random.Random()
    out = list(cards)
    rng.shuffle(out)
    return out


class Deal(NamedTuple):
    """Four equal hands, seat 0..3 clockwise."""
    hands: tuple[list[Card], list[Card], list[Card], list[Card]]


def deal_4p(
    deck: list[Card] | None = None,
    rng: random.Random | None = None,
    rules: "Rules | None" = None,
) -> Deal:
    """
    Shuffle and deal the whole deck into four hands of equal size.
    The deck is consumed by this single deal.
    """
    if deck is None:
        deck = make_deck(rules)
    if len(deck) % 4:
        raise ValueError(f"Deck of {len(deck)} cards cannot be dealt to 4 players")
    cards = shuffle(deck, rng)
    size = len(cards) // 4
    hands = [cards[i * size:(i + 1) * size] for i in range(4)]
    return Deal(hands=(hands[0], hands[1], hands[2], hands[3]))


def find_card(cards: Iterable[Card], card_id: str) -> Card | None:
    for c in cards:
        if c.id == card_id:
            return c
    return None


class DeckValidationResult(NamedTuple):
    ok: bool
    errors: list[str]


def validate_double_deck(hands: Iterable[Iterable[Card]], rules: "Rules | None" = None) -> DeckValidationResult:
    """
    Check that the dealt hands hold every (suit, rank) exactly twice and nothing else.
    Errors name the offending key and the observed count, e.g. ``hearts_A: expected 2, got 1``.
    """
    if rules is None:
        from .config import Rules

        rules = Rules()
    all_cards = [c for hand in hands for c in hand]
    errors: list[str] = []

    expected_total = len(Suit) * len(rules.ranks) * COPIES
    if len(all_cards) != expected_total:
        errors.append(f"Total cards: expected {expected_total}, got {len(all_cards)}")

    counts = Counter(c.key for c in all_cards)
    expected_keys = [f"{s.key}_{r.value}" for s in Suit for r in rules.ranks]
    for key in expected_keys:
        n = counts.get(key, 0)
        if n != COPIES:
            errors.append(f"{key}: expected {COPIES}, got {n}")
    for key, n in counts.items():
        if key not in expected_keys:
            errors.append(f"Unexpected card key: {key} (count: {n})")

    return DeckValidationResult(ok=not errors, errors=errors)
