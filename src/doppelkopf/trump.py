"""
Trump classification and ordering.

Trump ladder, strongest first (trump rank 0 is the strongest card):
  1. Ten of Hearts ("Dulle"), if the rule set plays with it
  2. Queens: Clubs > Spades > Hearts > Diamonds
  3. Jacks:  Clubs > Spades > Hearts > Diamonds
  4. Remaining trump-suit cards: Ace > Ten > King > Nine
Everything else is a plain ("Fehl") card without trump rank.
Classification depends only on (suit, rank) and the rule set.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Iterable

from .config import Rules
from .deck import PLAIN_LADDER, Card, Rank, Suit

DEFAULT_RULES = Rules()

SUIT_PRIORITY = (Suit.CLUBS, Suit.SPADES, Suit.HEARTS, Suit.DIAMONDS)
TRUMP_SUIT_RANKS = (Rank.ACE, Rank.TEN, Rank.KING, Rank.NINE)
DULLE = (Suit.HEARTS, Rank.TEN)


@lru_cache(maxsize=None)
def trump_order(rules: Rules = DEFAULT_RULES) -> tuple[tuple[Suit, Rank], ...]:
    """All trump (suit, rank) pairs in the rule set, strongest first."""
    order: list[tuple[Suit, Rank]] = []
    if rules.dulle:
        order.append(DULLE)
    for face in (Rank.QUEEN, Rank.JACK):
        for suit in SUIT_PRIORITY:
            order.append((suit, face))
    for rank in TRUMP_SUIT_RANKS:
        pair = (rules.trump_suit, rank)
        if rank in rules.ranks and pair not in order:
            order.append(pair)
    return tuple(order)


@lru_cache(maxsize=None)
def _rank_table(rules: Rules) -> dict[tuple[Suit, Rank], int]:
    return {pair: i for i, pair in enumerate(trump_order(rules))}


def trump_rank(card: Card, rules: Rules = DEFAULT_RULES) -> int | None:
    """Trump rank of the card (0 = strongest) or None for a plain card."""
    return _rank_table(rules).get((card.suit, card.rank))


def is_trump(card: Card, rules: Rules = DEFAULT_RULES) -> bool:
    return trump_rank(card, rules) is not None


def classify(card: Card, rules: Rules = DEFAULT_RULES) -> Card:
    """Return the frozen, classified version of a plain card."""
    return card.with_trump_rank(trump_rank(card, rules))


def initialize_trump_cards(cards: Iterable[Card], rules: Rules = DEFAULT_RULES) -> list[Card]:
    """Classify every card in play once. The result is what the game works with."""
    return [classify(c, rules) for c in cards]


def compare_trump_cards(a: Card, b: Card) -> int:
    """
    Negative if a is the stronger trump, positive if b is, 0 for two copies
    of the same card. Both cards must be classified trumps.
    """
    if not a.is_trump or not b.is_trump:
        raise ValueError(f"Cannot compare non-trump cards: {a!r}, {b!r}")
    return a.trump_rank - b.trump_rank


def plain_strength(card: Card) -> int:
    return PLAIN_LADDER[card.rank]


def strength_key(card: Card) -> tuple[int, int, int]:
    """
    Total order used to pick the strongest / weakest card of a set:
    every trump is above every plain card, trumps by trump rank, plain
    cards by the plain ladder and then by point value.
    """
    if card.is_trump:
        return (1, -card.trump_rank, card.value)
    return (0, plain_strength(card), card.value)


def hand_sort_key(card: Card) -> tuple[int, int, int]:
    """Display order: trumps strongest first, then plain suits by suit priority, high to low."""
    if card.is_trump:
        return (0, card.trump_rank, 0)
    return (1, int(card.suit), -plain_strength(card))


def filter_trump_cards(cards: Iterable[Card]) -> list[Card]:
    return [c for c in cards if c.is_trump]


def filter_plain_cards(cards: Iterable[Card]) -> list[Card]:
    return [c for c in cards if not c.is_trump]


def count_trump_cards(cards: Iterable[Card]) -> int:
    return len(filter_trump_cards(cards))


def is_fox(card: Card, rules: Rules = DEFAULT_RULES) -> bool:
    """Ace of the trump suit."""
    return card.is_card(rules.trump_suit, Rank.ACE)


def is_karlchen(card: Card) -> bool:
    """Jack of Clubs."""
    return card.is_card(Suit.CLUBS, Rank.JACK)


def is_marker(card: Card) -> bool:
    """Queen of Clubs: whoever holds one plays Re."""
    return card.is_card(Suit.CLUBS, Rank.QUEEN)
