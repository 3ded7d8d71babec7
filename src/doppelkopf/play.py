"""
Trick-taking: legal moves (Bedienzwang), the beats relation and the trick winner.
Doppelkopf: follow the led plain suit, or trump if trump was led; trumps of the
led raw suit do not count as following. Highest trump wins, else highest card
of the led suit; first of two equal cards wins.

Validation, AI and hints all go through legal_plays() and beats().
"""
from __future__ import annotations

from typing import Iterable, NamedTuple, Sequence

from .deck import SUIT_NAMES_DE, Card, Suit
from .trick import Trick
from .trump import plain_strength

TRUMP = "trump"


def required_suit(trick: Trick) -> Suit | str | None:
    """TRUMP, the led plain suit, or None when leading."""
    lead = trick.lead_card()
    if lead is None:
        return None
    if lead.is_trump:
        return TRUMP
    return lead.suit


def has_suit(hand: Iterable[Card], suit: Suit | str) -> bool:
    if suit == TRUMP:
        return any(c.is_trump for c in hand)
    return any(c.suit == suit and not c.is_trump for c in hand)


def legal_plays(hand: Sequence[Card], trick: Trick) -> list[Card]:
    """
    Cards of hand that may be played into trick.
    Leading: anything. Trump led: a trump if held. Plain suit led: a
    non-trump card of that suit if held. Otherwise any card.
    """
    required = required_suit(trick)
    if required is None:
        return list(hand)
    if required == TRUMP:
        following = [c for c in hand if c.is_trump]
    else:
        following = [c for c in hand if c.suit == required and not c.is_trump]
    return following if following else list(hand)


def is_legal_move(card: Card, hand: Sequence[Card], trick: Trick) -> bool:
    return any(c.id == card.id for c in legal_plays(hand, trick))


def must_follow_suit(hand: Sequence[Card], trick: Trick) -> bool:
    """True if the obligation actually restricts the hand."""
    return len(legal_plays(hand, trick)) < len(hand)


def beats(card: Card, other: Card, lead_suit: Suit | None) -> bool:
    """True if card takes the lead from other, given the led plain suit (None = trump led)."""
    if card.is_trump and other.is_trump:
        return card.trump_rank < other.trump_rank
    if card.is_trump:
        return True
    if other.is_trump:
        return False
    if card.suit != other.suit or card.suit != lead_suit:
        return False
    return plain_strength(card) > plain_strength(other)


def current_winning_play(trick: Trick) -> tuple[str, Card] | None:
    """(player_id, card) currently holding the trick, complete or not."""
    plays = trick.plays
    if not plays:
        return None
    lead_suit = trick.lead_suit()
    best_player, best_card = plays[0]
    for p, c in plays[1:]:
        if beats(c, best_card, lead_suit):
            best_player, best_card = p, c
    return best_player, best_card


def current_winning_card(trick: Trick) -> Card | None:
    best = current_winning_play(trick)
    return best[1] if best else None


def current_winning_player(trick: Trick) -> str | None:
    best = current_winning_play(trick)
    return best[0] if best else None


def trick_winner(trick: Trick) -> str | None:
    """Winner of a complete trick, None while it is still open."""
    if not trick.is_complete():
        return None
    return current_winning_player(trick)


def would_win(card: Card, trick: Trick) -> bool:
    """True if card, played now, would take the lead of the trick."""
    winning = current_winning_card(trick)
    if winning is None:
        return True
    return beats(card, winning, trick.lead_suit())


def winning_plays(hand: Sequence[Card], trick: Trick) -> list[Card]:
    """Legal cards that would currently win the trick."""
    return [c for c in legal_plays(hand, trick) if would_win(c, trick)]


class MoveCheck(NamedTuple):
    valid: bool
    reason: str | None = None
    explanation: str | None = None


def validate_move(card: Card, hand: Sequence[Card], trick: Trick) -> MoveCheck:
    """Check one card against hand and trick, with a user-facing reason when refused."""
    if not any(c.id == card.id for c in hand):
        return MoveCheck(False, "Karte nicht gefunden", "Diese Karte ist nicht in deiner Hand.")
    if trick.is_complete():
        return MoveCheck(False, "Stich ist vollständig", "Der aktuelle Stich hat bereits 4 Karten.")
    if is_legal_move(card, hand, trick):
        return MoveCheck(True)

    required = required_suit(trick)
    if required == TRUMP:
        return MoveCheck(
            False,
            "Du musst Trumpf bedienen!",
            "In Doppelkopf gilt Bedienzwang: Wenn Trumpf angespielt wurde und du noch "
            "Trumpfkarten hast, musst du eine davon spielen.",
        )
    suit_name = SUIT_NAMES_DE[required]
    return MoveCheck(
        False,
        f"Du musst {suit_name} bedienen!",
        f"In Doppelkopf gilt Bedienzwang: Wenn {suit_name} angespielt wurde und du noch "
        f"{suit_name}-Karten hast, musst du eine davon spielen.",
    )
