"""Tests for the double deck, dealing and deck validation."""
import random

import pytest

from doppelkopf.config import Rules
from doppelkopf.deck import (
    CARD_POINTS,
    Card,
    Rank,
    Suit,
    deal_4p,
    find_card,
    make_deck,
    validate_double_deck,
)
from doppelkopf.trump import classify


def test_deck_sizes():
    assert len(make_deck()) == 48
    assert len(make_deck(Rules(with_nines=False))) == 40
    assert Rules().total_tricks == 12
    assert Rules(with_nines=False).total_tricks == 10


def test_deck_holds_two_copies_of_each_card():
    deck = make_deck()
    ids = [c.id for c in deck]
    assert len(set(ids)) == 48
    assert "clubs_Q_1" in ids and "clubs_Q_2" in ids


def test_card_points_total_240():
    assert sum(c.value for c in make_deck()) == 240
    assert sum(c.value for c in make_deck(Rules(with_nines=False))) == 240
    assert CARD_POINTS[Rank.ACE] == 11
    assert CARD_POINTS[Rank.NINE] == 0


def test_copies_are_distinct_cards():
    a = Card(Suit.HEARTS, Rank.ACE, 1)
    b = Card(Suit.HEARTS, Rank.ACE, 2)
    assert a != b
    assert a.key == b.key == "hearts_A"


def test_card_copy_must_be_1_or_2():
    with pytest.raises(ValueError):
        Card(Suit.HEARTS, Rank.ACE, 3)


def test_unclassified_card_has_no_trump_flag():
    card = Card(Suit.DIAMONDS, Rank.ACE, 1)
    with pytest.raises(ValueError):
        card.is_trump
    assert classify(card).is_trump


def test_classification_does_not_change_identity():
    plain = Card(Suit.CLUBS, Rank.QUEEN, 1)
    assert classify(plain) == plain
    assert classify(plain).id == plain.id


def test_card_data_round_trip_keeps_trump_rank():
    card = classify(Card(Suit.SPADES, Rank.JACK, 2))
    restored = Card.from_data(card.to_data())
    assert restored == card
    assert restored.trump_rank == card.trump_rank


def test_deal_4p_equal_hands():
    deal = deal_4p(rng=random.Random(1))
    assert [len(h) for h in deal.hands] == [12, 12, 12, 12]
    assert validate_double_deck(deal.hands).ok


def test_deal_is_reproducible_with_seed():
    a = deal_4p(rng=random.Random(5))
    b = deal_4p(rng=random.Random(5))
    assert [[c.id for c in h] for h in a.hands] == [[c.id for c in h] for h in b.hands]


def test_validation_reports_missing_card():
    deal = deal_4p(rng=random.Random(2))
    hands = [list(h) for h in deal.hands]
    dropped = hands[0].pop()
    result = validate_double_deck(hands)
    assert not result.ok
    assert "Total cards: expected 48, got 47" in result.errors
    assert f"{dropped.key}: expected 2, got 1" in result.errors


def test_validation_reports_duplicate_card():
    deal = deal_4p(rng=random.Random(3))
    hands = [list(h) for h in deal.hands]
    hands[1].append(hands[2][0])
    result = validate_double_deck(hands)
    assert not result.ok
    assert f"{hands[2][0].key}: expected 2, got 3" in result.errors


def test_validation_reports_unexpected_card_without_nines():
    rules = Rules(with_nines=False)
    deal = deal_4p(rng=random.Random(4), rules=rules)
    hands = [list(h) for h in deal.hands]
    hands[0][0] = Card(Suit.HEARTS, Rank.NINE, 1)
    result = validate_double_deck(hands, rules)
    assert not result.ok
    assert any(e.startswith("Unexpected card key: hearts_9") for e in result.errors)


def test_find_card():
    deck = make_deck()
    assert find_card(deck, "diamonds_A_2") == Card(Suit.DIAMONDS, Rank.ACE, 2)
    assert find_card(deck, "nope") is None
