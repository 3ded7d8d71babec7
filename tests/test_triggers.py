"""Tests for the individual hint and feedback triggers."""
from doppelkopf.deck import Card, Rank, Suit
from doppelkopf.player import Team
from doppelkopf.scoring import FoxCatch
from doppelkopf.trick import Trick
from doppelkopf.triggers import (
    FeedbackContext,
    HintContext,
    HintId,
    Timing,
    check_eyes_management,
    check_follow_suit_or_trump,
    check_fox_caught,
    check_fox_protection,
    check_good_fox_protection,
    check_good_schmieren,
    check_karlchen_late_game,
    check_lost_high_trump,
    check_missed_win,
    check_save_high_trumps,
    check_schmieren,
    check_trump_beats_suit,
    is_teammate,
)
from doppelkopf.trump import initialize_trump_cards


def _c(suit: Suit, rank: Rank, copy: int = 1) -> Card:
    return initialize_trump_cards([Card(suit, rank, copy)])[0]


def _trick(plays: list[tuple[int, Card]], number: int = 1, winner: int | None = None) -> Trick:
    trick = Trick(f"player_{plays[0][0]}" if plays else "player_0", number)
    for seat, card in plays:
        trick.add_card(card, f"player_{seat}")
    if winner is not None:
        # Feedback runs on complete tricks: the remaining seats add a Nine of Hearts.
        seated = {seat for seat, _ in plays}
        lead = plays[0][0]
        for seat in ((lead + i) % 4 for i in range(4)):
            if seat not in seated:
                trick.add_card(_c(Suit.HEARTS, Rank.NINE), f"player_{seat}")
        trick.set_winner(f"player_{winner}")
    return trick


def _ctx(card: Card, hand: list[Card], plays: list[tuple[int, Card]], trick_number: int = 1, **kw) -> HintContext:
    return HintContext(
        card=card,
        hand=hand,
        trick=_trick(plays),
        trick_number=trick_number,
        player_id="player_0",
        player_team=Team.RE,
        **kw,
    )


def _feedback(plays: list[tuple[int, Card]], winner: int, number: int = 1, **kw) -> FeedbackContext:
    return FeedbackContext(
        trick=_trick(plays, number, winner),
        player_id="player_0",
        player_team=Team.RE,
        **kw,
    )


PARTNER_KNOWN = {"player_2": Team.RE}


def test_teammate_needs_public_evidence():
    assert is_teammate("player_2", Team.RE, PARTNER_KNOWN)
    assert not is_teammate("player_2", Team.RE, {})
    assert not is_teammate("player_2", Team.UNKNOWN, {"player_2": Team.UNKNOWN})


def test_follow_suit_rule_hint():
    hand = [_c(Suit.SPADES, Rank.NINE), _c(Suit.HEARTS, Rank.ACE)]
    plays = [(1, _c(Suit.SPADES, Rank.ACE))]
    hint = check_follow_suit_or_trump(_ctx(hand[1], hand, plays))
    assert hint.id == HintId.FOLLOW_SUIT_OR_TRUMP
    assert hint.title == "Du musst Pik bedienen!"
    assert hint.timing == Timing.RULE
    assert hint.is_rule_violation
    assert check_follow_suit_or_trump(_ctx(hand[0], hand, plays)) is None


def test_follow_trump_rule_hint():
    hand = [_c(Suit.DIAMONDS, Rank.KING), _c(Suit.HEARTS, Rank.ACE)]
    hint = check_follow_suit_or_trump(_ctx(hand[1], hand, [(1, _c(Suit.CLUBS, Rank.JACK))]))
    assert hint.title == "Du musst Trumpf bedienen!"


def test_trump_beats_suit():
    hand = [_c(Suit.HEARTS, Rank.ACE), _c(Suit.DIAMONDS, Rank.JACK)]
    plays = [(2, _c(Suit.SPADES, Rank.ACE)), (3, _c(Suit.DIAMONDS, Rank.KING))]
    assert check_trump_beats_suit(_ctx(hand[0], hand, plays)).id == HintId.TRUMP_BEATS_SUIT
    assert check_trump_beats_suit(_ctx(hand[1], hand, plays)) is None


def test_save_high_trumps():
    hand = [_c(Suit.CLUBS, Rank.QUEEN), _c(Suit.DIAMONDS, Rank.JACK)]
    plays = [(1, _c(Suit.DIAMONDS, Rank.NINE))]
    assert check_save_high_trumps(_ctx(hand[0], hand, plays)).id == HintId.SAVE_HIGH_TRUMPS
    assert check_save_high_trumps(_ctx(hand[1], hand, plays)) is None
    # Only the Queen wins against the Spade Jack: nothing to save.
    plays = [(1, _c(Suit.SPADES, Rank.JACK))]
    assert check_save_high_trumps(_ctx(hand[0], hand, plays)) is None


def test_fox_protection():
    hand = [_c(Suit.DIAMONDS, Rank.ACE), _c(Suit.DIAMONDS, Rank.NINE)]
    hint = check_fox_protection(_ctx(hand[0], hand, [(1, _c(Suit.SPADES, Rank.QUEEN))]))
    assert hint.id == HintId.FOX_PROTECTION
    assert check_fox_protection(_ctx(hand[0], hand, [(1, _c(Suit.DIAMONDS, Rank.NINE, 2))])) is None
    assert check_fox_protection(_ctx(hand[0], hand, [])) is None


def test_eyes_management():
    hand = [_c(Suit.CLUBS, Rank.TEN), _c(Suit.CLUBS, Rank.NINE)]
    plays = [(1, _c(Suit.CLUBS, Rank.ACE))]
    assert check_eyes_management(_ctx(hand[0], hand, plays)).id == HintId.EYES_MANAGEMENT
    assert check_eyes_management(_ctx(hand[1], hand, plays)) is None
    known = {"player_1": Team.RE}
    assert check_eyes_management(_ctx(hand[0], hand, plays, public_teams=known)) is None


def test_schmieren_only_with_known_partner():
    hand = [_c(Suit.CLUBS, Rank.TEN), _c(Suit.CLUBS, Rank.KING)]
    plays = [(2, _c(Suit.CLUBS, Rank.ACE)), (3, _c(Suit.CLUBS, Rank.NINE))]
    assert check_schmieren(_ctx(hand[1], hand, plays, public_teams=PARTNER_KNOWN)).id == HintId.SCHMIEREN
    assert check_schmieren(_ctx(hand[1], hand, plays)) is None
    assert check_schmieren(_ctx(hand[0], hand, plays, public_teams=PARTNER_KNOWN)) is None


def test_karlchen_late_game():
    hand = [_c(Suit.CLUBS, Rank.JACK), _c(Suit.DIAMONDS, Rank.NINE)]
    hint = check_karlchen_late_game(_ctx(hand[1], hand, [], trick_number=11))
    assert hint.title == "Karlchen-Chance!"
    hint = check_karlchen_late_game(_ctx(hand[1], hand, [], trick_number=10))
    assert hint.title == "Karlchen für letzten Stich?"
    assert check_karlchen_late_game(_ctx(hand[1], hand, [], trick_number=5)) is None
    assert check_karlchen_late_game(_ctx(hand[0], hand, [], trick_number=11)) is None


def test_fox_caught_feedback():
    plays = [(0, _c(Suit.DIAMONDS, Rank.ACE)), (1, _c(Suit.CLUBS, Rank.QUEEN))]
    caught = [FoxCatch(Team.KONTRA, "player_0", 3)]
    hint = check_fox_caught(_feedback(plays, 1, number=3, foxes_caught=caught))
    assert hint.id == HintId.FEEDBACK_FOX_CAUGHT
    assert hint.timing == Timing.FEEDBACK
    assert check_fox_caught(_feedback(plays, 1, number=4, foxes_caught=caught)) is None


def test_lost_high_trump_feedback():
    plays = [(0, _c(Suit.DIAMONDS, Rank.TEN)), (1, _c(Suit.CLUBS, Rank.QUEEN))]
    assert check_lost_high_trump(_feedback(plays, 1)).id == HintId.FEEDBACK_LOST_HIGH_TRUMP
    assert check_lost_high_trump(_feedback(plays, 0)) is None


def test_missed_win_feedback():
    hand_before = [_c(Suit.HEARTS, Rank.ACE), _c(Suit.DIAMONDS, Rank.JACK)]
    plays = [
        (1, _c(Suit.SPADES, Rank.ACE)),
        (2, _c(Suit.SPADES, Rank.TEN)),
        (3, _c(Suit.SPADES, Rank.KING)),
        (0, hand_before[0]),
    ]
    hint = check_missed_win(_feedback(plays, 1, hand_before=hand_before))
    assert hint.id == HintId.FEEDBACK_MISSED_WIN
    assert "J♦" in hint.message
    known = {"player_1": Team.RE}
    assert check_missed_win(_feedback(plays, 1, hand_before=hand_before, public_teams=known)) is None


def test_missed_win_ignores_illegal_alternatives():
    hand_before = [_c(Suit.SPADES, Rank.NINE), _c(Suit.CLUBS, Rank.QUEEN)]
    plays = [
        (1, _c(Suit.SPADES, Rank.ACE)),
        (2, _c(Suit.SPADES, Rank.TEN)),
        (3, _c(Suit.SPADES, Rank.KING)),
        (0, hand_before[0]),
    ]
    assert check_missed_win(_feedback(plays, 1, hand_before=hand_before)) is None


def test_good_fox_protection_feedback():
    plays = [(0, _c(Suit.DIAMONDS, Rank.ACE)), (1, _c(Suit.DIAMONDS, Rank.NINE))]
    assert check_good_fox_protection(_feedback(plays, 0)).id == HintId.FEEDBACK_GOOD_FOX_PROTECTION
    assert check_good_fox_protection(_feedback(plays, 1)) is None


def test_good_schmieren_feedback():
    plays = [(2, _c(Suit.CLUBS, Rank.ACE)), (3, _c(Suit.CLUBS, Rank.NINE)), (0, _c(Suit.CLUBS, Rank.TEN))]
    hint = check_good_schmieren(_feedback(plays, 2, public_teams=PARTNER_KNOWN))
    assert hint.id == HintId.FEEDBACK_GOOD_SCHMIEREN
    assert check_good_schmieren(_feedback(plays, 2)) is None
