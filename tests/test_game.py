"""Tests for the game engine: dealing, turn order, rejections and scoring."""
import random

import pytest

from doppelkopf.config import Rules
from doppelkopf.deck import Deal, make_deck
from doppelkopf.errors import InvariantError
from doppelkopf.game import GameEngine, Phase
from doppelkopf.player import Team
from doppelkopf.scoring import derive_special_points, validate_total_points
from doppelkopf.teams import validate_team_assignment


def _engine(seed: int = 1, rules: Rules | None = None) -> GameEngine:
    engine = GameEngine(rules, random.Random(seed))
    engine.start_game()
    return engine


def _play_out(engine: GameEngine) -> None:
    while engine.state.phase in (Phase.ANNOUNCEMENTS, Phase.PLAYING):
        card = engine.legal_moves()[0]
        result = engine.play_card(card.id)
        assert result.success, result.error


def test_start_game_deals_and_assigns_teams():
    engine = _engine()
    state = engine.state
    assert state.phase == Phase.ANNOUNCEMENTS
    assert [p.hand_size for p in state.players] == [12] * 4
    assert validate_team_assignment(state.players)
    assert state.players[0].is_human
    assert sum(p.is_human for p in state.players) == 1
    assert len({c.id for c in state.all_cards()}) == 48


def test_start_game_without_nines():
    engine = _engine(rules=Rules(with_nines=False))
    assert [p.hand_size for p in engine.state.players] == [10] * 4


def test_random_deals_never_hold_both_markers_in_one_hand():
    for seed in range(30):
        engine = _engine(seed)
        assert validate_team_assignment(engine.state.players)


def test_invalid_fixed_deal_is_rejected():
    deck = make_deck()
    hands = (deck[0:12], deck[12:24], deck[24:36], deck[24:36])
    engine = GameEngine(rng=random.Random(0))
    with pytest.raises(InvariantError):
        engine.start_game(deal=Deal(hands=hands))


def test_full_game_conserves_points():
    engine = _engine(3)
    _play_out(engine)
    state = engine.state
    assert state.phase == Phase.FINISHED
    assert len(state.completed_tricks) == 12
    assert all(p.hand_size == 0 for p in state.players)
    score = state.final_score
    assert score is not None
    assert validate_total_points(score.re_points, score.kontra_points)
    assert score.winner == (Team.RE if score.re_points > score.kontra_points else Team.KONTRA)
    assert sum(p.tricks_taken for p in state.players) == 12


def test_recorded_achievements_match_derived():
    engine = _engine(11)
    _play_out(engine)
    state = engine.state
    derived = derive_special_points(state.players, state.completed_tricks, state.rules)
    assert derived == state.special
    assert state.final_score.total_game_value == 1 + len(state.final_score.flags) + state.special.count


def test_trick_winner_leads_next():
    engine = _engine(5)
    for _ in range(4):
        engine.play_card(engine.legal_moves()[0].id)
    first = engine.state.completed_tricks[0]
    assert engine.state.current_trick.lead_player_id == first.winner_id
    assert engine.current_player().id == first.winner_id
    assert engine.state.current_trick.number == 2


def test_wrong_seat_is_rejected_without_change():
    engine = _engine(2)
    engine.start_playing()
    snapshot = engine.export_state()
    card = engine.state.players[1].hand[0]
    result = engine.play_card(card.id, "player_1")
    assert not result.success
    assert result.error == "Du bist nicht am Zug"
    assert engine.export_state() == snapshot


def test_card_not_in_hand_is_rejected():
    engine = _engine(2)
    other = engine.state.players[2].hand[0]
    result = engine.play_card(other.id)
    assert not result.success
    assert result.error == "Karte nicht auf der Hand"
    assert engine.state.players[2].find_card(other.id) is other


def test_rejected_play_keeps_announcement_phase():
    engine = _engine(2)
    assert not engine.play_card("no_such_card").success
    assert not engine.play_card(engine.state.players[1].hand[0].id, "player_1").success
    assert engine.state.phase == Phase.ANNOUNCEMENTS
    # Announcements stay open until a card is actually played.
    human = engine.state.players[0]
    assert engine.announce_team(human.id, human.team).success
    assert engine.play_card(engine.legal_moves()[0].id).success
    assert engine.state.phase == Phase.PLAYING


def test_illegal_card_is_rejected_with_reason():
    # Find a deal where seat 1 cannot play every card on the lead.
    for seed in range(50):
        engine = _engine(seed)
        engine.play_card(engine.legal_moves()[0].id)
        legal = {c.id for c in engine.legal_moves()}
        hand = engine.current_player().hand
        illegal = [c for c in hand if c.id not in legal]
        if illegal:
            before = len(hand)
            result = engine.play_card(illegal[0].id)
            assert not result.success
            assert result.error.startswith("Du musst")
            assert len(engine.current_player().hand) == before
            return
    pytest.fail("no deal with an illegal follow found")


def test_play_after_finish_is_rejected():
    engine = _engine(4)
    _play_out(engine)
    result = engine.play_card("clubs_Q_1")
    assert not result.success
    assert result.error == "Das Spiel läuft nicht"


def test_announcement_checks():
    engine = _engine(6)
    state = engine.state
    human = state.players[0]
    wrong = human.team.opponent
    assert not engine.announce_team(human.id, wrong).success
    assert engine.announce_team(human.id, human.team).success
    assert human.has_announced
    assert engine.announce_team(human.id, human.team).error == "Bereits angesagt"


def test_announcement_too_late():
    engine = _engine(7)
    # Play two full tricks; every seat has played two cards.
    for _ in range(8):
        engine.play_card(engine.legal_moves()[0].id)
    player = engine.state.players[1]
    result = engine.announce_team(player.id, player.team)
    assert not result.success
    assert result.error == "Ansage ist nicht mehr möglich"


def test_start_playing_requires_announcement_phase():
    engine = _engine(8)
    engine.start_playing()
    with pytest.raises(ValueError):
        engine.start_playing()


def test_reset_deals_new_game():
    engine = _engine(9)
    engine.play_card(engine.legal_moves()[0].id)
    old_id = engine.state.id
    state = engine.reset()
    assert state.id != old_id
    assert state.phase == Phase.ANNOUNCEMENTS
    assert len(state.current_trick) == 0
    assert state.scores == (0, 0)


def test_clone_is_independent():
    engine = _engine(10)
    engine.play_card(engine.legal_moves()[0].id)
    other = engine.clone()
    other.play_card(other.legal_moves()[0].id)
    assert len(engine.state.current_trick) == 1
    assert len(other.state.current_trick) == 2
