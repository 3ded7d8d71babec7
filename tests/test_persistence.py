"""Tests for snapshot export and import."""
import json
import random

import pytest

from doppelkopf.errors import InvariantError
from doppelkopf.game import GameEngine, GameState, Phase
from doppelkopf.persistence import (
    SCHEMA_VERSION,
    game_state_from_dict,
    game_state_from_json,
    game_state_to_dict,
    game_state_to_json,
    load_game,
    save_game,
)


def _mid_game(seed: int = 1, plays: int = 6) -> GameEngine:
    engine = GameEngine(rng=random.Random(seed))
    engine.start_game()
    engine.announce_team("player_0", engine.state.players[0].team)
    for _ in range(plays):
        engine.play_card(engine.legal_moves()[0].id)
    return engine


def test_snapshot_shape():
    engine = _mid_game()
    d = game_state_to_dict(engine.state, metadata={"ai": "medium"})
    assert d["schema_version"] == SCHEMA_VERSION
    assert d["metadata"] == {"ai": "medium"}
    state = d["state"]
    assert len(state["cards"]) == 48
    assert len({c["id"] for c in state["cards"]}) == 48
    assert isinstance(state["players"][0]["hand"][0], str)
    json.dumps(d)


def test_round_trip_restores_play_position():
    engine = _mid_game()
    restored = game_state_from_json(game_state_to_json(engine.state))
    state = engine.state
    assert restored.id == state.id
    assert restored.phase == state.phase
    assert restored.current_player_index == state.current_player_index
    assert [c.id for c in restored.current_trick.cards] == [c.id for c in state.current_trick.cards]
    assert [[c.id for c in p.hand] for p in restored.players] == [[c.id for c in p.hand] for p in state.players]
    assert [p.team for p in restored.players] == [p.team for p in state.players]
    assert restored.players[0].has_announced
    assert restored.scores == state.scores
    assert restored.completed_tricks[0].winner_id == state.completed_tricks[0].winner_id


def test_restored_cards_are_shared_objects():
    engine = _mid_game(plays=5)
    restored = game_state_from_dict(game_state_to_dict(engine.state))
    by_id = {}
    for card in restored.all_cards():
        assert by_id.setdefault(card.id, card) is card
    trick_card = restored.completed_tricks[0].cards[0]
    assert trick_card.classified
    assert trick_card.is_trump == engine.state.completed_tricks[0].cards[0].is_trump


def test_restored_game_can_be_finished():
    engine = _mid_game()
    other = GameEngine(rng=random.Random(0))
    other.import_state(engine.export_state())
    while other.state.phase == Phase.PLAYING:
        assert other.play_card(other.legal_moves()[0].id).success
    assert other.state.phase == Phase.FINISHED
    assert other.state.final_score is not None


def test_finished_snapshot_recomputes_final_score():
    engine = _mid_game(plays=0)
    while engine.state.phase in (Phase.ANNOUNCEMENTS, Phase.PLAYING):
        engine.play_card(engine.legal_moves()[0].id)
    restored = GameState.from_data(engine.export_state())
    assert restored.final_score == engine.state.final_score


def test_finished_game_round_trip():
    engine = _mid_game(plays=0)
    while engine.state.phase in (Phase.ANNOUNCEMENTS, Phase.PLAYING):
        engine.play_card(engine.legal_moves()[0].id)
    data = game_state_to_dict(engine.state)
    assert len(data["state"]["cards"]) == 48
    restored = game_state_from_dict(data)
    assert restored.phase == Phase.FINISHED
    assert len(restored.all_cards()) == 48
    assert restored.current_trick is restored.completed_tricks[-1]
    again = game_state_from_json(game_state_to_json(restored))
    assert again.final_score == engine.state.final_score


def test_unknown_card_reference_fails():
    d = game_state_to_dict(_mid_game().state)
    d["state"]["players"][0]["hand"].append("hearts_A_3")
    with pytest.raises(InvariantError):
        game_state_from_dict(d)


def test_duplicate_card_fails():
    d = game_state_to_dict(_mid_game().state)
    d["state"]["cards"].append(d["state"]["cards"][0])
    with pytest.raises(InvariantError):
        game_state_from_dict(d)


def test_newer_schema_is_rejected():
    d = game_state_to_dict(_mid_game().state)
    d["schema_version"] = SCHEMA_VERSION + 1
    with pytest.raises(ValueError):
        game_state_from_dict(d)


def test_save_and_load(tmp_path):
    engine = _mid_game()
    path = tmp_path / "game.json"
    save_game(engine.state, path)
    restored = load_game(path)
    assert restored.scores == engine.state.scores
    assert restored.trick_number == engine.state.trick_number
