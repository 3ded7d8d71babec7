"""
Headless AI-only games for checking the engine and comparing AI tiers.

Games run synchronously without thinking delays; results are summarised
with numpy.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np

from .ai import AILevel, select_card
from .config import Rules
from .errors import InvariantError
from .game import GameEngine, Phase
from .player import Team
from .scoring import GameScore, validate_total_points

log = logging.getLogger(__name__)


@dataclass
class SimulationSummary:
    games: int
    re_points_mean: float
    re_points_std: float
    re_win_rate: float
    game_value_mean: float
    foxes_caught: int
    karlchen: int
    doppelkopf_tricks: int
    wins_by_seat: Dict[int, int]

    def format(self) -> str:
        seats = ", ".join(f"{seat}: {n}" for seat, n in sorted(self.wins_by_seat.items()))
        return (
            f"games={self.games} re_points={self.re_points_mean:.1f}±{self.re_points_std:.1f} "
            f"re_win_rate={self.re_win_rate:.3f} game_value={self.game_value_mean:.2f} "
            f"foxes={self.foxes_caught} karlchen={self.karlchen} doppelkopf={self.doppelkopf_tricks} "
            f"wins_by_seat=[{seats}]"
        )


def play_ai_game(
    levels: Sequence[AILevel | str],
    rules: Rules | None = None,
    rng: random.Random | None = None,
) -> tuple[GameEngine, GameScore]:
    """Play one full game with four AI seats and return the engine and final score."""
    rng = rng if rng is not None else random.Random()
    engine = GameEngine(rules, rng)
    # No human seat: every seat is driven by select_card.
    engine.start_game(human_index=0)
    engine.state.players[0].is_human = False
    engine.start_playing()
    tiers = [AILevel(level) for level in levels]

    while engine.state.phase == Phase.PLAYING:
        player = engine.current_player()
        seat = engine.state.current_player_index
        card = select_card(tiers[seat], player, engine.state, rng)
        if card is None:
            raise InvariantError(f"{player.id} has no card to play in {engine.state.current_trick.id}")
        result = engine.play_card(card.id, player.id)
        if not result.success:
            raise InvariantError(f"AI card {card.id} of {player.id} rejected: {result.error}")

    score = engine.state.final_score
    if score is None:
        raise InvariantError("Game ended without a final score")
    if not validate_total_points(score.re_points, score.kontra_points):
        raise InvariantError(f"Card points do not add up: {score.re_points} + {score.kontra_points}")
    return engine, score


def simulate_games(
    n: int,
    levels: Sequence[AILevel | str] = (AILevel.MEDIUM,) * 4,
    rules: Rules | None = None,
    seed: int | None = None,
) -> SimulationSummary:
    """Play n AI-only games and summarise points, wins and achievements."""
    if n <= 0:
        raise ValueError(f"n must be positive, got {n}")
    if len(levels) != 4:
        raise ValueError(f"Need one AI level per seat, got {len(levels)}")
    rng = random.Random(seed)
    re_points = np.zeros(n, dtype=np.int64)
    re_won = np.zeros(n, dtype=bool)
    values = np.zeros(n, dtype=np.int64)
    foxes = karlchen = doppelkopf = 0
    wins_by_seat = {seat: 0 for seat in range(4)}

    for i in range(n):
        engine, score = play_ai_game(levels, rules, rng)
        re_points[i] = score.re_points
        re_won[i] = score.winner == Team.RE
        values[i] = score.total_game_value
        foxes += len(score.special.foxes_caught)
        karlchen += 1 if score.special.karlchen is not None else 0
        doppelkopf += len(score.special.doppelkopf_tricks)
        for seat, player in enumerate(engine.state.players):
            if player.team == score.winner:
                wins_by_seat[seat] += 1
        log.debug("Game %d: %s wins %d:%d", i, score.winner.value, score.re_points, score.kontra_points)

    return SimulationSummary(
        games=n,
        re_points_mean=float(np.mean(re_points)),
        re_points_std=float(np.std(re_points)),
        re_win_rate=float(np.mean(re_won)),
        game_value_mean=float(np.mean(values)),
        foxes_caught=foxes,
        karlchen=karlchen,
        doppelkopf_tricks=doppelkopf,
        wins_by_seat=wins_by_seat,
    )


__all__ = ["SimulationSummary", "play_ai_game", "simulate_games"]
