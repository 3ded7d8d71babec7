"""
Score calculation: trick points per team, margin bonuses and achievements.

240 card points per game; Re needs 121 to win, Kontra wins with 120.
Game value = 1 (base) + against 90 / 60 / 30 / schwarz + one per achievement
(Fox caught, Karlchen, Doppelkopf trick).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, NamedTuple, Sequence

from .config import Rules
from .errors import InvariantError
from .player import Player, Team
from .trick import DOPPELKOPF_POINTS, Trick
from .trump import DEFAULT_RULES, is_fox, is_karlchen

TOTAL_POINTS = 240
POINTS_TO_WIN = 121
BASE_GAME_VALUE = 1

# Margin thresholds: the losing side ends strictly below these.
MARGINS = (("against_90", 90), ("against_60", 60), ("against_30", 30))


class TeamPoints(NamedTuple):
    re: int
    kontra: int


@dataclass(frozen=True)
class FoxCatch:
    caught_by: Team
    from_player_id: str
    trick_number: int


@dataclass(frozen=True)
class Karlchen:
    team: Team
    player_id: str


@dataclass(frozen=True)
class DoppelkopfTrick:
    team: Team
    player_id: str
    points: int
    trick_number: int


@dataclass
class SpecialPoints:
    """Achievements recorded trick by trick during play."""
    foxes_caught: list[FoxCatch] = field(default_factory=list)
    karlchen: Karlchen | None = None
    doppelkopf_tricks: list[DoppelkopfTrick] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.foxes_caught) + len(self.doppelkopf_tricks) + (1 if self.karlchen else 0)

    def count_for(self, team: Team) -> int:
        n = sum(1 for f in self.foxes_caught if f.caught_by == team)
        n += sum(1 for d in self.doppelkopf_tricks if d.team == team)
        if self.karlchen is not None and self.karlchen.team == team:
            n += 1
        return n

    def to_data(self) -> Dict[str, Any]:
        return {
            "foxes_caught": [
                {"caught_by": f.caught_by.value, "from_player_id": f.from_player_id, "trick_number": f.trick_number}
                for f in self.foxes_caught
            ],
            "karlchen": (
                {"team": self.karlchen.team.value, "player_id": self.karlchen.player_id}
                if self.karlchen is not None
                else None
            ),
            "doppelkopf_tricks": [
                {"team": d.team.value, "player_id": d.player_id, "points": d.points, "trick_number": d.trick_number}
                for d in self.doppelkopf_tricks
            ],
        }

    @staticmethod
    def from_data(d: Dict[str, Any]) -> "SpecialPoints":
        k = d.get("karlchen")
        return SpecialPoints(
            foxes_caught=[
                FoxCatch(Team(f["caught_by"]), f["from_player_id"], int(f["trick_number"]))
                for f in d.get("foxes_caught", [])
            ],
            karlchen=Karlchen(Team(k["team"]), k["player_id"]) if k else None,
            doppelkopf_tricks=[
                DoppelkopfTrick(Team(x["team"]), x["player_id"], int(x["points"]), int(x["trick_number"]))
                for x in d.get("doppelkopf_tricks", [])
            ],
        )


@dataclass(frozen=True)
class GameScore:
    re_points: int
    kontra_points: int
    winner: Team
    win_margin: int
    flags: Dict[str, Team]
    special: SpecialPoints
    total_game_value: int


def _players_by_id(players: Iterable[Player]) -> dict[str, Player]:
    return {p.id: p for p in players}


def _winner_team(trick: Trick, by_id: Dict[str, Player]) -> Team:
    if trick.winner_id is None:
        raise InvariantError(f"Completed {trick.id} has no winner")
    winner = by_id.get(trick.winner_id)
    if winner is None:
        raise InvariantError(f"{trick.id} won by unknown player {trick.winner_id!r}")
    return winner.team


def trick_points(trick: Trick) -> int:
    return trick.points


def calculate_team_points(players: Sequence[Player], tricks: Iterable[Trick]) -> TeamPoints:
    """Card points per team over the completed tricks."""
    by_id = _players_by_id(players)
    re = kontra = 0
    for trick in tricks:
        team = _winner_team(trick, by_id)
        if team == Team.RE:
            re += trick.points
        elif team == Team.KONTRA:
            kontra += trick.points
    return TeamPoints(re, kontra)


def calculate_current_score(players: Sequence[Player], tricks: Iterable[Trick]) -> TeamPoints:
    """Running score during play; equals the final points once all tricks are done."""
    return calculate_team_points(players, tricks)


def team_trick_counts(players: Sequence[Player], tricks: Iterable[Trick]) -> dict[Team, int]:
    by_id = _players_by_id(players)
    counts = {Team.RE: 0, Team.KONTRA: 0}
    for trick in tricks:
        team = _winner_team(trick, by_id)
        if team in counts:
            counts[team] += 1
    return counts


def determine_winner(re_points: int, kontra_points: int) -> Team:
    return Team.RE if re_points > kontra_points else Team.KONTRA


def special_flags(re_points: int, kontra_points: int, trick_counts: Dict[Team, int]) -> Dict[str, Team]:
    """Margin bonuses for the winning team: loser under 90/60/30, loser without a trick (schwarz)."""
    winner = determine_winner(re_points, kontra_points)
    loser_points = kontra_points if winner == Team.RE else re_points
    flags: Dict[str, Team] = {}
    for name, threshold in MARGINS:
        if loser_points < threshold:
            flags[name] = winner
    if trick_counts.get(winner.opponent, 0) == 0:
        flags["schwarz"] = winner
    return flags


def detect_fox_catch(
    trick: Trick,
    winner_id: str,
    players: Sequence[Player],
    rules: Rules = DEFAULT_RULES,
) -> list[FoxCatch]:
    """Foxes in trick played by the opposing team of the winner (a trick can hold both)."""
    by_id = _players_by_id(players)
    winner = by_id.get(winner_id)
    if winner is None:
        return []
    caught = []
    for player_id, card in trick.plays:
        owner = by_id.get(player_id)
        if is_fox(card, rules) and owner is not None and owner.team != winner.team:
            caught.append(FoxCatch(winner.team, player_id, trick.number))
    return caught


def detect_karlchen(
    trick: Trick,
    winner_id: str,
    players: Sequence[Player],
    total_tricks: int,
) -> Karlchen | None:
    """Last trick won with the Club Jack."""
    if trick.number != total_tricks:
        return None
    winner = _players_by_id(players).get(winner_id)
    card = trick.card_by_player(winner_id)
    if winner is None or card is None or not is_karlchen(card):
        return None
    return Karlchen(winner.team, winner_id)


def detect_doppelkopf_trick(trick: Trick, winner_id: str, players: Sequence[Player]) -> DoppelkopfTrick | None:
    points = trick.points
    if points < DOPPELKOPF_POINTS:
        return None
    winner = _players_by_id(players).get(winner_id)
    if winner is None:
        return None
    return DoppelkopfTrick(winner.team, winner_id, points, trick.number)


def record_achievements(
    special: SpecialPoints,
    trick: Trick,
    players: Sequence[Player],
    rules: Rules = DEFAULT_RULES,
) -> None:
    """Add the achievements of one resolved trick to special."""
    if trick.winner_id is None:
        raise InvariantError(f"Cannot score {trick.id} without a winner")
    special.foxes_caught.extend(detect_fox_catch(trick, trick.winner_id, players, rules))
    karlchen = detect_karlchen(trick, trick.winner_id, players, rules.total_tricks)
    if karlchen is not None:
        special.karlchen = karlchen
    dk = detect_doppelkopf_trick(trick, trick.winner_id, players)
    if dk is not None:
        special.doppelkopf_tricks.append(dk)


def derive_special_points(
    players: Sequence[Player],
    tricks: Iterable[Trick],
    rules: Rules = DEFAULT_RULES,
) -> SpecialPoints:
    special = SpecialPoints()
    for trick in tricks:
        record_achievements(special, trick, players, rules)
    return special


def calculate_final_score(
    players: Sequence[Player],
    tricks: Sequence[Trick],
    special: SpecialPoints | None = None,
    rules: Rules = DEFAULT_RULES,
) -> GameScore:
    """
    Final tally from the completed tricks. special are the achievements recorded
    during play; when omitted they are re-derived from tricks.
    """
    if special is None:
        special = derive_special_points(players, tricks, rules)
    re, kontra = calculate_team_points(players, tricks)
    winner = determine_winner(re, kontra)
    flags = special_flags(re, kontra, team_trick_counts(players, tricks))
    return GameScore(
        re_points=re,
        kontra_points=kontra,
        winner=winner,
        win_margin=abs(re - kontra),
        flags=flags,
        special=special,
        total_game_value=BASE_GAME_VALUE + len(flags) + special.count,
    )


def validate_total_points(re_points: int, kontra_points: int) -> bool:
    return re_points + kontra_points == TOTAL_POINTS


def points_needed_to_win(current_points: int) -> int:
    return max(0, POINTS_TO_WIN - current_points)


def is_game_decided(re_points: int, kontra_points: int) -> bool:
    """True once one side can no longer win with the card points still out."""
    return re_points >= POINTS_TO_WIN or kontra_points >= TOTAL_POINTS - POINTS_TO_WIN + 1
