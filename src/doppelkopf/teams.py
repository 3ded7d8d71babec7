"""
Re / Kontra team logic for the standard contract.

Whoever holds a Queen of Clubs plays Re, everybody else Kontra; a normal game
is always 2 vs 2. Teams are hidden: from a seat's point of view another
player's team is only known once it was announced or the player put a Queen
of Clubs on the table.
"""
from __future__ import annotations

from typing import Iterable, Sequence

from .deck import Card
from .errors import InvariantError
from .player import Player, Team
from .trick import Trick
from .trump import is_marker


def determine_player_team(player: Player) -> Team:
    return Team.RE if any(is_marker(c) for c in player.hand) else Team.KONTRA


def holds_both_markers(hand: Iterable[Card]) -> bool:
    """Both Queens of Clubs in one hand ("Hochzeit"); not a standard contract."""
    return sum(1 for c in hand if is_marker(c)) == 2


def validate_team_assignment(players: Sequence[Player]) -> bool:
    re = [p for p in players if p.team == Team.RE]
    kontra = [p for p in players if p.team == Team.KONTRA]
    return len(re) == 2 and len(kontra) == 2


def assign_teams(players: Sequence[Player]) -> None:
    """Assign Re/Kontra from the dealt hands; anything but 2 vs 2 is a deal bug."""
    for player in players:
        player.team = determine_player_team(player)
    if not validate_team_assignment(players):
        layout = ", ".join(f"{p.id}={p.team.value}" for p in players)
        raise InvariantError(f"Team assignment is not 2 vs 2: {layout}")


def players_on_team(players: Iterable[Player], team: Team) -> list[Player]:
    return [p for p in players if p.team == team]


def get_partner(player: Player, players: Sequence[Player]) -> Player | None:
    if player.team == Team.UNKNOWN:
        return None
    for p in players:
        if p.id != player.id and p.team == player.team:
            return p
    return None


def get_opponents(player: Player, players: Sequence[Player]) -> list[Player]:
    return players_on_team(players, player.team.opponent)


def are_teammates(a: Player, b: Player) -> bool:
    return a.team == b.team and a.team != Team.UNKNOWN


def check_announcement(player: Player, team: Team, total_tricks: int) -> str | None:
    """Reason why player may not announce team now, or None if the announcement is fine."""
    if player.has_announced:
        return "Bereits angesagt"
    if player.team == Team.UNKNOWN:
        return "Team noch unbekannt"
    if team != player.team:
        return "Ansage passt nicht zu deinem Team"
    # Re/Kontra must be called before the player's second card.
    if total_tricks - player.hand_size > 1:
        return "Ansage ist nicht mehr möglich"
    return None


def can_announce(player: Player, total_tricks: int) -> bool:
    return check_announcement(player, player.team, total_tricks) is None


def played_marker(player_id: str, tricks: Iterable[Trick]) -> bool:
    for trick in tricks:
        card = trick.card_by_player(player_id)
        if card is not None and is_marker(card):
            return True
    return False


def public_team(player: Player, tricks: Iterable[Trick]) -> Team:
    """The team of player as every seat can know it: announcement or Queen of Clubs shown."""
    if player.has_announced:
        return player.team
    if played_marker(player.id, tricks):
        return Team.RE
    return Team.UNKNOWN


def is_team_revealed(player: Player, players: Sequence[Player], tricks: Sequence[Trick]) -> bool:
    if public_team(player, tricks) != Team.UNKNOWN:
        return True
    partner = get_partner(player, players)
    return partner is not None and partner.has_announced
