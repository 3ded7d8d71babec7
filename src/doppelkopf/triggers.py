"""
Hint triggers: pure predicates over a candidate move or a completed trick.

Each check_* function looks at a HintContext (pre-move) or FeedbackContext
(post-trick) and returns a Hint or None. Triggers never mutate anything and
only use team information every seat could know: the player's own team, and
other players' teams once announced or shown by a Queen of Clubs.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Mapping, Sequence

from .config import Rules
from .deck import SUIT_NAMES_DE, Card, Rank
from .play import TRUMP, current_winning_card, current_winning_player, legal_plays, required_suit, would_win
from .player import Team
from .scoring import FoxCatch
from .trick import Trick
from .trump import DEFAULT_RULES, is_fox, is_karlchen

HIGH_VALUE = 10
MISSED_WIN_MIN_POINTS = 20


class HintId(str, Enum):
    FOLLOW_SUIT_OR_TRUMP = "FOLLOW_SUIT_OR_TRUMP"
    TRUMP_BEATS_SUIT = "TRUMP_BEATS_SUIT"
    SAVE_HIGH_TRUMPS = "SAVE_HIGH_TRUMPS"
    FOX_PROTECTION = "FOX_PROTECTION"
    EYES_MANAGEMENT = "EYES_MANAGEMENT"
    SCHMIEREN = "SCHMIEREN"
    KARLCHEN_LATE_GAME = "KARLCHEN_LATE_GAME"
    FEEDBACK_FOX_CAUGHT = "FEEDBACK_FOX_CAUGHT"
    FEEDBACK_LOST_HIGH_TRUMP = "FEEDBACK_LOST_HIGH_TRUMP"
    FEEDBACK_MISSED_WIN = "FEEDBACK_MISSED_WIN"
    FEEDBACK_GOOD_FOX_PROTECTION = "FEEDBACK_GOOD_FOX_PROTECTION"
    FEEDBACK_GOOD_SCHMIEREN = "FEEDBACK_GOOD_SCHMIEREN"


class Severity(str, Enum):
    INFO = "info"
    WARN = "warn"


class Timing(str, Enum):
    RULE = "rule"  # blocking: illegal move attempted
    PRE_TACTIC = "pre_tactic"
    FEEDBACK = "feedback"


@dataclass(frozen=True)
class Hint:
    id: HintId
    title: str
    message: str
    severity: Severity = Severity.INFO
    learn_more_key: str | None = None
    timing: Timing = Timing.PRE_TACTIC

    @property
    def is_rule_violation(self) -> bool:
        return self.id == HintId.FOLLOW_SUIT_OR_TRUMP


@dataclass
class HintContext:
    """A card the player is about to play, seen from that player's seat."""

    card: Card
    hand: Sequence[Card]
    trick: Trick
    trick_number: int
    player_id: str
    player_team: Team
    public_teams: Mapping[str, Team] = field(default_factory=dict)
    rules: Rules = DEFAULT_RULES
    legal_moves: Sequence[Card] = ()

    def __post_init__(self) -> None:
        if not self.legal_moves:
            self.legal_moves = legal_plays(self.hand, self.trick)


@dataclass
class FeedbackContext:
    """
    A completed trick the player took part in. hand_before is the player's
    hand right before their card went into the trick.
    """

    trick: Trick
    player_id: str
    player_team: Team
    hand_before: Sequence[Card] = ()
    public_teams: Mapping[str, Team] = field(default_factory=dict)
    foxes_caught: Sequence[FoxCatch] = ()
    rules: Rules = DEFAULT_RULES


def is_teammate(player_id: str, player_team: Team, public_teams: Mapping[str, Team]) -> bool:
    """Only true with public evidence; unknown teams are never treated as partners."""
    if player_team == Team.UNKNOWN:
        return False
    return public_teams.get(player_id, Team.UNKNOWN) == player_team


def _is_high_trump(card: Card) -> bool:
    """Dulle or a Queen."""
    return card.is_trump and (card.rank == Rank.QUEEN or card.trump_rank == 0)


# --- Rule ---------------------------------------------------------------


def check_follow_suit_or_trump(ctx: HintContext) -> Hint | None:
    if any(c.id == ctx.card.id for c in ctx.legal_moves):
        return None
    required = required_suit(ctx.trick)
    if required is None:
        return None
    if required == TRUMP:
        title = "Du musst Trumpf bedienen!"
        message = (
            "In Doppelkopf gilt Bedienzwang: Wenn Trumpf angespielt wurde und du noch "
            "Trumpfkarten hast, musst du eine davon spielen."
        )
    else:
        name = SUIT_NAMES_DE[required]
        title = f"Du musst {name} bedienen!"
        message = (
            f"In Doppelkopf gilt Bedienzwang: Wenn {name} angespielt wurde und du noch "
            f"{name}-Karten hast, musst du eine davon spielen."
        )
    return Hint(HintId.FOLLOW_SUIT_OR_TRUMP, title, message, Severity.WARN, "tutorial.rules.following", Timing.RULE)


# --- Pre-move tactics ---------------------------------------------------


def check_trump_beats_suit(ctx: HintContext) -> Hint | None:
    """Plain card into a trick that a trump already holds, while the player has trump."""
    if len(ctx.trick) == 0 or ctx.card.is_trump:
        return None
    winning = current_winning_card(ctx.trick)
    if winning is None or not winning.is_trump:
        return None
    if not any(c.is_trump for c in ctx.legal_moves):
        return None
    return Hint(
        HintId.TRUMP_BEATS_SUIT,
        "Trumpf sticht immer!",
        "Es liegt bereits Trumpf im Stich. Deine Fehlkarte kann diesen Stich nicht gewinnen, "
        "auch wenn sie hoch ist.",
        Severity.INFO,
        "tutorial.trump.priority",
    )


def check_save_high_trumps(ctx: HintContext) -> Hint | None:
    """Dulle or Queen played where a lower legal trump would win as well."""
    card = ctx.card
    if len(ctx.trick) == 0 or not _is_high_trump(card) or not would_win(card, ctx.trick):
        return None
    cheaper = [
        c for c in ctx.legal_moves
        if c.is_trump and c.trump_rank > card.trump_rank and would_win(c, ctx.trick)
    ]
    if not cheaper:
        return None
    return Hint(
        HintId.SAVE_HIGH_TRUMPS,
        "Hohen Trumpf sparen?",
        "Du könntest diesen Stich auch mit einem niedrigeren Trumpf gewinnen. "
        "Spare hohe Trümpfe für wichtigere Stiche.",
        Severity.INFO,
        "tutorial.strategy.trumps",
    )


def check_fox_protection(ctx: HintContext) -> Hint | None:
    """Fox played into a trick it does not win."""
    if not is_fox(ctx.card, ctx.rules) or len(ctx.trick) == 0:
        return None
    if would_win(ctx.card, ctx.trick):
        return None
    return Hint(
        HintId.FOX_PROTECTION,
        "Fuchs in Gefahr!",
        "Das Trumpf-Ass (Fuchs) bringt den Gegnern einen Extrapunkt, wenn sie ihn fangen. "
        "Spiele ihn nur in Stiche, die du oder dein Partner sicher gewinnt.",
        Severity.WARN,
        "tutorial.special.fox",
    )


def check_eyes_management(ctx: HintContext) -> Hint | None:
    """Ace or Ten thrown into a trick the player cannot win, with a cheaper card available."""
    card = ctx.card
    if len(ctx.trick) == 0 or card.value < HIGH_VALUE or len(ctx.legal_moves) == 1:
        return None
    winner_id = current_winning_player(ctx.trick)
    if winner_id is not None and is_teammate(winner_id, ctx.player_team, ctx.public_teams):
        return None
    if any(would_win(c, ctx.trick) for c in ctx.legal_moves):
        return None
    if not any(c.value < card.value for c in ctx.legal_moves):
        return None
    return Hint(
        HintId.EYES_MANAGEMENT,
        "Augen abwerfen?",
        "Du wirfst eine wertvolle Karte (10 oder Ass) in einen Stich, den du nicht gewinnst. "
        "Überlege, ob du eine niedrigere Karte spielen kannst.",
        Severity.INFO,
        "tutorial.strategy.eyes",
    )


def check_schmieren(ctx: HintContext) -> Hint | None:
    """A known partner holds the trick and the player adds few points although more are possible."""
    if len(ctx.trick) < 2:
        return None
    winner_id = current_winning_player(ctx.trick)
    if winner_id is None or not is_teammate(winner_id, ctx.player_team, ctx.public_teams):
        return None
    if ctx.card.value >= HIGH_VALUE:
        return None
    if not any(c.value > ctx.card.value for c in ctx.legal_moves):
        return None
    return Hint(
        HintId.SCHMIEREN,
        "Schmieren möglich!",
        'Dein Partner gewinnt gerade diesen Stich. Du könntest "schmieren" und eine wertvolle '
        "Karte (10, Ass) dazugeben, um mehr Punkte für euer Team zu holen.",
        Severity.INFO,
        "tutorial.strategy.schmieren",
    )


def check_karlchen_late_game(ctx: HintContext) -> Hint | None:
    """Club Jack still in hand near the end while another card is chosen."""
    total = ctx.rules.total_tricks
    if not any(is_karlchen(c) for c in ctx.hand) or is_karlchen(ctx.card):
        return None
    if ctx.trick_number == total - 1:
        return Hint(
            HintId.KARLCHEN_LATE_GAME,
            "Karlchen-Chance!",
            "Du behältst einen Kreuz-Buben für den letzten Stich. Gewinnst du ihn damit, "
            'gibt das einen Bonuspunkt ("Karlchen fängt den letzten Stich").',
            Severity.INFO,
            "tutorial.special.karlchen",
        )
    if ctx.trick_number == total - 2:
        return Hint(
            HintId.KARLCHEN_LATE_GAME,
            "Karlchen für letzten Stich?",
            "Du hast noch einen Kreuz-Buben. Überlege, ob du ihn für den letzten Stich "
            'aufheben möchtest (Bonuspunkt "Karlchen").',
            Severity.INFO,
            "tutorial.special.karlchen",
        )
    return None


# --- Post-trick feedback ------------------------------------------------


def _feedback(hint_id: HintId, title: str, message: str, severity: Severity, key: str) -> Hint:
    return Hint(hint_id, title, message, severity, key, Timing.FEEDBACK)


def check_fox_caught(ctx: FeedbackContext) -> Hint | None:
    if not any(f.from_player_id == ctx.player_id and f.trick_number == ctx.trick.number for f in ctx.foxes_caught):
        return None
    return _feedback(
        HintId.FEEDBACK_FOX_CAUGHT,
        "Fuchs gefangen!",
        "Dein Fuchs wurde vom Gegner gefangen. Er ist 11 Augen wert und bringt dem Gegner "
        "einen Extrapunkt. Versuche, ihn besser zu schützen.",
        Severity.WARN,
        "tutorial.special.fox",
    )


def check_lost_high_trump(ctx: FeedbackContext) -> Hint | None:
    """Player led a trump Ace or Ten and lost the trick."""
    card = ctx.trick.card_by_player(ctx.player_id)
    lead = ctx.trick.lead_card()
    if card is None or lead is None or lead.id != card.id:
        return None
    if not card.is_trump or card.rank not in (Rank.TEN, Rank.ACE):
        return None
    if ctx.trick.winner_id is None or ctx.trick.winner_id == ctx.player_id:
        return None
    return _feedback(
        HintId.FEEDBACK_LOST_HIGH_TRUMP,
        "Hohen Trumpf verloren",
        "Du hast mit einem wertvollen Trumpf angespielt und den Stich verloren. Manchmal ist es "
        "besser, niedrigere Trümpfe zu spielen und die hohen für später aufzusparen.",
        Severity.INFO,
        "tutorial.trump.conservation",
    )


def _trick_with(trick: Trick, player_id: str, card: Card) -> Trick:
    """Copy of trick with player_id's card replaced."""
    copy = Trick(trick.lead_player_id, trick.number)
    for pid, c in trick.plays:
        copy.add_card(card if pid == player_id else c, pid)
    return copy


def _prefix_before(trick: Trick, player_id: str) -> Trick:
    """The trick as it lay on the table when player_id had to play."""
    prefix = Trick(trick.lead_player_id, trick.number)
    for pid, c in trick.plays:
        if pid == player_id:
            break
        prefix.add_card(c, pid)
    return prefix


def check_missed_win(ctx: FeedbackContext) -> Hint | None:
    """A worthwhile trick went elsewhere although another legal card would have taken it."""
    trick = ctx.trick
    played = trick.card_by_player(ctx.player_id)
    winner_id = trick.winner_id
    if played is None or winner_id is None or winner_id == ctx.player_id or not ctx.hand_before:
        return None
    if is_teammate(winner_id, ctx.player_team, ctx.public_teams):
        return None
    if trick.points < MISSED_WIN_MIN_POINTS:
        return None
    for alt in legal_plays(ctx.hand_before, _prefix_before(trick, ctx.player_id)):
        if alt.id == played.id:
            continue
        candidate = _trick_with(trick, ctx.player_id, alt)
        if current_winning_player(candidate) == ctx.player_id:
            return _feedback(
                HintId.FEEDBACK_MISSED_WIN,
                "Stich verschenkt?",
                f"Mit {alt} hättest du diesen Stich ({trick.points} Augen) gewinnen können.",
                Severity.INFO,
                "tutorial.strategy.winning",
            )
    return None


def check_good_fox_protection(ctx: FeedbackContext) -> Hint | None:
    card = ctx.trick.card_by_player(ctx.player_id)
    if card is None or not is_fox(card, ctx.rules) or ctx.trick.winner_id != ctx.player_id:
        return None
    return _feedback(
        HintId.FEEDBACK_GOOD_FOX_PROTECTION,
        "Fuchs gerettet!",
        "Du hast deinen Fuchs in einem Stich gespielt, den du selbst gewonnen hast. "
        "So bleiben die 11 Augen bei deinem Team.",
        Severity.INFO,
        "tutorial.special.fox",
    )


def check_good_schmieren(ctx: FeedbackContext) -> Hint | None:
    """Ace or Ten added to a trick a known partner won."""
    trick = ctx.trick
    card = trick.card_by_player(ctx.player_id)
    lead = trick.lead_card()
    if card is None or lead is None or lead.id == card.id:
        return None
    if trick.winner_id is None or trick.winner_id == ctx.player_id:
        return None
    if not is_teammate(trick.winner_id, ctx.player_team, ctx.public_teams):
        return None
    if card.value < HIGH_VALUE:
        return None
    return _feedback(
        HintId.FEEDBACK_GOOD_SCHMIEREN,
        "Gut geschmiert!",
        "Du hast deinem Partner Augen in den Stich geschmiert. Das ist eine wichtige "
        "Teamstrategie, um wertvolle Punkte zu sichern.",
        Severity.INFO,
        "tutorial.tactics.schmieren",
    )


PreMoveTrigger = Callable[[HintContext], "Hint | None"]
FeedbackTrigger = Callable[[FeedbackContext], "Hint | None"]

PRE_MOVE_TRIGGERS: tuple[PreMoveTrigger, ...] = (
    check_follow_suit_or_trump,
    check_trump_beats_suit,
    check_save_high_trumps,
    check_fox_protection,
    check_eyes_management,
    check_schmieren,
    check_karlchen_late_game,
)

FEEDBACK_TRIGGERS: tuple[FeedbackTrigger, ...] = (
    check_fox_caught,
    check_lost_high_trump,
    check_missed_win,
    check_good_fox_protection,
    check_good_schmieren,
)
