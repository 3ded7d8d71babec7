"""Doppelkopf rules engine with computer opponents and learning hints."""

__version__ = "0.1.0"

from .config import HintLimits, Rules, SessionConfig, load_config
from .deck import Card, Deal, Rank, Suit, deal_4p, make_deck, validate_double_deck
from .errors import InvariantError
from .trump import compare_trump_cards, initialize_trump_cards, is_trump, trump_order, trump_rank
from .trick import Trick
from .player import Player, Team
from .play import (
    MoveCheck,
    current_winning_card,
    current_winning_player,
    is_legal_move,
    legal_plays,
    must_follow_suit,
    trick_winner,
    validate_move,
)
from .teams import assign_teams, get_partner, public_team
from .scoring import GameScore, SpecialPoints, calculate_current_score, calculate_final_score
from .game import GameEngine, GameState, Phase, PlayResult
from .persistence import game_state_from_json, game_state_to_json
from .ai import AILevel, AIPlayer, select_card
from .hints import Hint, HintContext, HintId, HintTracker, get_feedback_hint, get_hint
from .session import GameSession
