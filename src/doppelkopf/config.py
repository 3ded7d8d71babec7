"""
Rule set and session configuration.

Rules covers what changes the card set and the trump ladder. SessionConfig
covers everything around one played game: seats, AI tiers, delays, hints.
Both can be loaded from a JSON file; missing keys take the defaults below.
"""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from .deck import Rank, Suit


@dataclass(frozen=True)
class Rules:
    """
    Card set and trump options for one game.

    With the default dulle=True the Ten of Hearts is trump, so a Hearts trick
    like 9, A, K, 10 is only decided on the plain ladder with dulle=False.
    """

    with_nines: bool = True  # 48 cards / 12 tricks, else 40 cards / 10 tricks
    dulle: bool = True  # Ten of Hearts is the highest trump
    trump_suit: Suit = Suit.DIAMONDS

    @property
    def ranks(self) -> tuple[Rank, ...]:
        if self.with_nines:
            return (Rank.NINE, Rank.JACK, Rank.QUEEN, Rank.KING, Rank.TEN, Rank.ACE)
        return (Rank.JACK, Rank.QUEEN, Rank.KING, Rank.TEN, Rank.ACE)

    @property
    def deck_size(self) -> int:
        return len(Suit) * len(self.ranks) * 2

    @property
    def hand_size(self) -> int:
        return self.deck_size // 4

    @property
    def total_tricks(self) -> int:
        return self.hand_size


@dataclass(frozen=True)
class HintLimits:
    max_per_game: int = 8
    max_per_trick: int = 1


AI_LEVELS = ("easy", "medium", "hard")

# Seconds of simulated thinking per AI tier.
DEFAULT_THINKING_DELAYS: Dict[str, float] = {"easy": 0.5, "medium": 1.0, "hard": 1.5}


@dataclass
class SessionConfig:
    """Everything needed to set up one interactive game session."""

    rules: Rules = field(default_factory=Rules)
    player_names: List[str] = field(default_factory=lambda: ["Du", "KI 1", "KI 2", "KI 3"])
    human_index: int = 0
    ai_levels: List[str] = field(default_factory=lambda: ["medium", "medium", "medium", "medium"])
    thinking_delays: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_THINKING_DELAYS))
    trick_pause: float = 0.0  # seconds to show a completed trick
    hints_enabled: bool = True
    hint_limits: HintLimits = field(default_factory=HintLimits)

    def __post_init__(self) -> None:
        if len(self.player_names) != 4:
            raise ValueError(f"Doppelkopf needs exactly 4 players, got {len(self.player_names)}")
        if not 0 <= self.human_index < 4:
            raise ValueError(f"human_index out of range: {self.human_index}")
        for level in self.ai_levels:
            if level not in AI_LEVELS:
                raise ValueError(f"Unknown AI level: {level}")


def rules_from_dict(d: Dict[str, Any]) -> Rules:
    suit = d.get("trump_suit", Suit.DIAMONDS.name)
    return Rules(
        with_nines=bool(d.get("with_nines", True)),
        dulle=bool(d.get("dulle", True)),
        trump_suit=Suit[suit.upper()] if isinstance(suit, str) else Suit(suit),
    )


def session_config_from_dict(d: Dict[str, Any]) -> SessionConfig:
    defaults = SessionConfig()
    limits = d.get("hint_limits", {})
    return SessionConfig(
        rules=rules_from_dict(d.get("rules", {})),
        player_names=list(d.get("player_names", defaults.player_names)),
        human_index=int(d.get("human_index", defaults.human_index)),
        ai_levels=list(d.get("ai_levels", defaults.ai_levels)),
        thinking_delays={**defaults.thinking_delays, **d.get("thinking_delays", {})},
        trick_pause=float(d.get("trick_pause", defaults.trick_pause)),
        hints_enabled=bool(d.get("hints_enabled", defaults.hints_enabled)),
        hint_limits=HintLimits(
            max_per_game=int(limits.get("max_per_game", 8)),
            max_per_trick=int(limits.get("max_per_trick", 1)),
        ),
    )


def session_config_to_dict(cfg: SessionConfig) -> Dict[str, Any]:
    d = asdict(cfg)
    d["rules"]["trump_suit"] = cfg.rules.trump_suit.name.lower()
    return d


def load_config(path: Path | str) -> SessionConfig:
    """Read a SessionConfig from a JSON file."""
    with Path(path).open("r", encoding="utf-8") as f:
        return session_config_from_dict(json.load(f))


__all__ = [
    "AI_LEVELS",
    "DEFAULT_THINKING_DELAYS",
    "HintLimits",
    "Rules",
    "SessionConfig",
    "load_config",
    "rules_from_dict",
    "session_config_from_dict",
    "session_config_to_dict",
]
