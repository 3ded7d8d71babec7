"""
Game snapshot serialization for save/resume.

Wraps GameState.to_data / from_data with a schema version and JSON helpers.
Reading and writing the file itself is left to the caller, apart from the
small save_game / load_game conveniences.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from .game import GameState

SCHEMA_VERSION = 1


def game_state_to_dict(
    state: GameState,
    *,
    metadata: Dict[str, Any] | None = None,
) -> Dict[str, Any]:
    """
    Serialize a GameState to a JSON-compatible dict.

    Args:
        state: The game to serialize.
        metadata: Optional extra metadata (e.g. session settings).

    Returns:
        Dict with schema_version, exported_at, state, and optional metadata.
    """
    result: Dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "state": state.to_data(),
    }
    if metadata:
        result["metadata"] = metadata
    return result


def game_state_from_dict(d: Dict[str, Any]) -> GameState:
    """
    Deserialize a GameState from a dict produced by game_state_to_dict.

    Raises:
        ValueError: snapshot written by a newer schema.
        InvariantError: snapshot references a card it does not contain.
    """
    version = int(d.get("schema_version", SCHEMA_VERSION))
    if version > SCHEMA_VERSION:
        raise ValueError(f"Unsupported snapshot schema version {version} (max {SCHEMA_VERSION})")
    return GameState.from_data(d["state"])


def game_state_to_json(
    state: GameState,
    *,
    metadata: Dict[str, Any] | None = None,
) -> str:
    """Serialize a GameState to a JSON string."""
    return json.dumps(game_state_to_dict(state, metadata=metadata), indent=2, ensure_ascii=False)


def game_state_from_json(s: str) -> GameState:
    """Deserialize a GameState from a JSON string."""
    return game_state_from_dict(json.loads(s))


def save_game(state: GameState, path: Path | str) -> None:
    Path(path).write_text(game_state_to_json(state), encoding="utf-8")


def load_game(path: Path | str) -> GameState:
    return game_state_from_json(Path(path).read_text(encoding="utf-8"))


__all__ = [
    "game_state_to_dict",
    "game_state_from_dict",
    "game_state_to_json",
    "game_state_from_json",
    "load_game",
    "save_game",
    "SCHEMA_VERSION",
]
