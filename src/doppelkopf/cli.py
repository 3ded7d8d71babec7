"""
Command-line interface: play a text game against three AIs, or simulate AI games.

Usage examples (after installing the package):

    doppelkopf play --ai medium --seed 7
    doppelkopf simulate --games 200 --levels easy medium medium medium
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import random
from typing import Callable, Optional

from .ai import AILevel
from .config import AI_LEVELS, Rules, SessionConfig, load_config
from .game import Phase
from .player import Team
from .session import GameSession, TurnOutcome
from .simulate import simulate_games


def _add_play_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "play",
        help="Play one game in the terminal against three AI opponents.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a JSON session config.",
    )
    parser.add_argument(
        "--ai",
        choices=AI_LEVELS,
        default=None,
        help="AI level for all opponents (overrides the config).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for the deal and the AIs.",
    )
    parser.add_argument(
        "--no-delay",
        action="store_true",
        help="Skip the AI thinking delay.",
    )
    parser.add_argument(
        "--no-hints",
        action="store_true",
        help="Play without hints.",
    )
    parser.set_defaults(func=_cmd_play)


def _session_config(args: argparse.Namespace) -> SessionConfig:
    cfg = load_config(args.config) if args.config else SessionConfig()
    if args.ai is not None:
        cfg.ai_levels = [args.ai] * 4
    if args.no_delay:
        cfg.thinking_delays = {level: 0.0 for level in AI_LEVELS}
        cfg.trick_pause = 0.0
    if args.no_hints:
        cfg.hints_enabled = False
    return cfg


def _print_outcomes(session: GameSession, outcomes: list[TurnOutcome], out: Callable[[str], None]) -> None:
    for o in outcomes:
        player = session.state.get_player(o.player_id)
        name = player.name if player else o.player_id
        out(f"  {name}: {o.result.card}")
        if o.result.completed_trick is not None:
            trick = o.result.completed_trick
            winner = session.state.get_player(trick.winner_id or "")
            out(f"  -> Stich {trick.number} an {winner.name if winner else '?'} ({trick.points} Augen)")
        if o.feedback is not None:
            out(f"  [{o.feedback.title}] {o.feedback.message}")


def _show_table(session: GameSession, out: Callable[[str], None]) -> None:
    state = session.state
    human = session.human
    trick = state.current_trick
    out("")
    out(f"Stich {state.trick_number}/{state.rules.total_tricks}  Re {state.scores.re} : Kontra {state.scores.kontra}")
    if len(trick):
        out("Auf dem Tisch: " + ", ".join(f"{state.get_player(p).name}: {c}" for p, c in trick.plays))
    legal = {c.id for c in session.engine.legal_moves()}
    cards = [f"{i}:{c}{'' if c.id in legal else '(x)'}" for i, c in enumerate(human.hand)]
    out(f"Deine Hand ({human.team.value}): " + " ".join(cards))


def run_text_game(
    session: GameSession,
    read: Callable[[str], str] = input,
    out: Callable[[str], None] = print,
) -> None:
    """Drive a session from text input: a card index, 'h <index>' for a hint, 'a' to announce, 'q' to quit."""
    session.new_game()
    session.engine.start_playing()

    while not session.is_over():
        if not session.engine.is_human_turn():
            outcomes = asyncio.run(session.run_ai_turns())
            _print_outcomes(session, outcomes, out)
            if not outcomes:
                out("Die KI konnte keinen Zug machen, Spiel abgebrochen.")
                return
            continue
        _show_table(session, out)
        line = read("> ").strip().lower()
        if line in ("q", "quit"):
            out("Spiel abgebrochen.")
            return
        if line == "m":
            session.mute_hints()
            out("Tipps stumm geschaltet.")
            continue
        if line == "a":
            team = session.human.team
            res = session.announce(team)
            out(f"{'Re' if team == Team.RE else 'Kontra'}!" if res.success else res.error or "")
            continue
        want_hint = line.startswith("h ")
        index_text = line[2:] if want_hint else line
        if not index_text.isdigit() or int(index_text) >= session.human.hand_size:
            out("Bitte eine Kartennummer eingeben (h <nr> für einen Tipp, a für Ansage, q zum Beenden).")
            continue
        card = session.human.hand[int(index_text)]
        if want_hint:
            hint = session.preview_hint(card.id)
            out(f"[{hint.title}] {hint.message}" if hint else "Kein Tipp.")
            continue
        outcome = session.submit_card(card.id)
        if not outcome.result.success:
            out(outcome.result.error or "Ungültiger Zug.")
            if outcome.hint is not None:
                out(f"[{outcome.hint.title}] {outcome.hint.message}")
            continue
        _print_outcomes(session, [outcome], out)

    score = session.state.final_score
    if score is not None and session.state.phase == Phase.FINISHED:
        out("")
        out(f"Ergebnis: Re {score.re_points} : Kontra {score.kontra_points}")
        out(f"Gewinner: {score.winner.value}, Spielwert {score.total_game_value}")
        you = "gewonnen" if session.human.team == score.winner else "verloren"
        out(f"Du hast {you}.")


def _cmd_play(args: argparse.Namespace) -> None:
    cfg = _session_config(args)
    session = GameSession(cfg, random.Random(args.seed))
    run_text_game(session)


def _add_simulate_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "simulate",
        help="Play AI-only games and print summary statistics.",
    )
    parser.add_argument(
        "--games",
        type=int,
        default=100,
        help="Number of games to simulate.",
    )
    parser.add_argument(
        "--levels",
        nargs=4,
        choices=AI_LEVELS,
        default=["medium"] * 4,
        help="AI level per seat (four values).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed for reproducibility.",
    )
    parser.add_argument(
        "--without-nines",
        action="store_true",
        help="Play with 40 cards (no nines).",
    )
    parser.set_defaults(func=_cmd_simulate)


def _cmd_simulate(args: argparse.Namespace) -> None:
    rules = Rules(with_nines=not args.without_nines)
    levels = [AILevel(level) for level in args.levels]
    summary = simulate_games(args.games, levels, rules, seed=args.seed)
    print(summary.format())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="doppelkopf", description="Doppelkopf trainer and AI simulation CLI.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_play_parser(subparsers)
    _add_simulate_parser(subparsers)
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
