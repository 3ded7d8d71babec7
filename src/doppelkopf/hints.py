"""
Hint and feedback engines with per-game suppression.

get_hint() runs the pre-move triggers against a candidate card, get_feedback_hint()
runs the post-trick triggers against a completed trick. Both return the first
hint that fires and passes the HintTracker, and record it there. A trigger that
raises is logged and skipped.

Suppression per game: the illegal-move hint is always shown; any other hint
only while fewer than 8 were shown in total, none yet in this trick and its
kind not yet in this game. Muting silences everything but the illegal-move hint.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .config import HintLimits
from .triggers import (
    FEEDBACK_TRIGGERS,
    PRE_MOVE_TRIGGERS,
    FeedbackContext,
    FeedbackTrigger,
    Hint,
    HintContext,
    HintId,
    PreMoveTrigger,
    Severity,
    Timing,
)

log = logging.getLogger(__name__)


@dataclass
class HintTracker:
    """Suppression state of one game session; reset at every new game."""

    limits: HintLimits = field(default_factory=HintLimits)
    total_shown: int = 0
    shown_this_trick: int = 0
    shown_kinds: set[HintId] = field(default_factory=set)
    trick_index: int = 0
    feedback_shown_this_trick: bool = False
    muted: bool = False

    def can_show(self, hint_id: HintId, is_rule_violation: bool = False) -> bool:
        if is_rule_violation:
            return True
        if self.muted:
            return False
        if self.total_shown >= self.limits.max_per_game:
            return False
        if self.shown_this_trick >= self.limits.max_per_trick:
            return False
        return hint_id not in self.shown_kinds

    def can_show_feedback(self, hint_id: HintId | None = None) -> bool:
        if self.muted or self.feedback_shown_this_trick:
            return False
        if self.total_shown >= self.limits.max_per_game:
            return False
        return hint_id is None or hint_id not in self.shown_kinds

    def record(self, hint_id: HintId) -> None:
        self.shown_kinds.add(hint_id)
        self.shown_this_trick += 1
        self.total_shown += 1

    def record_feedback(self, hint_id: HintId) -> None:
        # Feedback has its own per-trick slot.
        self.shown_kinds.add(hint_id)
        self.feedback_shown_this_trick = True
        self.total_shown += 1

    def has_shown(self, hint_id: HintId) -> bool:
        return hint_id in self.shown_kinds

    def on_trick_complete(self) -> None:
        self.shown_this_trick = 0
        self.feedback_shown_this_trick = False
        self.trick_index += 1

    def reset_for_new_game(self) -> None:
        self.total_shown = 0
        self.shown_this_trick = 0
        self.shown_kinds = set()
        self.trick_index = 0
        self.feedback_shown_this_trick = False
        self.muted = False

    def mute(self) -> None:
        self.muted = True

    def unmute(self) -> None:
        self.muted = False


def _run_trigger(trigger, ctx) -> Hint | None:
    try:
        return trigger(ctx)
    except Exception:
        log.exception("Hint trigger %s failed", getattr(trigger, "__name__", trigger))
        return None


def get_hint(
    ctx: HintContext,
    tracker: HintTracker,
    triggers: Iterable[PreMoveTrigger] = PRE_MOVE_TRIGGERS,
) -> Hint | None:
    """First pre-move hint that fires and may be shown; it is recorded in tracker."""
    for trigger in triggers:
        hint = _run_trigger(trigger, ctx)
        if hint is None:
            continue
        if tracker.can_show(hint.id, hint.is_rule_violation):
            tracker.record(hint.id)
            return hint
    return None


def get_feedback_hint(
    ctx: FeedbackContext,
    tracker: HintTracker,
    triggers: Iterable[FeedbackTrigger] = FEEDBACK_TRIGGERS,
) -> Hint | None:
    """First post-trick feedback that fires and may be shown; it is recorded in tracker."""
    if not tracker.can_show_feedback():
        return None
    for trigger in triggers:
        hint = _run_trigger(trigger, ctx)
        if hint is None:
            continue
        if tracker.can_show_feedback(hint.id):
            tracker.record_feedback(hint.id)
            return hint
    return None


__all__ = [
    "FeedbackContext",
    "Hint",
    "HintContext",
    "HintId",
    "HintTracker",
    "Severity",
    "Timing",
    "get_feedback_hint",
    "get_hint",
]
