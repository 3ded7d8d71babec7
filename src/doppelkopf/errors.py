"""
Engine error types.

Input mistakes (illegal card, wrong turn, ...) are reported as result objects
and never raised. InvariantError is reserved for states that can only arise
from a setup or logic bug: a bad deal, teams that are not 2 vs 2, a complete
trick without a winner, a snapshot that references unknown cards.
"""
from __future__ import annotations


class InvariantError(AssertionError):
    """A core engine invariant was violated."""


__all__ = ["InvariantError"]
