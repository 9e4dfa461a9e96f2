"""Dice notation parser and roller."""
from __future__ import annotations

from dicey.engine import (
    PseudoRandomSource,
    RandomSource,
    SequenceRandomSource,
    Session,
    Verbosity,
    evaluate,
    format_result,
    parse,
    roll,
)
from dicey.errors import RollError, RollSemanticError, RollSyntaxError
from dicey.models.expression import to_notation
from dicey.models.result import DieOutcome, DieStatus, RollResult

__all__ = [
    "PseudoRandomSource",
    "RandomSource",
    "SequenceRandomSource",
    "Session",
    "Verbosity",
    "evaluate",
    "format_result",
    "parse",
    "roll",
    "RollError",
    "RollSemanticError",
    "RollSyntaxError",
    "to_notation",
    "DieOutcome",
    "DieStatus",
    "RollResult",
]
