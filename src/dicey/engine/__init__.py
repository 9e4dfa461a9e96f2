from __future__ import annotations

from dicey.engine.evaluator import evaluate
from dicey.engine.formatter import Verbosity, format_history, format_result
from dicey.engine.parser import parse, parse_assignment, parse_command
from dicey.engine.random_source import PseudoRandomSource, RandomSource, SequenceRandomSource
from dicey.engine.roller import Session, roll

__all__ = [
    "evaluate",
    "Verbosity",
    "format_history",
    "format_result",
    "parse",
    "parse_assignment",
    "parse_command",
    "PseudoRandomSource",
    "RandomSource",
    "SequenceRandomSource",
    "Session",
    "roll",
]
