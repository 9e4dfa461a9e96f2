"""Entry points: roll a line of notation, or a session of lines sharing variables."""
from __future__ import annotations

import logging
from typing import Mapping

from dicey.config import DEFAULT_LIMITS, Limits
from dicey.engine.evaluator import evaluate
from dicey.engine.parser import is_assignment, parse_assignment, parse_command
from dicey.engine.random_source import PseudoRandomSource, RandomSource
from dicey.models.expression import Expression
from dicey.models.result import RollResult

logger = logging.getLogger(__name__)

_default_source = PseudoRandomSource()


def roll(
    text: str,
    rng: RandomSource | None = None,
    variables: Mapping[str, Expression] | None = None,
    limits: Limits = DEFAULT_LIMITS,
) -> RollResult:
    """Parse and roll ``text``. Raises ``RollError`` on bad input.

    Parsing finishes before any die is drawn, so a syntax error never
    consumes randomness.
    """
    command = parse_command(text, variables, limits)
    result = evaluate(command.expression, rng or _default_source, limits)
    if command.reason:
        result = result.model_copy(update={"reason": command.reason})
    return result


class Session:
    """A sequence of lines where ``$name = ...`` binds names for later lines."""

    def __init__(self, rng: RandomSource | None = None, limits: Limits = DEFAULT_LIMITS):
        self.rng = rng or _default_source
        self.limits = limits
        self.variables: dict[str, Expression] = {}

    def execute(self, line: str) -> RollResult:
        """Roll a line. Assignments are rolled once and bound only if that succeeds."""
        if not is_assignment(line):
            return roll(line, self.rng, self.variables, self.limits)

        assignment = parse_assignment(line, self.variables, self.limits)
        result = evaluate(assignment.expression, self.rng, self.limits)
        self.variables[assignment.name] = assignment.expression
        logger.debug("Bound $%s to %s", assignment.name, result.notation)
        return result.model_copy(update={"reason": assignment.reason})

    def clear(self) -> None:
        self.variables.clear()
