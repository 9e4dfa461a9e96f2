"""Roll an expression tree against a random source."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from dicey.config import DEFAULT_LIMITS, Limits
from dicey.engine.random_source import RandomSource
from dicey.errors import RollSemanticError
from dicey.models.expression import (
    COUNTING,
    KEEP_DROP,
    BinaryOp,
    DiceTerm,
    DropHighest,
    Explode,
    Expression,
    KeepHighest,
    KeepLowest,
    Literal,
    Modifier,
    Repeat,
    RepeatMode,
    Reroll,
    TargetFailure,
    TargetSuccess,
    Variable,
    dice_notation,
    expression_depth,
    to_notation,
)
from dicey.models.result import (
    DieOutcome,
    DieStatus,
    RolledBinary,
    RolledDice,
    RolledLiteral,
    RolledNode,
    RolledRepeat,
    RolledVariable,
    RollResult,
)

logger = logging.getLogger(__name__)


@dataclass
class _Die:
    value: int
    status: DieStatus = DieStatus.KEPT
    exploded: bool = False

    @property
    def live(self) -> bool:
        return self.status is DieStatus.KEPT


def divide(left: int, right: int) -> int:
    """Integer division truncating toward zero."""
    if right == 0:
        raise RollSemanticError("division by zero")
    quotient = abs(left) // abs(right)
    return -quotient if (left < 0) != (right < 0) else quotient


class _Evaluator:
    def __init__(self, rng: RandomSource, limits: Limits) -> None:
        self.rng = rng
        self.limits = limits

    def visit(self, expr: Expression) -> RolledNode:
        if isinstance(expr, Literal):
            return RolledLiteral(total=expr.value)
        if isinstance(expr, DiceTerm):
            return self._dice(expr)
        if isinstance(expr, BinaryOp):
            return self._binary(expr)
        if isinstance(expr, Variable):
            inner = self.visit(expr.expression)
            return RolledVariable(name=expr.name, inner=inner, total=inner.total)
        if isinstance(expr, Repeat):
            return self._repeat(expr)
        raise TypeError(f"Unknown expression node: {expr!r}")

    # -- Arithmetic --

    def _binary(self, expr: BinaryOp) -> RolledBinary:
        left = self.visit(expr.left)
        right = self.visit(expr.right)
        if left.total is None or right.total is None:
            raise RollSemanticError("a repeat without a total cannot be used in arithmetic")
        if expr.op == "+":
            total = left.total + right.total
        elif expr.op == "-":
            total = left.total - right.total
        elif expr.op == "*":
            total = left.total * right.total
        else:
            total = divide(left.total, right.total)
        return RolledBinary(op=expr.op, left=left, right=right, total=total)

    def _repeat(self, expr: Repeat) -> RolledRepeat:
        if not 1 <= expr.count <= self.limits.max_repeat:
            raise RollSemanticError(
                f"repeat count must be between 1 and {self.limits.max_repeat}, got {expr.count}"
            )
        groups = [self.visit(expr.inner) for _ in range(expr.count)]
        total = None
        if expr.mode is RepeatMode.SUM:
            if any(g.total is None for g in groups):
                raise RollSemanticError("cannot sum repeats without totals")
            total = sum(g.total for g in groups)
        elif expr.mode is RepeatMode.SORT:
            groups.sort(key=lambda g: g.total if g.total is not None else 0)
        return RolledRepeat(mode=expr.mode, groups=tuple(groups), total=total)

    # -- Dice --

    def _draw(self, term: DiceTerm) -> int:
        if term.fudge:
            return self.rng.roll_die(3) - 2
        return self.rng.roll_die(term.sides)

    def _check_size(self, dice: list[_Die], term: DiceTerm) -> None:
        if len(dice) > self.limits.max_dice:
            raise RollSemanticError(
                f"{dice_notation(term)} produced more than {self.limits.max_dice} dice"
            )

    def _dice(self, term: DiceTerm) -> RolledDice:
        if term.count < 0:
            raise RollSemanticError(f"dice count cannot be negative, got {term.count}")
        if term.sides < 1:
            raise RollSemanticError("a die needs at least one side")
        dice = [_Die(self._draw(term)) for _ in range(term.count)]
        self._check_size(dice, term)

        for modifier in term.modifiers:
            if isinstance(modifier, COUNTING):
                continue
            dice = self._apply(modifier, dice, term)
            self._check_size(dice, term)

        if term.counts_successes:
            scores = [self._score(d.value, term) if d.live else None for d in dice]
            total = sum(s for s in scores if s is not None)
            mode = "count"
        else:
            scores = [None] * len(dice)
            total = sum(d.value for d in dice if d.live)
            mode = "sum"

        outcomes = tuple(
            DieOutcome(
                sides=term.sides,
                value=d.value,
                status=d.status,
                exploded=d.exploded,
                fudge=term.fudge,
                score=score,
            )
            for d, score in zip(dice, scores)
        )
        notation = dice_notation(term)
        logger.debug("Rolled %s: %s -> %d", notation, [d.value for d in dice], total)
        return RolledDice(notation=notation, mode=mode, dice=outcomes, total=total)

    def _apply(self, modifier: Modifier, dice: list[_Die], term: DiceTerm) -> list[_Die]:
        if isinstance(modifier, KEEP_DROP):
            self._keep_or_drop(modifier, dice)
            return dice
        if isinstance(modifier, Reroll):
            return self._reroll(modifier, dice, term)
        if isinstance(modifier, Explode):
            return self._explode(modifier, dice, term)
        raise TypeError(f"Unknown modifier: {modifier!r}")

    @staticmethod
    def _keep_or_drop(modifier: Modifier, dice: list[_Die]) -> None:
        live = [d for d in dice if d.live]
        highest_first = isinstance(modifier, (KeepHighest, DropHighest))
        # sorted() is stable, so ties go to the earlier die either way.
        ranked = sorted(live, key=lambda d: -d.value if highest_first else d.value)
        n = min(modifier.count, len(ranked))
        if isinstance(modifier, (KeepHighest, KeepLowest)):
            dropped = ranked[n:]
        else:
            dropped = ranked[:n]
        for d in dropped:
            d.status = DieStatus.DROPPED

    def _over_cap(self, term: DiceTerm, what: str) -> RollSemanticError:
        logger.warning(
            "%s hit the %d %s cap for a single die",
            dice_notation(term), self.limits.max_iterations, what,
        )
        return RollSemanticError(
            f"{dice_notation(term)} needed more than {self.limits.max_iterations} "
            f"{what} for a single die"
        )

    def _reroll(self, modifier: Reroll, dice: list[_Die], term: DiceTerm) -> list[_Die]:
        result: list[_Die] = []
        for die in dice:
            result.append(die)
            if not die.live:
                continue
            current = die
            draws = 0
            while modifier.condition.matches(current.value):
                if modifier.once and draws == 1:
                    break
                if draws >= self.limits.max_iterations:
                    raise self._over_cap(term, "rerolls")
                current.status = DieStatus.REROLLED
                current = _Die(self._draw(term), exploded=current.exploded)
                result.append(current)
                draws += 1
        return result

    def _explode(self, modifier: Explode, dice: list[_Die], term: DiceTerm) -> list[_Die]:
        result: list[_Die] = []
        for die in dice:
            result.append(die)
            if not die.live:
                continue
            current = die
            draws = 0
            while modifier.condition.matches(current.value):
                if modifier.once and draws == 1:
                    break
                if draws >= self.limits.max_iterations:
                    raise self._over_cap(term, "explosions")
                current = _Die(self._draw(term), exploded=True)
                result.append(current)
                draws += 1
        return result

    @staticmethod
    def _score(value: int, term: DiceTerm) -> int:
        points = [
            m.points for m in term.modifiers
            if isinstance(m, TargetSuccess) and m.condition.matches(value)
        ]
        if points:
            return max(points)
        if any(isinstance(m, TargetFailure) and m.condition.matches(value) for m in term.modifiers):
            return -1
        return 0


def evaluate(
    expr: Expression,
    rng: RandomSource,
    limits: Limits = DEFAULT_LIMITS,
) -> RollResult:
    """Roll ``expr`` using ``rng``.

    Modifiers on a dice term apply in the order they were written. Success
    and failure targets do not change the dice; they switch the term to
    counting mode, where its total is the sum of per-die scores.

    Raises:
        RollSemanticError: Division by zero, a reroll or explosion chain
            longer than ``limits.max_iterations``, too many dice, or a
            tree nested deeper than ``limits.max_depth``.
    """
    if expression_depth(expr) > limits.max_depth:
        raise RollSemanticError(
            f"expression is nested more than {limits.max_depth} levels deep"
        )
    rolled = _Evaluator(rng, limits).visit(expr)
    return RollResult(notation=to_notation(expr), total=rolled.total, rolled=rolled)
