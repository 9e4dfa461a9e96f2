"""Immutable syntax tree for dice notation, and its serialization back to text."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal as TypingLiteral, Union

CompareOp = TypingLiteral["=", "<", ">", "<=", ">="]
ArithmeticOp = TypingLiteral["+", "-", "*", "/"]

PRECEDENCE: dict[str, int] = {"+": 1, "-": 1, "*": 2, "/": 2}


@dataclass(frozen=True)
class Condition:
    op: CompareOp
    value: int

    def matches(self, roll: int) -> bool:
        if self.op == "=":
            return roll == self.value
        if self.op == "<":
            return roll < self.value
        if self.op == ">":
            return roll > self.value
        if self.op == "<=":
            return roll <= self.value
        return roll >= self.value


@dataclass(frozen=True)
class FaceSet:
    """Matches any of the listed faces, written ``[2,4,6]``."""

    values: tuple[int, ...]

    def matches(self, roll: int) -> bool:
        return roll in self.values


Match = Union[Condition, FaceSet]


# -- Modifiers --


@dataclass(frozen=True)
class KeepHighest:
    count: int = 1


@dataclass(frozen=True)
class KeepLowest:
    count: int = 1


@dataclass(frozen=True)
class DropHighest:
    count: int = 1


@dataclass(frozen=True)
class DropLowest:
    count: int = 1


@dataclass(frozen=True)
class Reroll:
    """Replace matching dice. ``once`` stops after a single replacement."""

    condition: Match
    once: bool = False


@dataclass(frozen=True)
class Explode:
    """Add another die for each matching die. ``once`` stops after one extra die."""

    condition: Match
    once: bool = False


@dataclass(frozen=True)
class TargetSuccess:
    condition: Match
    points: int = 1


@dataclass(frozen=True)
class TargetFailure:
    condition: Match


Modifier = Union[
    KeepHighest, KeepLowest, DropHighest, DropLowest,
    Reroll, Explode, TargetSuccess, TargetFailure,
]

KEEP_DROP = (KeepHighest, KeepLowest, DropHighest, DropLowest)
COUNTING = (TargetSuccess, TargetFailure)


# -- Expression nodes --


class RepeatMode(str, Enum):
    SUM = "sum"    # ^+ N
    EACH = "each"  # ^ N
    SORT = "sort"  # ^# N


@dataclass(frozen=True)
class Literal:
    value: int


@dataclass(frozen=True)
class DiceTerm:
    count: int
    sides: int
    modifiers: tuple[Modifier, ...] = ()
    fudge: bool = False

    @property
    def counts_successes(self) -> bool:
        return any(isinstance(m, COUNTING) for m in self.modifiers)

    @property
    def min_face(self) -> int:
        return -1 if self.fudge else 1

    @property
    def max_face(self) -> int:
        return 1 if self.fudge else self.sides


@dataclass(frozen=True)
class BinaryOp:
    op: ArithmeticOp
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Repeat:
    count: int
    inner: Expression
    mode: RepeatMode = RepeatMode.SUM


@dataclass(frozen=True)
class Variable:
    """A ``$name`` reference, bound to the expression the name held at parse time."""

    name: str
    expression: Expression


Expression = Union[Literal, DiceTerm, BinaryOp, Repeat, Variable]


@dataclass(frozen=True)
class Command:
    """A single input line: an expression plus an optional free-text reason."""

    expression: Expression
    reason: str | None = None

    def __str__(self) -> str:
        text = to_notation(self.expression)
        return f"{text} : {self.reason}" if self.reason else text


@dataclass(frozen=True)
class Assignment:
    """``$name = expression [: reason]``."""

    name: str
    expression: Expression
    reason: str | None = None

    def __str__(self) -> str:
        text = f"${self.name} = {to_notation(self.expression)}"
        return f"{text} : {self.reason}" if self.reason else text


# -- Serialization --

# Comparison implied by a bare number after each condition-taking modifier.
BARE_OP: dict[str, CompareOp] = {
    "r": "<=", "ro": "<=",
    "!": ">=", "!o": ">=",
    "t": ">=", "tt": ">=",
    "f": "<=",
}


def _condition_text(prefix: str, condition: Match) -> str:
    if isinstance(condition, FaceSet):
        return f"{prefix}[{','.join(str(v) for v in condition.values)}]"
    if condition.op == BARE_OP[prefix]:
        return f"{prefix}{condition.value}"
    return f"{prefix}{condition.op}{condition.value}"


def modifier_notation(modifier: Modifier) -> str:
    if isinstance(modifier, KeepHighest):
        return f"kh{modifier.count}"
    if isinstance(modifier, KeepLowest):
        return f"kl{modifier.count}"
    if isinstance(modifier, DropHighest):
        return f"dh{modifier.count}"
    if isinstance(modifier, DropLowest):
        return f"dl{modifier.count}"
    if isinstance(modifier, Reroll):
        return _condition_text("ro" if modifier.once else "r", modifier.condition)
    if isinstance(modifier, Explode):
        return _condition_text("!o" if modifier.once else "!", modifier.condition)
    if isinstance(modifier, TargetSuccess):
        return _condition_text("tt" if modifier.points == 2 else "t", modifier.condition)
    if isinstance(modifier, TargetFailure):
        return _condition_text("f", modifier.condition)
    raise TypeError(f"Unknown modifier: {modifier!r}")


def dice_notation(term: DiceTerm) -> str:
    size = "F" if term.fudge else str(term.sides)
    return f"{term.count}d{size}" + "".join(modifier_notation(m) for m in term.modifiers)


def operand_notation(child: Expression, parent_op: str, is_right: bool) -> str:
    """Render a BinaryOp operand, parenthesized when precedence requires it."""
    text = to_notation(child)
    if isinstance(child, BinaryOp):
        child_prec = PRECEDENCE[child.op]
        parent_prec = PRECEDENCE[parent_op]
        if child_prec < parent_prec or (is_right and child_prec == parent_prec):
            return f"({text})"
    return text


_REPEAT_MARK = {RepeatMode.SUM: "^+", RepeatMode.EACH: "^", RepeatMode.SORT: "^#"}


def to_notation(expr: Expression) -> str:
    """Serialize an expression to canonical dice notation that parses back to it."""
    if isinstance(expr, Literal):
        return str(expr.value)
    if isinstance(expr, DiceTerm):
        return dice_notation(expr)
    if isinstance(expr, BinaryOp):
        left = operand_notation(expr.left, expr.op, is_right=False)
        right = operand_notation(expr.right, expr.op, is_right=True)
        return f"{left} {expr.op} {right}"
    if isinstance(expr, Repeat):
        return f"{to_notation(expr.inner)} {_REPEAT_MARK[expr.mode]} {expr.count}"
    if isinstance(expr, Variable):
        return f"${expr.name}"
    raise TypeError(f"Unknown expression node: {expr!r}")


def expression_depth(expr: Expression) -> int:
    """Height of the tree, counting operators, variables and repeats.

    Walks with an explicit stack, so it is safe on trees of any depth.
    """
    height = 0
    stack = [(expr, 0)]
    while stack:
        node, level = stack.pop()
        height = max(height, level)
        if isinstance(node, BinaryOp):
            stack.append((node.left, level + 1))
            stack.append((node.right, level + 1))
        elif isinstance(node, Variable):
            stack.append((node.expression, level + 1))
        elif isinstance(node, Repeat):
            stack.append((node.inner, level + 1))
    return height
