"""Dice notation parser. Pure, no I/O.

Grammar, lowest precedence first::

    line      := expr [repeat] [":" reason]
    repeat    := "^" ["+" | "#"] INT
    expr      := term (("+" | "-") term)*
    term      := factor (("*" | "/") factor)*
    factor    := dice | ["-"] INT | "(" expr ")" | "$" NAME
    dice      := [INT] "d" (INT | "%" | "F") modifier*

Modifiers: ``kh kl k dh dl d`` take an optional count (default 1);
``r ro ! !o`` take an optional condition; ``t tt f`` require one.
Modifiers may be separated by whitespace. A condition is
``=n <n >n <=n >=n``, a bare ``n``, or a set of faces ``[2,4,6]``.
Parentheses may nest, and the tree (operators, variables, repeat) may
grow, at most ``Limits.max_depth`` levels deep.
"""
from __future__ import annotations

import logging
import re
from typing import Mapping

from dicey.config import DEFAULT_LIMITS, Limits
from dicey.errors import RollSemanticError, RollSyntaxError
from dicey.models.expression import (
    BARE_OP,
    Assignment,
    BinaryOp,
    Command,
    Condition,
    DiceTerm,
    DropHighest,
    DropLowest,
    Explode,
    Expression,
    FaceSet,
    KeepHighest,
    KeepLowest,
    Literal,
    Match,
    Modifier,
    Repeat,
    RepeatMode,
    Reroll,
    TargetFailure,
    TargetSuccess,
    Variable,
    expression_depth,
    to_notation,
)

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"\d+")
_SIGNED_INT_RE = re.compile(r"-?\d+")
_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_COMPARE_RE = re.compile(r"<=|>=|=|<|>")
_ASSIGNMENT_RE = re.compile(r"^\$([A-Za-z_][A-Za-z0-9_]*)\s*=(?!=)\s*")


class _Parser:
    def __init__(
        self,
        text: str,
        variables: Mapping[str, Expression],
        limits: Limits,
        start: int = 0,
    ) -> None:
        self.text = text
        self.variables = variables
        self.limits = limits
        self.pos = start
        self.parens = 0

    # -- Helpers --

    def _peek(self, size: int = 1) -> str:
        return self.text[self.pos:self.pos + size]

    def _skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _error(self, message: str, position: int | None = None) -> RollSyntaxError:
        return RollSyntaxError(self.pos if position is None else position, message)

    def _unexpected(self, expected: str | None = None) -> RollSyntaxError:
        if self.pos >= len(self.text):
            message = "unexpected end of input"
        else:
            message = f"unexpected '{self.text[self.pos]}'"
        if expected:
            message = f"{message}, expected {expected}"
        return self._error(message)

    def _match(self, pattern: re.Pattern) -> str | None:
        m = pattern.match(self.text, self.pos)
        if not m:
            return None
        self.pos = m.end()
        return m.group(0)

    def _integer(self, expected: str) -> int:
        digits = self._match(_INT_RE)
        if digits is None:
            raise self._unexpected(expected)
        return int(digits)

    # -- Grammar --

    def _check_depth(self, depth: int, position: int) -> int:
        if depth > self.limits.max_depth:
            raise self._error("expression is nested too deeply", position)
        return depth

    def parse_line(self, allow_reason: bool) -> tuple[Expression, str | None]:
        self._skip_ws()
        if self.pos >= len(self.text):
            raise self._error("expected an expression")
        expr, depth = self._expression()
        self._skip_ws()
        if self._peek() == "^":
            self._check_depth(depth + 1, self.pos)
            expr = self._repeat(expr)
            self._skip_ws()
        reason = None
        if allow_reason and self._peek() == ":":
            reason = self.text[self.pos + 1:].strip() or None
            self.pos = len(self.text)
        if self.pos < len(self.text):
            raise self._unexpected("an operator" if not allow_reason else "an operator or ':'")
        return expr, reason

    def _repeat(self, inner: Expression) -> Repeat:
        self.pos += 1
        mode = RepeatMode.EACH
        if self._peek() == "+":
            mode = RepeatMode.SUM
            self.pos += 1
        elif self._peek() == "#":
            mode = RepeatMode.SORT
            self.pos += 1
        self._skip_ws()
        count = self._integer("a repeat count")
        if not 1 <= count <= self.limits.max_repeat:
            raise RollSemanticError(
                f"repeat count must be between 1 and {self.limits.max_repeat}, got {count}"
            )
        return Repeat(count=count, inner=inner, mode=mode)

    # Each rule returns the node and the height of its tree.

    def _expression(self) -> tuple[Expression, int]:
        left, depth = self._term()
        while True:
            self._skip_ws()
            op = self._peek()
            if op not in ("+", "-"):
                return left, depth
            op_pos = self.pos
            self.pos += 1
            right, right_depth = self._term()
            depth = self._check_depth(1 + max(depth, right_depth), op_pos)
            left = BinaryOp(op, left, right)

    def _term(self) -> tuple[Expression, int]:
        left, depth = self._factor()
        while True:
            self._skip_ws()
            op = self._peek()
            if op not in ("*", "/"):
                return left, depth
            op_pos = self.pos
            self.pos += 1
            right, right_depth = self._factor()
            depth = self._check_depth(1 + max(depth, right_depth), op_pos)
            left = BinaryOp(op, left, right)

    def _factor(self) -> tuple[Expression, int]:
        self._skip_ws()
        start = self.pos
        ch = self._peek()

        if ch == "(":
            self.parens += 1
            if self.parens > self.limits.max_depth:
                raise self._error("expression is nested too deeply")
            self.pos += 1
            inner, depth = self._expression()
            self._skip_ws()
            if self._peek() != ")":
                raise self._unexpected(f"')' to close '(' at position {start}")
            self.pos += 1
            self.parens -= 1
            return inner, depth

        if ch == "$":
            variable = self._variable()
            return variable, self._check_depth(expression_depth(variable), start)

        number = self._match(_SIGNED_INT_RE)
        if number is not None:
            value = int(number)
            if self._peek().lower() == "d":
                if value < 0:
                    raise RollSemanticError(f"dice count cannot be negative, got {value}")
                return self._dice(value), 0
            return Literal(value), 0

        if ch.lower() == "d":
            return self._dice(None), 0

        raise self._unexpected("a number, a die or '('")

    def _variable(self) -> Variable:
        self.pos += 1
        name = self._match(_NAME_RE)
        if name is None:
            raise self._unexpected("a variable name after '$'")
        if name not in self.variables:
            raise RollSemanticError(f"undefined variable ${name}")
        return Variable(name=name, expression=self.variables[name])

    def _dice(self, count: int | None) -> DiceTerm:
        self.pos += 1  # the "d"
        ch = self._peek()
        fudge = False
        if ch.isdigit():
            sides = self._integer("a die size")
        elif ch == "%":
            self.pos += 1
            sides = 100
        elif ch in ("F", "f"):
            self.pos += 1
            sides = 3
            fudge = True
        else:
            raise self._error("expected die size after 'd'")

        count = 1 if count is None else count
        if count > self.limits.max_dice:
            raise RollSemanticError(f"too many dice: {count} (max {self.limits.max_dice})")
        if sides < 1:
            raise RollSemanticError("a die needs at least one side")

        term = DiceTerm(count=count, sides=sides, fudge=fudge)
        modifiers: list[Modifier] = []
        while True:
            before = self.pos
            self._skip_ws()
            modifier = self._modifier(term)
            if modifier is None:
                self.pos = before
                break
            modifiers.append(modifier)
        return DiceTerm(count=count, sides=sides, modifiers=tuple(modifiers), fudge=fudge)

    def _modifier(self, term: DiceTerm) -> Modifier | None:
        two = self._peek(2).lower()
        ch = two[:1]

        if ch == "k":
            cls = KeepLowest if two == "kl" else KeepHighest
            self.pos += 2 if two in ("kh", "kl") else 1
            return cls(self._optional_count())
        if ch == "d":
            cls = DropHighest if two == "dh" else DropLowest
            self.pos += 2 if two in ("dh", "dl") else 1
            return cls(self._optional_count())
        if ch == "r":
            prefix = "ro" if two == "ro" else "r"
            self.pos += len(prefix)
            default = Condition("<=", term.min_face)
            return Reroll(self._condition(prefix, term, default), once=prefix == "ro")
        if ch == "!":
            prefix = "!o" if two == "!o" else "!"
            self.pos += len(prefix)
            default = Condition(">=", term.max_face)
            return Explode(self._condition(prefix, term, default), once=prefix == "!o")
        if ch == "t":
            prefix = "tt" if two == "tt" else "t"
            self.pos += len(prefix)
            return TargetSuccess(self._condition(prefix, term), points=len(prefix))
        if ch == "f":
            self.pos += 1
            return TargetFailure(self._condition("f", term))
        return None

    def _optional_count(self) -> int:
        digits = self._match(_INT_RE)
        return 1 if digits is None else int(digits)

    def _condition(
        self, prefix: str, term: DiceTerm, default: Condition | None = None
    ) -> Match:
        number_re = _SIGNED_INT_RE if term.fudge else _INT_RE
        if self._peek() == "[":
            return self._face_set(number_re)
        op = self._match(_COMPARE_RE)
        if op is not None:
            number = self._match(number_re)
            if number is None:
                raise self._unexpected(f"a number after '{op}'")
            return Condition(op, int(number))
        number = self._match(number_re)
        if number is not None:
            return Condition(BARE_OP[prefix], int(number))
        if default is None:
            raise self._unexpected(f"a condition after '{prefix}'")
        return default

    def _face_set(self, number_re: re.Pattern) -> FaceSet:
        self.pos += 1  # the "["
        values: list[int] = []
        while True:
            self._skip_ws()
            number = self._match(number_re)
            if number is None:
                raise self._unexpected("a face")
            values.append(int(number))
            self._skip_ws()
            if self._peek() == "]":
                self.pos += 1
                return FaceSet(tuple(values))
            if self._peek() != ",":
                raise self._unexpected("',' or ']'")
            self.pos += 1


def _prepare(text: str, limits: Limits) -> str:
    text = text.strip()
    if len(text) > limits.max_input_length:
        raise RollSyntaxError(
            limits.max_input_length,
            f"input is longer than {limits.max_input_length} characters",
        )
    return text


def parse(
    text: str,
    variables: Mapping[str, Expression] | None = None,
    limits: Limits = DEFAULT_LIMITS,
) -> Expression:
    """Parse dice notation into an expression tree.

    Raises:
        RollSyntaxError: The text is not valid notation.
        RollSemanticError: The notation is valid but cannot be rolled.
    """
    parser = _Parser(_prepare(text, limits), variables or {}, limits)
    expr, _ = parser.parse_line(allow_reason=False)
    logger.debug("Parsed %r as %s", text, to_notation(expr))
    return expr


def parse_command(
    text: str,
    variables: Mapping[str, Expression] | None = None,
    limits: Limits = DEFAULT_LIMITS,
) -> Command:
    """Parse a line that may end in ``: reason``."""
    parser = _Parser(_prepare(text, limits), variables or {}, limits)
    expr, reason = parser.parse_line(allow_reason=True)
    return Command(expression=expr, reason=reason)


def is_assignment(text: str) -> bool:
    return _ASSIGNMENT_RE.match(text.strip()) is not None


def parse_assignment(
    text: str,
    variables: Mapping[str, Expression] | None = None,
    limits: Limits = DEFAULT_LIMITS,
) -> Assignment:
    """Parse ``$name = expression [: reason]``."""
    text = _prepare(text, limits)
    m = _ASSIGNMENT_RE.match(text)
    if not m:
        raise RollSyntaxError(0, "expected '$name = expression'")
    parser = _Parser(text, variables or {}, limits, start=m.end())
    expr, reason = parser.parse_line(allow_reason=True)
    return Assignment(name=m.group(1), expression=expr, reason=reason)
