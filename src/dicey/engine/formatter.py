"""Human-readable breakdowns of a roll, as plain text or markdown."""
from __future__ import annotations

from enum import Enum

from dicey.models.expression import PRECEDENCE, RepeatMode
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


class Verbosity(str, Enum):
    SHORT = "short"      # final kept values only, variables by name
    MEDIUM = "medium"    # every die with its fate
    VERBOSE = "verbose"  # also the notation of each dice term


_FUDGE_FACES = {1: "(+)", 0: "( )", -1: "(-)"}


def format_die(die: DieOutcome, markdown: bool = False) -> str:
    face = _FUDGE_FACES[die.value] if die.fudge else str(die.value)
    if die.exploded:
        face = f"!{face}"
    if die.status is DieStatus.DROPPED:
        return f"~~{face}~~" if markdown else f"Drop({face})"
    if die.status is DieStatus.REROLLED:
        return f"~~*{face}*~~" if markdown else f"Reroll({face})"
    return face


def _dice_list(items: list[str], markdown: bool) -> str:
    inner = ", ".join(items)
    return f"\\[{inner}\\]" if markdown else f"[{inner}]"


def _format_dice(node: RolledDice, markdown: bool, verbosity: Verbosity) -> str:
    if verbosity is Verbosity.SHORT:
        items = [format_die(d, markdown) for d in node.dice if d.status is DieStatus.KEPT]
    else:
        items = [format_die(d, markdown) for d in node.dice]
    text = _dice_list(items, markdown)
    if node.mode == "count":
        noun = "success" if node.total in (1, -1) else "successes"
        text = f"{text} ({node.total} {noun})"
    if verbosity is Verbosity.VERBOSE:
        text = f"{node.notation} {text}"
    return text


def _operand(child: RolledNode, parent_op: str, is_right: bool, markdown: bool, verbosity: Verbosity) -> str:
    text = format_history(child, markdown, verbosity)
    if isinstance(child, RolledBinary):
        child_prec = PRECEDENCE[child.op]
        parent_prec = PRECEDENCE[parent_op]
        if child_prec < parent_prec or (is_right and child_prec == parent_prec):
            return f"({text})"
    return text


def bold(value: object, markdown: bool) -> str:
    return f"**{value}**" if markdown else str(value)


def format_history(
    node: RolledNode,
    markdown: bool = False,
    verbosity: Verbosity = Verbosity.MEDIUM,
) -> str:
    """Render the rolls that produced a node, without its total."""
    if isinstance(node, RolledLiteral):
        return str(node.total)
    if isinstance(node, RolledDice):
        return _format_dice(node, markdown, verbosity)
    if isinstance(node, RolledBinary):
        left = _operand(node.left, node.op, False, markdown, verbosity)
        right = _operand(node.right, node.op, True, markdown, verbosity)
        op = "\\*" if markdown and node.op == "*" else node.op
        return f"{left} {op} {right}"
    if isinstance(node, RolledVariable):
        if verbosity is Verbosity.SHORT:
            return f"${node.name}"
        return f"(${node.name}: {format_history(node.inner, markdown, verbosity)})"
    if isinstance(node, RolledRepeat):
        groups = [
            f"({format_history(g, markdown, verbosity)} = {bold(g.total, markdown)})"
            for g in node.groups
        ]
        return (" + " if node.mode is RepeatMode.SUM else " ").join(groups)
    raise TypeError(f"Unknown rolled node: {node!r}")


def format_result(
    result: RollResult,
    markdown: bool = False,
    verbosity: Verbosity = Verbosity.MEDIUM,
) -> str:
    """One-line breakdown: ``history = total`` plus any reason."""
    text = format_history(result.rolled, markdown, verbosity)
    if result.total is not None:
        text = f"{text} = {bold(result.total, markdown)}"
    if result.reason:
        text = f"{text} : {result.reason}"
    return text
