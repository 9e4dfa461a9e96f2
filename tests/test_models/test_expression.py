"""Tests for src/dicey/models/expression.py."""
from __future__ import annotations

import dataclasses

import pytest

from dicey.engine.parser import parse
from dicey.models.expression import (
    Assignment,
    BinaryOp,
    Command,
    Condition,
    DiceTerm,
    FaceSet,
    KeepHighest,
    Literal,
    Repeat,
    RepeatMode,
    TargetSuccess,
    Variable,
    expression_depth,
    to_notation,
)


class TestCondition:
    @pytest.mark.parametrize("op, value, roll, expected", [
        ("=", 3, 3, True),
        ("=", 3, 4, False),
        ("<", 3, 2, True),
        ("<", 3, 3, False),
        (">", 3, 4, True),
        (">", 3, 3, False),
        ("<=", 3, 3, True),
        ("<=", 3, 4, False),
        (">=", 3, 3, True),
        (">=", 3, 2, False),
    ])
    def test_matches(self, op, value, roll, expected):
        assert Condition(op, value).matches(roll) is expected

    @pytest.mark.parametrize("roll, expected", [(2, True), (4, True), (3, False), (7, False)])
    def test_face_set(self, roll, expected):
        assert FaceSet((2, 4, 6)).matches(roll) is expected


class TestNodes:
    def test_structural_equality(self):
        assert DiceTerm(4, 6, (KeepHighest(3),)) == DiceTerm(4, 6, (KeepHighest(3),))
        assert DiceTerm(4, 6) != DiceTerm(4, 6, fudge=True)

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            Literal(1).value = 2

    def test_dice_faces(self):
        assert (DiceTerm(1, 6).min_face, DiceTerm(1, 6).max_face) == (1, 6)
        assert (DiceTerm(1, 3, fudge=True).min_face, DiceTerm(1, 3, fudge=True).max_face) == (-1, 1)


class TestToNotation:
    @pytest.mark.parametrize("text, canonical", [
        ("d6", "1d6"),
        ("4D6K3", "4d6kh3"),
        ("4d6d", "4d6dl1"),
        ("1d6r", "1d6r1"),
        ("1d6ro<3", "1d6ro<3"),
        ("1d6!", "1d6!6"),
        ("1d10!>8", "1d10!>8"),
        ("6d10tt10f=1", "6d10tt10f=1"),
        ("d%", "1d100"),
        ("4df", "4dF"),
        ("(1+2)*3", "(1 + 2) * 3"),
        ("1+2*3", "1 + 2 * 3"),
        ("8-(2-1)", "8 - (2 - 1)"),
        ("(8-2)-1", "8 - 2 - 1"),
        ("1d6 - -3", "1d6 - -3"),
        ("3d6^#6", "3d6 ^# 6"),
        ("3d6 ^+ 2", "3d6 ^+ 2"),
        ("4d6 kh3", "4d6kh3"),
        ("10d10 t7 tt9", "10d10t7tt9"),
        ("6d6 t[ 2, 4, 6 ]", "6d6t[2,4,6]"),
        ("4dF f[-1]", "4dFf[-1]"),
    ])
    def test_canonical_form(self, text, canonical):
        assert to_notation(parse(text)) == canonical

    @pytest.mark.parametrize("text", [
        "4d6kh3+2",
        "2d20kl1 - 1d4 * 3",
        "10/(1d6+1)/2",
        "4dFr!t1f-1",
        "6d10r1!>=9t8tt10",
        "(1d4+1)*2 ^ 3",
        "6d6t[2,4,6]f[1]r[3,5]",
        "4d6 r1 !o kh3",
    ])
    def test_round_trip(self, text):
        tree = parse(text)
        assert parse(to_notation(tree)) == tree

    def test_variable_serializes_by_name(self):
        expr = BinaryOp("+", Variable("str", DiceTerm(3, 6)), Literal(1))
        assert to_notation(expr) == "$str + 1"

    def test_repeat(self):
        assert to_notation(Repeat(4, DiceTerm(1, 20), RepeatMode.EACH)) == "1d20 ^ 4"


class TestExpressionDepth:
    @pytest.mark.parametrize("text, depth", [
        ("1", 0),
        ("4d6kh3", 0),
        ("1+2", 1),
        ("1+2*3", 2),
        ("(1+2)*(3+4)", 2),
        ("1+1+1+1", 3),
        ("1d6 ^ 3", 1),
    ])
    def test_depth(self, text, depth):
        assert expression_depth(parse(text)) == depth

    def test_variable_adds_a_level(self):
        bound = BinaryOp("+", Literal(1), Literal(2))
        assert expression_depth(Variable("x", bound)) == 2

    def test_very_deep_tree(self):
        expr = Literal(1)
        for _ in range(5000):
            expr = BinaryOp("-", expr, Literal(1))
        assert expression_depth(expr) == 5000

    def test_face_set_serialization(self):
        term = DiceTerm(6, 6, (TargetSuccess(FaceSet((6, 2))),))
        assert to_notation(term) == "6d6t[6,2]"


class TestCommands:
    def test_command_str(self):
        assert str(Command(DiceTerm(1, 20), "stealth")) == "1d20 : stealth"
        assert str(Command(Literal(3))) == "3"

    def test_assignment_str(self):
        assert str(Assignment("hp", DiceTerm(2, 8))) == "$hp = 2d8"
        assert str(Assignment("hp", DiceTerm(2, 8), "level 2")) == "$hp = 2d8 : level 2"
