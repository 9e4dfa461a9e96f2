"""Tests for src/dicey/engine/roller.py."""
from __future__ import annotations

import pytest

from dicey.engine.formatter import format_result
from dicey.engine.random_source import PseudoRandomSource
from dicey.engine.roller import Session, roll
from dicey.errors import RollSemanticError, RollSyntaxError
from dicey.models.expression import DiceTerm


class TestRoll:
    def test_parse_and_roll(self, faces):
        result = roll("2d6+3", faces(4, 5))
        assert result.total == 12
        assert result.notation == "2d6 + 3"

    def test_default_source(self):
        for _ in range(20):
            assert roll("1d1+5").total == 6
            assert 2 <= roll("2d6").total <= 12

    def test_reason(self, faces):
        result = roll("1d20+2 : perception", faces(11))
        assert result.total == 13
        assert result.reason == "perception"

    def test_syntax_error_draws_nothing(self, faces):
        source = faces(1, 2)
        with pytest.raises(RollSyntaxError):
            roll("2d6 +", source)
        assert source.draws == 0

    def test_long_chain_is_rejected_before_rolling(self, faces):
        source = faces()
        with pytest.raises(RollSyntaxError, match="nested too deeply"):
            roll("+".join(["1d1"] * 200), source)
        assert source.draws == 0

    def test_longest_input_of_ones(self):
        with pytest.raises(RollSyntaxError):
            roll("+".join(["1"] * 500), PseudoRandomSource(1))

    def test_long_chain_within_limit(self):
        result = roll("+".join(["1"] * 101))
        assert result.total == 101
        assert format_result(result).endswith("= 101")

    def test_semantic_error_after_drawing(self, faces):
        source = faces(3, 3)
        with pytest.raises(RollSemanticError):
            roll("2d6/0", source)
        assert source.draws == 2


class TestSession:
    def test_assignment_then_use(self, faces):
        session = Session(faces(1, 2, 3, 4, 5, 6))
        first = session.execute("$str = 3d6")
        assert first.total == 6
        assert session.variables == {"str": DiceTerm(3, 6)}
        second = session.execute("$str + 1")
        assert second.total == 16

    def test_failed_assignment_does_not_bind(self, faces):
        session = Session(faces(4))
        with pytest.raises(RollSemanticError):
            session.execute("$x = 1d6/0")
        assert "x" not in session.variables

    def test_assignment_reason(self, faces):
        result = Session(faces(2, 2)).execute("$dmg = 2d6 : longsword")
        assert result.reason == "longsword"

    def test_rebinding(self, faces):
        session = Session(faces())
        session.execute("$x = 1")
        session.execute("$x = $x + 1")
        assert session.execute("$x * 10").total == 20

    def test_plain_line_with_reason(self, faces):
        result = Session(faces(6)).execute("1d6 : luck")
        assert result.reason == "luck"
        assert result.total == 6

    def test_clear(self, faces):
        session = Session(faces())
        session.execute("$x = 1")
        session.clear()
        with pytest.raises(RollSemanticError, match="undefined variable"):
            session.execute("$x")
