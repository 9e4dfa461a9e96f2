"""Tests for src/dicey/engine/random_source.py."""
from __future__ import annotations

import threading

import pytest

from dicey.engine.random_source import PseudoRandomSource, RandomSource, SequenceRandomSource
from dicey.errors import RollSemanticError


class TestPseudoRandomSource:
    @pytest.mark.parametrize("sides", [1, 2, 6, 20, 100])
    def test_in_range(self, sides):
        source = PseudoRandomSource(seed=3)
        for _ in range(200):
            assert 1 <= source.roll_die(sides) <= sides

    def test_seed_is_reproducible(self):
        a = PseudoRandomSource(seed=99)
        b = PseudoRandomSource(seed=99)
        assert [a.roll_die(20) for _ in range(50)] == [b.roll_die(20) for _ in range(50)]

    def test_satisfies_protocol(self):
        assert isinstance(PseudoRandomSource(), RandomSource)
        assert isinstance(SequenceRandomSource([]), RandomSource)

    def test_shared_between_threads(self):
        source = PseudoRandomSource(seed=5)
        rolls: list[int] = []
        lock = threading.Lock()

        def worker():
            local = [source.roll_die(6) for _ in range(500)]
            with lock:
                rolls.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(rolls) == 2000
        assert set(rolls) <= {1, 2, 3, 4, 5, 6}


class TestSequenceRandomSource:
    def test_replays_in_order(self):
        source = SequenceRandomSource([3, 1, 6])
        assert [source.roll_die(6) for _ in range(3)] == [3, 1, 6]
        assert source.draws == 3
        assert source.remaining == 0

    def test_exhausted(self):
        source = SequenceRandomSource([2])
        source.roll_die(6)
        with pytest.raises(RollSemanticError, match="exhausted after 1 draws"):
            source.roll_die(6)

    @pytest.mark.parametrize("value", [0, 7])
    def test_value_must_fit_die(self, value):
        source = SequenceRandomSource([value])
        with pytest.raises(RollSemanticError, match="not a face of a d6"):
            source.roll_die(6)
        assert source.draws == 0
