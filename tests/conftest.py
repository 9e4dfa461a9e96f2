"""Shared fixtures for the dicey test suite."""
from __future__ import annotations

from typing import Callable

import pytest

from dicey.engine.random_source import PseudoRandomSource, SequenceRandomSource


@pytest.fixture
def faces() -> Callable[..., SequenceRandomSource]:
    """Factory for a source that yields the given faces in order."""

    def _make(*values: int) -> SequenceRandomSource:
        return SequenceRandomSource(values)

    return _make


@pytest.fixture
def seeded_source() -> PseudoRandomSource:
    return PseudoRandomSource(seed=42)
