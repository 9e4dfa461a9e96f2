"""Sources of die faces."""
from __future__ import annotations

import random
import threading
from typing import Iterable, Protocol, runtime_checkable

from dicey.errors import RollSemanticError


@runtime_checkable
class RandomSource(Protocol):
    def roll_die(self, sides: int) -> int:
        """Return a uniformly distributed integer in ``[1, sides]``."""
        ...


class PseudoRandomSource:
    """Default source backed by ``random.Random``. Safe to share between threads."""

    def __init__(self, seed: int | None = None) -> None:
        self._random = random.Random(seed)
        self._lock = threading.Lock()

    def roll_die(self, sides: int) -> int:
        with self._lock:
            return self._random.randint(1, sides)


class SequenceRandomSource:
    """Replays a fixed list of faces, for tests and reproducing a roll."""

    def __init__(self, values: Iterable[int]) -> None:
        self._values = list(values)
        self.draws = 0

    @property
    def remaining(self) -> int:
        return len(self._values) - self.draws

    def roll_die(self, sides: int) -> int:
        if self.draws >= len(self._values):
            raise RollSemanticError(
                f"random sequence exhausted after {self.draws} draws"
            )
        value = self._values[self.draws]
        if not 1 <= value <= sides:
            raise RollSemanticError(f"sequence value {value} is not a face of a d{sides}")
        self.draws += 1
        return value
